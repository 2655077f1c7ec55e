from stockpick.stores.inventory_store import InventoryStore
from stockpick.stores.order_store import OrderStore, generate_order_number
from stockpick.stores.picker_directory import PickerDirectory

__all__ = ["InventoryStore", "OrderStore", "PickerDirectory", "generate_order_number"]
