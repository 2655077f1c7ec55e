import importlib

from stockpick.models.item import Item
from stockpick.models.order import Order, OrderItem
from stockpick.models.picker import Picker


def import_all_models() -> None:
    for module_name in (
        "stockpick.models.item",
        "stockpick.models.order",
        "stockpick.models.picker",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Item",
    "Order",
    "OrderItem",
    "Picker",
    "import_all_models",
]
