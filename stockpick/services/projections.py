"""Read-only views over orders and items for presentation.

The plain functions work on any sequence of records and never touch the
database; :class:`ProjectionService` loads the records and applies them.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import sessionmaker

from stockpick.core.constants import STATUS_PRIORITY, OrderStatus, OrderType
from stockpick.models.item import Item
from stockpick.models.order import Order
from stockpick.stores.inventory_store import InventoryStore
from stockpick.stores.order_store import OrderStore

_UNKNOWN_PRIORITY = max(STATUS_PRIORITY.values()) + 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def search_items(items: Iterable[Item], term: Optional[str]) -> List[Item]:
    query = (term or "").strip().lower()
    if not query:
        return list(items)
    matches = []
    for item in items:
        haystack = (item.sku or "", item.name or "", item.barcode or "")
        if any(query in value.lower() for value in haystack):
            matches.append(item)
    return matches


def store_names(orders: Iterable[Order]) -> List[str]:
    return sorted({order.store_name for order in orders if order.store_name})


def filter_orders_by_store(orders: Iterable[Order], store_name: Optional[str]) -> List[Order]:
    if not store_name:
        return list(orders)
    return [order for order in orders if order.store_name == store_name]


def filter_orders_by_status(orders: Iterable[Order], statuses: Optional[Iterable[OrderStatus]]) -> List[Order]:
    if not statuses:
        return list(orders)
    wanted = {OrderStatus(status) for status in statuses}
    return [order for order in orders if order.status in wanted]


def _created_key(order: Order) -> float:
    created_at = order.created_at or _EPOCH
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.timestamp()


def sort_orders_by_priority(orders: Iterable[Order]) -> List[Order]:
    """Pending first, then processing/ready, completed, cancelled; newest first within a tier."""
    return sorted(
        orders,
        key=lambda order: (
            STATUS_PRIORITY.get(order.status, _UNKNOWN_PRIORITY),
            -_created_key(order),
        ),
    )


class ProjectionService:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def list_orders(
        self,
        order_type: Optional[OrderType] = None,
        store_name: Optional[str] = None,
        statuses: Optional[Sequence[OrderStatus]] = None,
    ) -> List[Order]:
        with self._session_factory() as db:
            store = OrderStore(db)
            orders = store.list_by_type(order_type) if order_type else store.list()
        orders = filter_orders_by_store(orders, store_name)
        orders = filter_orders_by_status(orders, statuses)
        return sort_orders_by_priority(orders)

    def list_store_names(self) -> List[str]:
        with self._session_factory() as db:
            orders = OrderStore(db).list_by_type(OrderType.STORE)
        return store_names(orders)

    def search_items(self, term: Optional[str] = None) -> List[Item]:
        with self._session_factory() as db:
            items = InventoryStore(db).list()
        return search_items(items, term)


__all__ = [
    "ProjectionService",
    "filter_orders_by_status",
    "filter_orders_by_store",
    "search_items",
    "sort_orders_by_priority",
    "store_names",
]
