import unittest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from support import make_session_factory, seed_item

from stockpick.core.constants import OrderStatus, OrderType
from stockpick.services.order_lifecycle import OrderLifecycleService
from stockpick.services.projections import (
    ProjectionService,
    filter_orders_by_status,
    filter_orders_by_store,
    search_items,
    sort_orders_by_priority,
    store_names,
)

BASE_TIME = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)


def order(label, status, minutes=0, store_name=None):
    return SimpleNamespace(
        label=label,
        status=status,
        store_name=store_name,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


def item(sku, name, barcode=None):
    return SimpleNamespace(sku=sku, name=name, barcode=barcode)


class ProjectionFunctionsTest(unittest.TestCase):
    def test_priority_sort_puts_pending_first_and_newest_first(self):
        orders = [
            order("cancelled", OrderStatus.CANCELLED, minutes=50),
            order("old-pending", OrderStatus.PENDING, minutes=1),
            order("ready", OrderStatus.READY, minutes=30),
            order("completed", OrderStatus.COMPLETED, minutes=40),
            order("new-pending", OrderStatus.PENDING, minutes=20),
            order("processing", OrderStatus.PROCESSING, minutes=10),
        ]

        labels = [entry.label for entry in sort_orders_by_priority(orders)]

        self.assertEqual(
            labels,
            ["new-pending", "old-pending", "ready", "processing", "completed", "cancelled"],
        )

    def test_priority_sort_accepts_naive_timestamps(self):
        aware = order("aware", OrderStatus.PENDING, minutes=5)
        naive = order("naive", OrderStatus.PENDING)
        naive.created_at = (BASE_TIME + timedelta(minutes=10)).replace(tzinfo=None)

        labels = [entry.label for entry in sort_orders_by_priority([aware, naive])]

        self.assertEqual(labels, ["naive", "aware"])

    def test_search_matches_sku_name_and_barcode(self):
        items = [
            item("BX-100", "Cardboard box", "600100"),
            item("TP-200", "Packing tape", "600200"),
            item("LB-300", "Shipping label"),
        ]

        self.assertEqual([i.sku for i in search_items(items, "box")], ["BX-100"])
        self.assertEqual([i.sku for i in search_items(items, "tp-2")], ["TP-200"])
        self.assertEqual([i.sku for i in search_items(items, "6002")], ["TP-200"])
        self.assertEqual(len(search_items(items, "  ")), 3)
        self.assertEqual(search_items(items, "pallet"), [])

    def test_store_names_are_distinct_and_sorted(self):
        orders = [
            order("a", OrderStatus.PENDING, store_name="Waterfront"),
            order("b", OrderStatus.PENDING, store_name="Claremont"),
            order("c", OrderStatus.READY, store_name="Waterfront"),
            order("d", OrderStatus.READY),
        ]

        self.assertEqual(store_names(orders), ["Claremont", "Waterfront"])

    def test_filters(self):
        orders = [
            order("a", OrderStatus.PENDING, store_name="Waterfront"),
            order("b", OrderStatus.COMPLETED, store_name="Claremont"),
            order("c", OrderStatus.READY, store_name="Waterfront"),
        ]

        self.assertEqual(
            [o.label for o in filter_orders_by_store(orders, "Waterfront")], ["a", "c"]
        )
        self.assertEqual(len(filter_orders_by_store(orders, None)), 3)
        self.assertEqual(
            [o.label for o in filter_orders_by_status(orders, ["completed", OrderStatus.READY])],
            ["b", "c"],
        )


class ProjectionServiceTest(unittest.TestCase):
    def setUp(self):
        self.Session = make_session_factory()
        self.lifecycle = OrderLifecycleService(self.Session)
        self.projections = ProjectionService(self.Session)
        self.item_id = seed_item(self.Session, sku="BX-100", name="Cardboard box", quantity=20)

    def test_list_orders_by_type_and_store(self):
        first = self.lifecycle.create_order(
            OrderType.STORE, [(self.item_id, 1)], store_name="Waterfront"
        )
        second = self.lifecycle.create_order(
            OrderType.STORE, [(self.item_id, 1)], store_name="Claremont"
        )
        online = self.lifecycle.create_order(
            OrderType.ECOMMERCE,
            [(self.item_id, 1)],
            customer_name="Lee",
            customer_email="lee@example.com",
            shipping_address="1 Long Street",
        )
        self.lifecycle.cancel_order(second)

        store_orders = self.projections.list_orders(order_type=OrderType.STORE)
        self.assertEqual([o.id for o in store_orders], [first, second])
        self.assertEqual(
            [o.id for o in self.projections.list_orders(store_name="Claremont")], [second]
        )
        self.assertEqual(
            [o.id for o in self.projections.list_orders(order_type="ecommerce")], [online]
        )
        self.assertEqual(
            [o.id for o in self.projections.list_orders(statuses=[OrderStatus.CANCELLED])],
            [second],
        )
        self.assertEqual(self.projections.list_store_names(), ["Claremont", "Waterfront"])

    def test_search_items(self):
        seed_item(self.Session, sku="TP-200", name="Packing tape")

        self.assertEqual([i.sku for i in self.projections.search_items("tape")], ["TP-200"])
        self.assertEqual(len(self.projections.search_items()), 2)


if __name__ == "__main__":
    unittest.main()
