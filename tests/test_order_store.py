import re
import unittest
from datetime import datetime, timezone

from support import make_session_factory

from stockpick.core.constants import OrderStatus, OrderType
from stockpick.core.errors import Conflict, NotFound, ValidationFailed
from stockpick.models.order import Order, OrderItem
from stockpick.stores.order_store import OrderStore, generate_order_number

CREATED_AT = datetime(2026, 3, 14, 9, 26, 53, 589793, tzinfo=timezone.utc)


def build_order(order_type=OrderType.STORE, created_at=None, **fields):
    order = Order(order_type=order_type, created_at=created_at, **fields)
    order.items = [
        OrderItem(position=0, item_id=1, sku="A", name="Box", location="A-01", quantity=2),
        OrderItem(position=1, item_id=2, sku="B", name="Tape", location="B-01", barcode="600", quantity=1),
    ]
    return order


class OrderNumberTest(unittest.TestCase):
    def test_prefix_year_and_time_suffix(self):
        number = generate_order_number(OrderType.STORE, CREATED_AT)
        self.assertRegex(number, r"^ST-2026-\d{8}$")
        self.assertTrue(generate_order_number(OrderType.ECOMMERCE, CREATED_AT).startswith("EC-2026-"))

    def test_attempt_changes_suffix(self):
        self.assertNotEqual(
            generate_order_number(OrderType.STORE, CREATED_AT, 0),
            generate_order_number(OrderType.STORE, CREATED_AT, 1),
        )


class OrderStoreTest(unittest.TestCase):
    def setUp(self):
        self.Session = make_session_factory()

    def _create(self, **kwargs):
        with self.Session() as db:
            order_id = OrderStore(db).create(build_order(**kwargs))
            db.commit()
        return order_id

    def test_create_assigns_number_status_and_version(self):
        order_id = self._create(store_name="Main")

        with self.Session() as db:
            order = OrderStore(db).get(order_id)

        self.assertTrue(re.match(r"^ST-\d{4}-\d{8}$", order.order_number))
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertEqual(order.version, 1)
        self.assertEqual(order.total_items, 3)
        self.assertEqual(order.scanned_quantities, {1: 0, 2: 0})
        self.assertEqual([line.sku for line in order.items], ["A", "B"])

    def test_create_retries_taken_order_number(self):
        first = self._create(created_at=CREATED_AT)
        second = self._create(created_at=CREATED_AT)

        with self.Session() as db:
            store = OrderStore(db)
            numbers = {store.get(first).order_number, store.get(second).order_number}

        self.assertEqual(
            numbers,
            {
                generate_order_number(OrderType.STORE, CREATED_AT, 0),
                generate_order_number(OrderType.STORE, CREATED_AT, 1),
            },
        )

    def test_create_gives_up_when_numbers_exhausted(self):
        self._create(created_at=CREATED_AT)
        with self.Session() as db:
            with self.assertRaises(Conflict):
                OrderStore(db).create(build_order(created_at=CREATED_AT), max_attempts=1)

    def test_create_requires_line_items(self):
        with self.Session() as db:
            with self.assertRaises(ValidationFailed):
                OrderStore(db).create(Order(order_type=OrderType.STORE))

    def test_list_by_type(self):
        store_order = self._create(order_type=OrderType.STORE)
        web_order = self._create(order_type=OrderType.ECOMMERCE)

        with self.Session() as db:
            store = OrderStore(db)
            self.assertEqual([o.id for o in store.list_by_type(OrderType.STORE)], [store_order])
            self.assertEqual([o.id for o in store.list_by_type("ecommerce")], [web_order])
            self.assertEqual(len(store.list()), 2)

    def test_update_is_compare_and_set_on_version(self):
        order_id = self._create()

        with self.Session() as db:
            store = OrderStore(db)
            new_version = store.update(order_id, {"notes": "fragile"}, expected_version=1)
            db.commit()
        self.assertEqual(new_version, 2)

        with self.Session() as db:
            with self.assertRaises(Conflict):
                OrderStore(db).update(order_id, {"status": OrderStatus.PROCESSING}, expected_version=1)

        with self.Session() as db:
            order = OrderStore(db).get(order_id)
        self.assertEqual(order.notes, "fragile")
        self.assertEqual(order.status, OrderStatus.PENDING)

    def test_update_rejects_unknown_fields_and_missing_orders(self):
        order_id = self._create()
        with self.Session() as db:
            store = OrderStore(db)
            with self.assertRaises(ValidationFailed):
                store.update(order_id, {"order_number": "X"})
            with self.assertRaises(NotFound):
                store.update(999, {"notes": "x"})

    def test_increment_scanned_stops_at_requested_quantity(self):
        order_id = self._create()

        with self.Session() as db:
            store = OrderStore(db)
            line = store.get(order_id).items[0]
            results = [store.increment_scanned(line.id) for _ in range(3)]
            db.commit()

        self.assertEqual(results, [True, True, False])
        with self.Session() as db:
            order = OrderStore(db).get(order_id)
        self.assertEqual(order.scanned_quantities, {1: 2, 2: 0})

    def test_delete_removes_order_and_lines(self):
        order_id = self._create()
        with self.Session() as db:
            OrderStore(db).delete(order_id)
            db.commit()
        with self.Session() as db:
            with self.assertRaises(NotFound):
                OrderStore(db).get(order_id)
            self.assertEqual(db.query(OrderItem).count(), 0)


if __name__ == "__main__":
    unittest.main()
