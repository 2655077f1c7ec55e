import unittest

from support import item_quantity, make_session_factory, seed_item

from stockpick.core.errors import InvalidState, NegativeStock, NotFound, ValidationFailed
from stockpick.services.order_lifecycle import OrderLifecycleService
from stockpick.stores.inventory_store import InventoryStore


class InventoryStoreTest(unittest.TestCase):
    def setUp(self):
        self.Session = make_session_factory()

    def test_create_and_get_item(self):
        item_id = seed_item(self.Session, sku=" DRS-1001 ", barcode="6001", image_url="/img/1.png")

        with self.Session() as db:
            item = InventoryStore(db).get(item_id)

        self.assertEqual(item.sku, "DRS-1001")
        self.assertEqual(item.quantity, 10)
        self.assertEqual(item.barcode, "6001")
        self.assertEqual(item.image_url, "/img/1.png")
        self.assertIsNotNone(item.created_at)
        self.assertIsNotNone(item.updated_at)

    def test_create_rejects_missing_name_and_negative_quantity(self):
        with self.Session() as db:
            store = InventoryStore(db)
            with self.assertRaises(ValidationFailed):
                store.create({"sku": "A-1", "name": "  ", "quantity": 1})
            with self.assertRaises(ValidationFailed):
                store.create({"sku": "A-1", "name": "Box", "quantity": -1})
            with self.assertRaises(ValidationFailed):
                store.create({"sku": "A-1", "name": "Box", "colour": "red"})

    def test_get_unknown_item_raises_not_found(self):
        with self.Session() as db:
            with self.assertRaises(NotFound):
                InventoryStore(db).get(999)

    def test_list_returns_newest_first(self):
        first = seed_item(self.Session, sku="A")
        second = seed_item(self.Session, sku="B")

        with self.Session() as db:
            ids = [item.id for item in InventoryStore(db).list()]

        self.assertEqual(ids, [second, first])

    def test_update_edits_fields_and_rejects_negative_quantity(self):
        item_id = seed_item(self.Session)

        with self.Session() as db:
            store = InventoryStore(db)
            store.update(item_id, {"name": "Renamed", "location": "B-02", "quantity": 4})
            db.commit()
            with self.assertRaises(ValidationFailed):
                store.update(item_id, {"quantity": -3})
            db.rollback()

        with self.Session() as db:
            item = InventoryStore(db).get(item_id)
        self.assertEqual(item.name, "Renamed")
        self.assertEqual(item.location, "B-02")
        self.assertEqual(item.quantity, 4)

    def test_adjust_quantity_increments_and_decrements(self):
        item_id = seed_item(self.Session, quantity=5)

        with self.Session() as db:
            store = InventoryStore(db)
            store.adjust_quantity(item_id, -5)
            store.adjust_quantity(item_id, 2)
            db.commit()

        self.assertEqual(item_quantity(self.Session, item_id), 2)

    def test_adjust_quantity_below_zero_conflicts_and_leaves_stock(self):
        item_id = seed_item(self.Session, quantity=3)

        with self.Session() as db:
            with self.assertRaises(NegativeStock):
                InventoryStore(db).adjust_quantity(item_id, -4)
            db.commit()

        self.assertEqual(item_quantity(self.Session, item_id), 3)

    def test_adjust_quantity_unknown_item(self):
        with self.Session() as db:
            with self.assertRaises(NotFound):
                InventoryStore(db).adjust_quantity(42, 1)

    def test_delete_refused_while_reserved_by_active_order(self):
        item_id = seed_item(self.Session, quantity=5)
        lifecycle = OrderLifecycleService(self.Session)
        order_id = lifecycle.create_order("store", [(item_id, 2)], store_name="Main")

        with self.Session() as db:
            with self.assertRaises(InvalidState):
                InventoryStore(db).delete(item_id)

        lifecycle.cancel_order(order_id)
        with self.Session() as db:
            InventoryStore(db).delete(item_id)
            db.commit()
        with self.Session() as db:
            with self.assertRaises(NotFound):
                InventoryStore(db).get(item_id)


if __name__ == "__main__":
    unittest.main()
