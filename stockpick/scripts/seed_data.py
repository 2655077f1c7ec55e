import argparse
import logging

from sqlalchemy import delete, select

from stockpick.core.logging import setup_logging
from stockpick.database import SessionLocal, init_db
from stockpick.models.item import Item
from stockpick.models.order import Order, OrderItem
from stockpick.models.picker import Picker
from stockpick.stores.inventory_store import InventoryStore
from stockpick.stores.picker_directory import PickerDirectory

logger = logging.getLogger(__name__)

SAMPLE_ITEMS = (
    {"sku": "BOX-S-001", "name": "Shipping Box Small", "quantity": 120, "location": "A-01-1", "barcode": "6001234000011"},
    {"sku": "BOX-L-002", "name": "Shipping Box Large", "quantity": 45, "location": "A-01-3", "barcode": "6001234000028"},
    {"sku": "TAPE-003", "name": "Packing Tape 48mm", "quantity": 300, "location": "B-04-2", "barcode": "6001234000035"},
    {"sku": "LBL-004", "name": "Thermal Labels 100x150", "quantity": 80, "location": "B-05-1", "barcode": None},
)

SAMPLE_PICKERS = (
    ("Thandi", "Mokoena"),
    ("Pieter", "van Wyk"),
)


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample warehouse data.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    init_db()

    db = SessionLocal()
    try:
        if args.reset:
            db.execute(delete(OrderItem))
            db.execute(delete(Order))
            db.execute(delete(Item))
            db.execute(delete(Picker))
            db.commit()

        has_item = db.execute(select(Item.id).limit(1)).first()
        if has_item:
            logger.info("Seed skipped: items already exist.")
            return

        inventory = InventoryStore(db)
        for fields in SAMPLE_ITEMS:
            inventory.create(fields)

        directory = PickerDirectory(db)
        for name, surname in SAMPLE_PICKERS:
            directory.create(name, surname)

        db.commit()
        logger.info("Seeded %s items and %s pickers.", len(SAMPLE_ITEMS), len(SAMPLE_PICKERS))
    finally:
        db.close()


if __name__ == "__main__":
    main()
