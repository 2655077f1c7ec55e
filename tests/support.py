from stockpick.database.base import Base
from stockpick.database.engine import create_db_engine
from stockpick.database.session import create_session_factory
from stockpick.models import import_all_models
from stockpick.stores.inventory_store import InventoryStore
from stockpick.stores.picker_directory import PickerDirectory


def make_memory_engine():
    engine = create_db_engine("sqlite://")
    import_all_models()
    Base.metadata.create_all(bind=engine)
    return engine


def make_file_engine(path):
    engine = create_db_engine("sqlite:///{}".format(path))
    import_all_models()
    Base.metadata.create_all(bind=engine)
    return engine


def make_session_factory(engine=None):
    return create_session_factory(engine or make_memory_engine())


def seed_item(session_factory, **fields):
    values = {"sku": "SKU-1", "name": "Widget", "quantity": 10, "location": "A-01"}
    values.update(fields)
    with session_factory() as db:
        item_id = InventoryStore(db).create(values)
        db.commit()
    return item_id


def seed_picker(session_factory, name="Thandi", surname="Mokoena"):
    with session_factory() as db:
        picker_id = PickerDirectory(db).create(name, surname)
        db.commit()
    return picker_id


def item_quantity(session_factory, item_id):
    with session_factory() as db:
        return InventoryStore(db).get(item_id).quantity
