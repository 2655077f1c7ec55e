from stockpick.database.base import Base
from stockpick.database.engine import create_db_engine, engine, init_db
from stockpick.database.session import SessionLocal, create_session_factory

__all__ = [
    "Base",
    "SessionLocal",
    "create_db_engine",
    "create_session_factory",
    "engine",
    "init_db",
]
