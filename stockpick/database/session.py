from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from stockpick.database.engine import engine


def create_session_factory(db_engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=db_engine,
    )


SessionLocal = create_session_factory(engine)
