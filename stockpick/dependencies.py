from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import sessionmaker

from stockpick.config import get_settings
from stockpick.core.security import authenticate_request
from stockpick.database.session import SessionLocal
from stockpick.services.order_lifecycle import OrderLifecycleService
from stockpick.services.projections import ProjectionService


def get_session_factory() -> sessionmaker:
    return SessionLocal


def get_db(session_factory: sessionmaker = Depends(get_session_factory)):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def get_lifecycle_service(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> OrderLifecycleService:
    settings = get_settings()
    return OrderLifecycleService(
        session_factory,
        max_conflict_retries=settings.ORDER_CONFLICT_MAX_RETRIES,
        order_number_attempts=settings.ORDER_NUMBER_MAX_ATTEMPTS,
    )


def get_projection_service(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> ProjectionService:
    return ProjectionService(session_factory)


def require_auth(
    api_key: Optional[str] = Header(None, alias="X-API-Key"),
    authorization: Optional[str] = Header(None),
):
    return authenticate_request(
        api_key=api_key,
        authorization=authorization,
        require_auth=True,
    )


__all__ = [
    "get_db",
    "get_lifecycle_service",
    "get_projection_service",
    "get_session_factory",
    "require_auth",
]
