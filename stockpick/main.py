import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stockpick.config import Settings, get_settings
from stockpick.core.errors import (
    Conflict,
    InsufficientStock,
    InvalidState,
    NegativeStock,
    NotFound,
    NotInOrder,
    StockpickError,
    ValidationFailed,
)
from stockpick.core.logging import setup_logging
from stockpick.database import init_db
from stockpick.routers import health_router, items_router, orders_router, pickers_router

logger = logging.getLogger(__name__)

_ERROR_STATUS = (
    (ValidationFailed, 422),
    (NotInOrder, 422),
    (NotFound, 404),
    (InsufficientStock, 409),
    (InvalidState, 409),
    (NegativeStock, 409),
    (Conflict, 503),
)


def status_for_error(exc: StockpickError) -> int:
    for error_cls, status_code in _ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status_code
    return 500


async def handle_stockpick_error(_request: Request, exc: StockpickError):
    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.warning("Request failed: %s", exc)
    headers = {"Retry-After": "1"} if status_code == 503 else None
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


setup_logging()
settings: Settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.add_exception_handler(StockpickError, handle_stockpick_error)

app.include_router(health_router)
app.include_router(items_router)
app.include_router(orders_router)
app.include_router(pickers_router)


__all__ = ["app", "handle_stockpick_error", "status_for_error"]
