from stockpick.routers.health import router as health_router
from stockpick.routers.items import router as items_router
from stockpick.routers.orders import router as orders_router
from stockpick.routers.pickers import router as pickers_router

__all__ = [
    "health_router",
    "items_router",
    "orders_router",
    "pickers_router",
]
