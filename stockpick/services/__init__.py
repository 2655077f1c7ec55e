from stockpick.services.order_lifecycle import (
    LineProgress,
    OrderLifecycleService,
    OrderLineRequest,
    ScanResult,
)
from stockpick.services.projections import ProjectionService

__all__ = [
    "LineProgress",
    "OrderLifecycleService",
    "OrderLineRequest",
    "ProjectionService",
    "ScanResult",
]
