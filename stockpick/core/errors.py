"""Typed errors raised by the stores and the order lifecycle engine.

Every error carries a machine-readable ``code`` and structured ``details`` so
callers can branch on the type instead of parsing messages:

    StockpickError
    +-- ValidationFailed
    +-- InsufficientStock
    +-- NotFound
    +-- NotInOrder
    +-- InvalidState
    |   +-- PickerRequired
    |   +-- Incomplete
    +-- Conflict
        +-- NegativeStock
"""

from typing import Any, Optional


class StockpickError(Exception):
    code = "STOCKPICK_ERROR"
    default_message = "Warehouse operation failed"

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return "[{}] {}".format(self.code, self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFailed(StockpickError):
    code = "VALIDATION_FAILED"
    default_message = "Validation failed"


class InsufficientStock(StockpickError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: int, requested: int, available: int, sku: Optional[str] = None):
        self.item_id = item_id
        self.requested = requested
        self.available = available
        label = sku or "item {}".format(item_id)
        super().__init__(
            "Insufficient stock for {}: requested {}, available {}".format(label, requested, available),
            details={"item_id": item_id, "sku": sku, "requested": requested, "available": available},
        )


class NotFound(StockpickError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            "{} {} not found".format(entity, entity_id),
            details={"entity": entity, "id": entity_id},
        )


class NotInOrder(StockpickError):
    code = "NOT_IN_ORDER"

    def __init__(self, order_id: int, scanned_code: str):
        self.order_id = order_id
        self.scanned_code = scanned_code
        super().__init__(
            "Code {} not found in order {}".format(scanned_code, order_id),
            details={"order_id": order_id, "code": scanned_code},
        )


class InvalidState(StockpickError):
    code = "INVALID_STATE"
    default_message = "Operation not permitted in the current order state"


class PickerRequired(InvalidState):
    code = "PICKER_REQUIRED"
    default_message = "A picker must be assigned before completing the order"


class Incomplete(InvalidState):
    code = "INCOMPLETE"
    default_message = "Every line item must be fully scanned before completing the order"


class Conflict(StockpickError):
    """A concurrent write won the race; the operation may be retried."""

    code = "CONFLICT"
    default_message = "Concurrent update detected, retry the operation"


class NegativeStock(Conflict):
    """An adjustment would take an item below zero.

    Inside the lifecycle engine this means another order took the stock first
    and the operation is retried; for a direct adjustment it is final.
    """

    code = "NEGATIVE_STOCK"
    default_message = "Adjustment would leave negative stock"


__all__ = [
    "Conflict",
    "Incomplete",
    "InsufficientStock",
    "InvalidState",
    "NotFound",
    "NegativeStock",
    "NotInOrder",
    "PickerRequired",
    "StockpickError",
    "ValidationFailed",
]
