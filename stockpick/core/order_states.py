from stockpick.core.constants import OrderStatus
from stockpick.core.errors import InvalidState

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})
ACTIVE_STATUSES = frozenset(
    {OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.READY}
)

_TRANSITIONS = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.PROCESSING, OrderStatus.CANCELLED}
    ),
    OrderStatus.PROCESSING: frozenset(
        {OrderStatus.READY, OrderStatus.CANCELLED}
    ),
    OrderStatus.READY: frozenset(
        {OrderStatus.COMPLETED, OrderStatus.CANCELLED}
    ),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def allowed_transitions(status: OrderStatus) -> frozenset:
    return _TRANSITIONS[OrderStatus(status)]


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return OrderStatus(target) in allowed_transitions(current)


def is_terminal(status: OrderStatus) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def ensure_transition(current: OrderStatus, target: OrderStatus) -> None:
    current = OrderStatus(current)
    target = OrderStatus(target)
    if not can_transition(current, target):
        raise InvalidState(
            "Cannot move order from {} to {}".format(current.value, target.value),
            details={"status": current.value, "target": target.value},
        )


def ensure_active(status: OrderStatus, operation: str) -> None:
    status = OrderStatus(status)
    if status in TERMINAL_STATUSES:
        raise InvalidState(
            "Cannot {} an order that is {}".format(operation, status.value),
            details={"status": status.value, "operation": operation},
        )


__all__ = [
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "allowed_transitions",
    "can_transition",
    "ensure_active",
    "ensure_transition",
    "is_terminal",
]
