import enum


class OrderType(str, enum.Enum):
    STORE = "store"
    ECOMMERCE = "ecommerce"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ORDER_NUMBER_PREFIXES = {
    OrderType.STORE: "ST",
    OrderType.ECOMMERCE: "EC",
}

# Lower sorts first in order listings.
STATUS_PRIORITY = {
    OrderStatus.PENDING: 0,
    OrderStatus.PROCESSING: 1,
    OrderStatus.READY: 1,
    OrderStatus.COMPLETED: 2,
    OrderStatus.CANCELLED: 3,
}
