from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from stockpick.core.constants import OrderStatus, OrderType
from stockpick.database.base import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(40), nullable=False)

    order_type = Column(
        Enum(OrderType, name="order_type", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    status = Column(
        Enum(OrderStatus, name="order_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    version = Column(Integer, nullable=False, default=1)
    notes = Column(String)

    # Store orders
    store_name = Column(String)
    store_location = Column(String)
    store_reference = Column(String)

    # E-commerce orders
    customer_name = Column(String)
    customer_email = Column(String)
    customer_phone = Column(String)
    shipping_address = Column(String)

    picker_id = Column(Integer)
    picker_name = Column(String)
    picker_surname = Column(String)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("order_number", name="uq_orders_order_number"),
        Index("idx_orders_type_status", "order_type", "status"),
        Index("idx_orders_store_name", "store_name"),
    )

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def picker_full_name(self):
        if self.picker_name is None or self.picker_surname is None:
            return None
        return "{} {}".format(self.picker_name, self.picker_surname)

    @property
    def scanned_quantities(self) -> dict:
        return {line.item_id: line.scanned_quantity for line in self.items}

    @property
    def is_fully_scanned(self) -> bool:
        return all(line.scanned_quantity >= line.quantity for line in self.items)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    # Snapshot of the inventory item at order creation.
    item_id = Column(Integer, nullable=False)
    sku = Column(String, nullable=False)
    name = Column(String, nullable=False)
    location = Column(String, nullable=False, default="")
    barcode = Column(String)

    quantity = Column(Integer, nullable=False)
    scanned_quantity = Column(Integer, nullable=False, default=0)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        CheckConstraint(
            "scanned_quantity >= 0 AND scanned_quantity <= quantity",
            name="ck_order_items_scanned_within_quantity",
        ),
        UniqueConstraint("order_id", "item_id", name="uq_order_items_order_item"),
        Index("idx_order_items_item", "item_id"),
    )

    @property
    def is_fully_scanned(self) -> bool:
        return self.scanned_quantity >= self.quantity


__all__ = ["Order", "OrderItem"]
