from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from stockpick.core.constants import ORDER_NUMBER_PREFIXES, OrderStatus, OrderType
from stockpick.core.errors import Conflict, NotFound, ValidationFailed
from stockpick.models.order import Order, OrderItem

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset(
    {
        "status",
        "notes",
        "picker_id",
        "picker_name",
        "picker_surname",
        "store_name",
        "store_location",
        "store_reference",
        "customer_name",
        "customer_email",
        "customer_phone",
        "shipping_address",
    }
)
_SUFFIX_MODULUS = 10 ** 8


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_order_number(order_type: OrderType, created_at: datetime, attempt: int = 0) -> str:
    """Build ``<prefix>-<year>-<suffix>`` where the suffix comes from the creation time.

    Two orders created in the same microsecond get the same number, so
    callers must check for collisions and try again with a higher ``attempt``.
    """
    prefix = ORDER_NUMBER_PREFIXES[OrderType(order_type)]
    micros = int(created_at.timestamp() * 1_000_000)
    suffix = (micros + attempt) % _SUFFIX_MODULUS
    return "{}-{}-{:08d}".format(prefix, created_at.year, suffix)


class OrderStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: int) -> Order:
        order = self.db.get(Order, order_id, populate_existing=True)
        if order is None:
            raise NotFound("Order", order_id)
        self.refresh_lines(order_id)
        return order

    def list(self) -> list[Order]:
        return self._select(select(Order))

    def list_by_type(self, order_type: OrderType) -> list[Order]:
        return self._select(select(Order).where(Order.order_type == OrderType(order_type)))

    def _select(self, stmt) -> list[Order]:
        rows = self.db.execute(
            stmt.order_by(Order.created_at.desc(), Order.id.desc()).execution_options(
                populate_existing=True
            )
        ).scalars()
        return [order for order in rows]

    def order_number_taken(self, order_number: str) -> bool:
        existing = self.db.execute(
            select(Order.id).where(Order.order_number == order_number)
        ).first()
        return existing is not None

    def create(self, order: Order, *, max_attempts: int = 5) -> int:
        """Persist ``order`` with a fresh order number and return its id.

        The unique constraint on ``order_number`` still guards against a
        concurrent writer picking the same number between the check and the
        insert; that surfaces as an IntegrityError at flush.
        """
        if not order.items:
            raise ValidationFailed("An order requires at least one line item")

        now = order.created_at or _utc_now()
        order.created_at = now
        order.updated_at = now
        order.status = order.status or OrderStatus.PENDING
        order.version = 1

        for attempt in range(max_attempts):
            candidate = generate_order_number(order.order_type, now, attempt)
            if not self.order_number_taken(candidate):
                order.order_number = candidate
                break
            logger.warning("Order number %s already taken (attempt %s)", candidate, attempt + 1)
        else:
            raise Conflict(
                "Could not allocate a unique order number",
                details={"attempts": max_attempts},
            )

        self.db.add(order)
        self.db.flush()
        return order.id

    def update(
        self,
        order_id: int,
        fields: Mapping[str, Any],
        *,
        expected_version: Optional[int] = None,
    ) -> int:
        """Apply ``fields`` and bump the version; returns the new version.

        With ``expected_version`` the write is a compare-and-set and raises
        :class:`Conflict` when another writer got there first.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationFailed(
                "Unknown order fields: {}".format(", ".join(sorted(unknown))),
                details={"fields": sorted(unknown)},
            )

        values = dict(fields)
        if "status" in values:
            values["status"] = OrderStatus(values["status"])
        values["updated_at"] = _utc_now()
        values["version"] = Order.version + 1

        stmt = update(Order).where(Order.id == order_id)
        if expected_version is not None:
            stmt = stmt.where(Order.version == expected_version)
        result = self.db.execute(
            stmt.values(**values).execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            current = self.db.execute(
                select(Order.version).where(Order.id == order_id)
            ).scalar_one_or_none()
            if current is None:
                raise NotFound("Order", order_id)
            raise Conflict(
                "Order {} was modified concurrently".format(order_id),
                details={"order_id": order_id, "expected_version": expected_version, "version": current},
            )
        return self.db.execute(
            select(Order.version).where(Order.id == order_id)
        ).scalar_one()

    def delete(self, order_id: int) -> None:
        order = self.get(order_id)
        self.db.delete(order)
        self.db.flush()

    def increment_scanned(self, line_id: int) -> bool:
        """Add one unit to a line's scanned counter unless it is already full.

        Returns False when the line was already fully scanned.
        """
        result = self.db.execute(
            update(OrderItem)
            .where(
                OrderItem.id == line_id,
                OrderItem.scanned_quantity < OrderItem.quantity,
            )
            .values(scanned_quantity=OrderItem.scanned_quantity + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def refresh_lines(self, order_id: int) -> list[OrderItem]:
        rows = self.db.execute(
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
            .execution_options(populate_existing=True)
        ).scalars()
        return [line for line in rows]


__all__ = ["OrderStore", "generate_order_number"]
