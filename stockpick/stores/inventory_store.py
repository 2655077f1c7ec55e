from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from stockpick.core.errors import InvalidState, NegativeStock, NotFound, ValidationFailed
from stockpick.core.order_states import ACTIVE_STATUSES
from stockpick.models.item import Item
from stockpick.models.order import Order, OrderItem

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("sku", "name", "quantity", "location", "barcode", "image_url")
_REQUIRED_TEXT_FIELDS = ("sku", "name")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _validate_quantity(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationFailed(
            "quantity must be an integer",
            details={"field": "quantity", "value": value},
        )
    if value < 0:
        raise ValidationFailed(
            "quantity cannot be negative",
            details={"field": "quantity", "value": value},
        )
    return value


class InventoryStore:
    """Item records keyed by identifier.

    Stock changes made on behalf of orders must go through
    :meth:`adjust_quantity`, which is a single conditional UPDATE and never
    lets a quantity drop below zero. The store does not commit; the caller
    owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, item_id: int) -> Item:
        item = self.db.get(Item, item_id, populate_existing=True)
        if item is None:
            raise NotFound("Item", item_id)
        return item

    def list(self) -> list[Item]:
        rows = self.db.execute(
            select(Item)
            .order_by(Item.created_at.desc(), Item.id.desc())
            .execution_options(populate_existing=True)
        ).scalars()
        return list(rows)

    def create(self, fields: Mapping[str, Any]) -> int:
        unknown = set(fields) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailed(
                "Unknown item fields: {}".format(", ".join(sorted(unknown))),
                details={"fields": sorted(unknown)},
            )
        values = {name: _clean_text(fields.get(name)) for name in ("sku", "name", "location", "barcode", "image_url")}
        missing = [name for name in _REQUIRED_TEXT_FIELDS if not values[name]]
        if missing:
            raise ValidationFailed(
                "Missing fields for new item: {}".format(", ".join(missing)),
                details={"fields": missing},
            )
        values["location"] = values["location"] or ""
        values["quantity"] = _validate_quantity(fields.get("quantity", 0))

        now = _utc_now()
        item = Item(created_at=now, updated_at=now, **values)
        self.db.add(item)
        self.db.flush()
        logger.info("Item %s created (sku=%s, quantity=%s)", item.id, item.sku, item.quantity)
        return item.id

    def update(self, item_id: int, fields: Mapping[str, Any]) -> None:
        unknown = set(fields) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailed(
                "Unknown item fields: {}".format(", ".join(sorted(unknown))),
                details={"fields": sorted(unknown)},
            )
        item = self.get(item_id)

        for name, value in fields.items():
            if name == "quantity":
                item.quantity = _validate_quantity(value)
                continue
            value = _clean_text(value)
            if name in _REQUIRED_TEXT_FIELDS and not value:
                raise ValidationFailed(
                    "{} cannot be empty".format(name),
                    details={"field": name},
                )
            if name == "location":
                value = value or ""
            setattr(item, name, value)

        item.updated_at = _utc_now()
        self.db.flush()

    def delete(self, item_id: int) -> None:
        """Remove an item unless an active order still reserves it.

        The reservation check and the delete are one statement, so an order
        created concurrently either lands first and blocks the delete or
        finds the item gone.
        """
        reserving = (
            select(OrderItem.id)
            .join(Order, Order.id == OrderItem.order_id)
            .where(
                OrderItem.item_id == item_id,
                Order.status.in_(list(ACTIVE_STATUSES)),
            )
        )
        result = self.db.execute(
            delete(Item)
            .where(Item.id == item_id, ~reserving.exists())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            logger.info("Item %s deleted", item_id)
            return

        if self.db.execute(select(Item.id).where(Item.id == item_id)).first() is None:
            raise NotFound("Item", item_id)
        reserved_by = self.db.execute(
            select(func.count(func.distinct(Order.id)))
            .select_from(Order)
            .join(OrderItem, Order.id == OrderItem.order_id)
            .where(
                OrderItem.item_id == item_id,
                Order.status.in_(list(ACTIVE_STATUSES)),
            )
        ).scalar_one()
        raise InvalidState(
            "Item {} is reserved by {} active order(s)".format(item_id, reserved_by),
            details={"item_id": item_id, "active_orders": reserved_by},
        )

    def adjust_quantity(self, item_id: int, delta: int) -> None:
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationFailed("delta must be an integer", details={"delta": delta})

        result = self.db.execute(
            update(Item)
            .where(Item.id == item_id, Item.quantity + delta >= 0)
            .values(quantity=Item.quantity + delta, updated_at=_utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        current = self.db.execute(
            select(Item.quantity).where(Item.id == item_id)
        ).scalar_one_or_none()
        if current is None:
            raise NotFound("Item", item_id)
        raise NegativeStock(
            "Adjusting item {} by {} would leave negative stock".format(item_id, delta),
            details={"item_id": item_id, "delta": delta, "quantity": current},
        )


__all__ = ["InventoryStore"]
