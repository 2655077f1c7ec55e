"""Order lifecycle engine.

Owns every transition an order goes through (create, assign picker, scan,
advance, complete, cancel, delete) and keeps inventory consistent with it.
Each public operation runs in one database transaction: reservation at
creation and restoration at cancellation either apply to every line item
together with the order write, or not at all.

Concurrency is handled without application-level read-modify-write:

* stock moves through ``InventoryStore.adjust_quantity`` (conditional UPDATE),
* scan counters through ``OrderStore.increment_scanned`` (conditional UPDATE),
* order status and picker writes are compare-and-set on ``orders.version``.

A lost race raises :class:`Conflict`; the engine rolls the transaction back
and reruns the whole operation up to ``max_conflict_retries`` times.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, TypeVar, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from stockpick.core.constants import OrderStatus, OrderType
from stockpick.core.errors import (
    Conflict,
    Incomplete,
    InsufficientStock,
    InvalidState,
    NotInOrder,
    PickerRequired,
    ValidationFailed,
)
from stockpick.core.order_states import ACTIVE_STATUSES, ensure_active, ensure_transition
from stockpick.models.order import Order, OrderItem
from stockpick.stores.inventory_store import InventoryStore
from stockpick.stores.order_store import OrderStore
from stockpick.stores.picker_directory import PickerDirectory

logger = logging.getLogger(__name__)

T = TypeVar("T")

_REQUIRED_METADATA = {
    OrderType.STORE: ("store_name",),
    OrderType.ECOMMERCE: ("customer_name", "customer_email", "shipping_address"),
}
_METADATA_FIELDS = (
    "store_name",
    "store_location",
    "store_reference",
    "customer_name",
    "customer_email",
    "customer_phone",
    "shipping_address",
)


@dataclass(frozen=True)
class OrderLineRequest:
    item_id: int
    quantity: int


@dataclass(frozen=True)
class ScanResult:
    order_id: int
    item_id: int
    scanned: int
    required: int
    complete: bool
    already_complete: bool
    order_status: OrderStatus


@dataclass(frozen=True)
class LineProgress:
    item_id: int
    sku: str
    name: str
    location: str
    barcode: Optional[str]
    scanned: int
    required: int

    @property
    def complete(self) -> bool:
        return self.scanned >= self.required


LineInput = Union[OrderLineRequest, Mapping[str, Any], tuple]


def _coerce_line(raw: LineInput) -> OrderLineRequest:
    if isinstance(raw, OrderLineRequest):
        line = raw
    elif isinstance(raw, Mapping):
        line = OrderLineRequest(item_id=raw.get("item_id"), quantity=raw.get("quantity"))
    elif isinstance(raw, tuple) and len(raw) == 2:
        line = OrderLineRequest(item_id=raw[0], quantity=raw[1])
    else:
        raise ValidationFailed("Invalid line item: {!r}".format(raw))

    if line.item_id is None:
        raise ValidationFailed("Line item is missing item_id", details={"field": "item_id"})
    if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity <= 0:
        raise ValidationFailed(
            "Line item quantity must be a positive integer",
            details={"item_id": line.item_id, "quantity": line.quantity},
        )
    return line


def merge_lines(lines: Iterable[LineInput]) -> List[OrderLineRequest]:
    """Validate line items and fold repeated item ids into one line."""
    merged = OrderedDict()
    for raw in lines or ():
        line = _coerce_line(raw)
        merged[line.item_id] = merged.get(line.item_id, 0) + line.quantity
    if not merged:
        raise ValidationFailed("An order requires at least one line item", details={"field": "items"})
    return [OrderLineRequest(item_id=item_id, quantity=qty) for item_id, qty in merged.items()]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def validate_metadata(order_type: OrderType, metadata: Mapping[str, Any]) -> dict:
    unknown = set(metadata) - set(_METADATA_FIELDS)
    if unknown:
        raise ValidationFailed(
            "Unknown order fields: {}".format(", ".join(sorted(unknown))),
            details={"fields": sorted(unknown)},
        )
    cleaned = {name: _clean(metadata.get(name)) for name in _METADATA_FIELDS}
    missing = [name for name in _REQUIRED_METADATA[order_type] if not cleaned[name]]
    if missing:
        raise ValidationFailed(
            "Missing fields for {} order: {}".format(order_type.value, ", ".join(missing)),
            details={"fields": missing, "order_type": order_type.value},
        )
    if cleaned["customer_email"] and "@" not in cleaned["customer_email"]:
        raise ValidationFailed(
            "customer_email is not a valid email address",
            details={"field": "customer_email"},
        )
    return cleaned


def _find_line(order: Order, code: str) -> Optional[OrderItem]:
    """Barcodes win over item ids so a barcode that looks like an id hits its own line."""
    for line in order.items:
        if line.barcode is not None and line.barcode == code:
            return line
    for line in order.items:
        if str(line.item_id) == code:
            return line
    return None


class OrderLifecycleService:
    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        max_conflict_retries: int = 5,
        order_number_attempts: int = 5,
    ):
        if max_conflict_retries < 1:
            raise ValueError("max_conflict_retries must be at least 1")
        self._session_factory = session_factory
        self.max_conflict_retries = max_conflict_retries
        self.order_number_attempts = order_number_attempts

    def _run(self, operation: str, work: Callable[[Session], T]) -> T:
        last_conflict = None
        for attempt in range(1, self.max_conflict_retries + 1):
            db = self._session_factory()
            try:
                with db.begin():
                    return work(db)
            except Conflict as exc:
                last_conflict = exc
            except IntegrityError as exc:
                last_conflict = Conflict(
                    "Constraint violated by a concurrent write during {}".format(operation),
                    details={"operation": operation, "reason": str(exc.orig)},
                )
            finally:
                db.close()
            logger.warning(
                "%s hit a write conflict (attempt %s/%s): %s",
                operation,
                attempt,
                self.max_conflict_retries,
                last_conflict.message,
                extra={"operation": operation, "attempt": attempt},
            )
        logger.error("%s gave up after %s conflicting attempts", operation, self.max_conflict_retries)
        raise last_conflict

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def create_order(
        self,
        order_type: Union[OrderType, str],
        items: Iterable[LineInput],
        *,
        notes: Optional[str] = None,
        **metadata: Any,
    ) -> int:
        try:
            order_type = OrderType(order_type)
        except ValueError as exc:
            raise ValidationFailed(
                "Unknown order type: {}".format(order_type),
                details={"field": "order_type", "value": order_type},
            ) from exc
        lines = merge_lines(items)
        details = validate_metadata(order_type, metadata)
        notes = _clean(notes)

        def work(db: Session) -> int:
            inventory = InventoryStore(db)
            orders = OrderStore(db)

            stocked = []
            for line in lines:
                item = inventory.get(line.item_id)
                if line.quantity > item.quantity:
                    raise InsufficientStock(
                        item_id=item.id,
                        requested=line.quantity,
                        available=item.quantity,
                        sku=item.sku,
                    )
                stocked.append((line, item))

            for line, item in stocked:
                inventory.adjust_quantity(item.id, -line.quantity)

            order = Order(
                order_type=order_type,
                status=OrderStatus.PENDING,
                notes=notes,
                **details,
            )
            order.items = [
                OrderItem(
                    position=position,
                    item_id=item.id,
                    sku=item.sku,
                    name=item.name,
                    location=item.location or "",
                    barcode=item.barcode,
                    quantity=line.quantity,
                    scanned_quantity=0,
                )
                for position, (line, item) in enumerate(stocked)
            ]
            order_id = orders.create(order, max_attempts=self.order_number_attempts)
            logger.info(
                "Order %s created as %s with %s line(s), %s unit(s) reserved",
                order_id,
                order.order_number,
                len(order.items),
                order.total_items,
                extra={"order_id": order_id, "order_number": order.order_number},
            )
            return order_id

        return self._run("create_order", work)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_order(self, order_id: int) -> Order:
        return self._run("get_order", lambda db: OrderStore(db).get(order_id))

    def get_scan_progress(self, order_id: int) -> List[LineProgress]:
        def work(db: Session) -> List[LineProgress]:
            order = OrderStore(db).get(order_id)
            return [
                LineProgress(
                    item_id=line.item_id,
                    sku=line.sku,
                    name=line.name,
                    location=line.location,
                    barcode=line.barcode,
                    scanned=line.scanned_quantity,
                    required=line.quantity,
                )
                for line in order.items
            ]

        return self._run("get_scan_progress", work)

    # ------------------------------------------------------------------
    # Picking
    # ------------------------------------------------------------------
    def assign_picker(self, order_id: int, picker_id: int) -> None:
        def work(db: Session) -> None:
            orders = OrderStore(db)
            order = orders.get(order_id)
            ensure_active(order.status, "assign a picker to")
            self._attach_picker(db, order, picker_id)
            logger.info("Picker %s assigned to order %s", picker_id, order_id)

        self._run("assign_picker", work)

    @staticmethod
    def _attach_picker(db: Session, order: Order, picker_id: int) -> int:
        picker = PickerDirectory(db).get(picker_id)
        return OrderStore(db).update(
            order.id,
            {
                "picker_id": picker.id,
                "picker_name": picker.name,
                "picker_surname": picker.surname,
            },
            expected_version=order.version,
        )

    def record_scan(self, order_id: int, code: Union[str, int]) -> ScanResult:
        code = str(code).strip() if code is not None else ""
        if not code:
            raise ValidationFailed("Scanned code cannot be empty", details={"field": "code"})

        def work(db: Session) -> ScanResult:
            orders = OrderStore(db)
            order = orders.get(order_id)
            ensure_active(order.status, "scan items for")

            line = _find_line(order, code)
            if line is None:
                raise NotInOrder(order_id, code)

            if not orders.increment_scanned(line.id):
                logger.info("Order %s item %s already fully scanned", order_id, line.item_id)
                return ScanResult(
                    order_id=order_id,
                    item_id=line.item_id,
                    scanned=line.quantity,
                    required=line.quantity,
                    complete=True,
                    already_complete=True,
                    order_status=order.status,
                )

            orders.refresh_lines(order_id)
            status = order.status
            target = status
            if target == OrderStatus.PENDING:
                target = OrderStatus.PROCESSING
            if target == OrderStatus.PROCESSING and order.is_fully_scanned:
                target = OrderStatus.READY
            if target != status:
                if status == OrderStatus.PENDING and target == OrderStatus.READY:
                    ensure_transition(status, OrderStatus.PROCESSING)
                    ensure_transition(OrderStatus.PROCESSING, target)
                else:
                    ensure_transition(status, target)
                orders.update(order_id, {"status": target}, expected_version=order.version)
                logger.info("Order %s moved from %s to %s by scan", order_id, status.value, target.value)

            return ScanResult(
                order_id=order_id,
                item_id=line.item_id,
                scanned=line.scanned_quantity,
                required=line.quantity,
                complete=line.is_fully_scanned,
                already_complete=False,
                order_status=target,
            )

        return self._run("record_scan", work)

    def advance_order(self, order_id: int, target: Union[OrderStatus, str]) -> None:
        """Move a non-terminal order forward (pending -> processing -> ready)."""
        try:
            target = OrderStatus(target)
        except ValueError as exc:
            raise ValidationFailed(
                "Unknown order status: {}".format(target),
                details={"field": "status", "value": target},
            ) from exc
        if target not in (OrderStatus.PROCESSING, OrderStatus.READY):
            raise InvalidState(
                "Use complete or cancel to move an order to {}".format(target.value),
                details={"target": target.value},
            )

        def work(db: Session) -> None:
            orders = OrderStore(db)
            order = orders.get(order_id)
            ensure_transition(order.status, target)
            if target == OrderStatus.READY and not order.is_fully_scanned:
                raise Incomplete(details={"order_id": order_id, "remaining": _remaining(order)})
            orders.update(order_id, {"status": target}, expected_version=order.version)
            logger.info("Order %s moved from %s to %s", order_id, order.status.value, target.value)

        self._run("advance_order", work)

    # ------------------------------------------------------------------
    # Terminal transitions
    # ------------------------------------------------------------------
    def complete_order(self, order_id: int, picker_id: Optional[int] = None) -> None:
        def work(db: Session) -> None:
            orders = OrderStore(db)
            order = orders.get(order_id)
            ensure_active(order.status, "complete")

            version = order.version
            if picker_id is not None:
                version = self._attach_picker(db, order, picker_id)
            elif order.picker_id is None:
                raise PickerRequired(details={"order_id": order_id})

            if not order.is_fully_scanned:
                raise Incomplete(details={"order_id": order_id, "remaining": _remaining(order)})

            ensure_transition(order.status, OrderStatus.COMPLETED)
            orders.update(order_id, {"status": OrderStatus.COMPLETED}, expected_version=version)
            logger.info("Order %s completed", order_id, extra={"order_id": order_id})

        self._run("complete_order", work)

    def cancel_order(self, order_id: int) -> None:
        def work(db: Session) -> None:
            orders = OrderStore(db)
            inventory = InventoryStore(db)
            order = orders.get(order_id)
            if order.status not in ACTIVE_STATUSES:
                raise InvalidState(
                    "Cannot cancel an order that is {}".format(order.status.value),
                    details={"order_id": order_id, "status": order.status.value},
                )

            ensure_transition(order.status, OrderStatus.CANCELLED)
            orders.update(order_id, {"status": OrderStatus.CANCELLED}, expected_version=order.version)
            for line in order.items:
                inventory.adjust_quantity(line.item_id, line.quantity)
            logger.info(
                "Order %s cancelled, %s unit(s) restored to inventory",
                order_id,
                order.total_items,
            )

        self._run("cancel_order", work)

    def delete_order(self, order_id: int) -> None:
        def work(db: Session) -> None:
            orders = OrderStore(db)
            order = orders.get(order_id)
            if order.status != OrderStatus.CANCELLED:
                raise InvalidState(
                    "Only cancelled orders can be deleted",
                    details={"order_id": order_id, "status": order.status.value},
                )
            orders.delete(order_id)
            logger.info("Order %s deleted", order_id, extra={"order_id": order_id})

        self._run("delete_order", work)


def _remaining(order: Order) -> dict:
    return {
        str(line.item_id): line.quantity - line.scanned_quantity
        for line in order.items
        if line.scanned_quantity < line.quantity
    }


__all__ = [
    "LineProgress",
    "OrderLifecycleService",
    "OrderLineRequest",
    "ScanResult",
    "merge_lines",
    "validate_metadata",
]
