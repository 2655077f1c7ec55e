from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from stockpick.core.constants import OrderStatus, OrderType
from stockpick.dependencies import get_lifecycle_service, get_projection_service, require_auth
from stockpick.schemas.order import (
    LineProgressRead,
    OrderAdvance,
    OrderComplete,
    OrderCreate,
    OrderRead,
    PickerAssign,
    ScanIn,
    ScanRead,
)
from stockpick.services.order_lifecycle import OrderLifecycleService
from stockpick.services.projections import ProjectionService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("", response_model=List[OrderRead])
def list_orders(
    order_type: Optional[OrderType] = Query(None, description="store | ecommerce"),
    store: Optional[str] = Query(None, description="Exact store name"),
    status: Optional[List[OrderStatus]] = Query(None),
    projections: ProjectionService = Depends(get_projection_service),
):
    return projections.list_orders(order_type=order_type, store_name=store, statuses=status)


@router.get("/stores", response_model=List[str])
def list_store_names(projections: ProjectionService = Depends(get_projection_service)):
    return projections.list_store_names()


@router.post("", response_model=OrderRead, status_code=201)
def create_order(
    payload: OrderCreate,
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
    _auth=Depends(require_auth),
):
    order_id = lifecycle.create_order(
        payload.order_type,
        [line.model_dump() for line in payload.items],
        notes=payload.notes,
        **payload.metadata(),
    )
    return lifecycle.get_order(order_id)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, lifecycle: OrderLifecycleService = Depends(get_lifecycle_service)):
    return lifecycle.get_order(order_id)


@router.get("/{order_id}/progress", response_model=List[LineProgressRead])
def get_order_progress(order_id: int, lifecycle: OrderLifecycleService = Depends(get_lifecycle_service)):
    return lifecycle.get_scan_progress(order_id)


@router.post("/{order_id}/picker", response_model=OrderRead)
def assign_picker(
    order_id: int,
    payload: PickerAssign,
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
    _auth=Depends(require_auth),
):
    lifecycle.assign_picker(order_id, payload.picker_id)
    return lifecycle.get_order(order_id)


@router.post("/{order_id}/scans", response_model=ScanRead)
def record_scan(
    order_id: int,
    payload: ScanIn,
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
    _auth=Depends(require_auth),
):
    return lifecycle.record_scan(order_id, payload.code)


@router.post("/{order_id}/advance", response_model=OrderRead)
def advance_order(
    order_id: int,
    payload: OrderAdvance,
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
    _auth=Depends(require_auth),
):
    lifecycle.advance_order(order_id, payload.status)
    return lifecycle.get_order(order_id)


@router.post("/{order_id}/complete", response_model=OrderRead)
def complete_order(
    order_id: int,
    payload: Optional[OrderComplete] = None,
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
    _auth=Depends(require_auth),
):
    picker_id = payload.picker_id if payload else None
    lifecycle.complete_order(order_id, picker_id=picker_id)
    return lifecycle.get_order(order_id)


@router.post("/{order_id}/cancel", response_model=OrderRead)
def cancel_order(
    order_id: int,
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
    _auth=Depends(require_auth),
):
    lifecycle.cancel_order(order_id)
    return lifecycle.get_order(order_id)


@router.delete("/{order_id}", status_code=204)
def delete_order(
    order_id: int,
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
    _auth=Depends(require_auth),
):
    lifecycle.delete_order(order_id)


__all__ = ["router"]
