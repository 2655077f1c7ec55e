from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockpick.dependencies import get_db, get_projection_service, require_auth
from stockpick.schemas.item import ItemCreate, ItemRead, ItemUpdate, QuantityAdjust
from stockpick.services.projections import ProjectionService
from stockpick.stores.inventory_store import InventoryStore

router = APIRouter(prefix="/items", tags=["Items"])


@router.get("", response_model=List[ItemRead])
def list_items(
    search: Optional[str] = Query(None, description="Matches SKU, name or barcode"),
    projections: ProjectionService = Depends(get_projection_service),
):
    return projections.search_items(search)


@router.get("/{item_id}", response_model=ItemRead)
def get_item(item_id: int, db: Session = Depends(get_db)):
    return InventoryStore(db).get(item_id)


@router.post("", response_model=ItemRead, status_code=201)
def create_item(
    payload: ItemCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    store = InventoryStore(db)
    item_id = store.create(payload.model_dump())
    db.commit()
    return store.get(item_id)


@router.patch("/{item_id}", response_model=ItemRead)
def update_item(
    item_id: int,
    payload: ItemUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    store = InventoryStore(db)
    store.update(item_id, payload.model_dump(exclude_unset=True))
    db.commit()
    return store.get(item_id)


@router.post("/{item_id}/adjust", response_model=ItemRead)
def adjust_item_quantity(
    item_id: int,
    payload: QuantityAdjust,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    store = InventoryStore(db)
    store.adjust_quantity(item_id, payload.delta)
    db.commit()
    return store.get(item_id)


@router.delete("/{item_id}", status_code=204)
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    InventoryStore(db).delete(item_id)
    db.commit()


__all__ = ["router"]
