from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockpick.dependencies import get_db, require_auth
from stockpick.schemas.picker import PickerCreate, PickerRead
from stockpick.stores.picker_directory import PickerDirectory

router = APIRouter(prefix="/pickers", tags=["Pickers"])


@router.get("", response_model=List[PickerRead])
def list_pickers(db: Session = Depends(get_db)):
    return PickerDirectory(db).list()


@router.get("/{picker_id}", response_model=PickerRead)
def get_picker(picker_id: int, db: Session = Depends(get_db)):
    return PickerDirectory(db).get(picker_id)


@router.post("", response_model=PickerRead, status_code=201)
def create_picker(
    payload: PickerCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    directory = PickerDirectory(db)
    picker_id = directory.create(payload.name, payload.surname)
    db.commit()
    return directory.get(picker_id)


@router.delete("/{picker_id}", status_code=204)
def delete_picker(
    picker_id: int,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    PickerDirectory(db).delete(picker_id)
    db.commit()


__all__ = ["router"]
