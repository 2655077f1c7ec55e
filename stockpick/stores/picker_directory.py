from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockpick.core.errors import NotFound, ValidationFailed
from stockpick.models.picker import Picker

logger = logging.getLogger(__name__)


class PickerDirectory:
    """Picker identities. Records are immutable once created."""

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> list[Picker]:
        rows = self.db.execute(
            select(Picker).order_by(Picker.name, Picker.surname, Picker.id)
        ).scalars()
        return [picker for picker in rows]

    def get(self, picker_id: int) -> Picker:
        picker = self.db.get(Picker, picker_id)
        if picker is None:
            raise NotFound("Picker", picker_id)
        return picker

    def create(self, name: str, surname: str) -> int:
        name = (name or "").strip()
        surname = (surname or "").strip()
        missing = [field for field, value in (("name", name), ("surname", surname)) if not value]
        if missing:
            raise ValidationFailed(
                "Missing fields for new picker: {}".format(", ".join(missing)),
                details={"fields": missing},
            )
        picker = Picker(name=name, surname=surname)
        self.db.add(picker)
        self.db.flush()
        logger.info("Picker %s created (%s)", picker.id, picker.full_name)
        return picker.id

    def delete(self, picker_id: int) -> None:
        picker = self.get(picker_id)
        self.db.delete(picker)
        self.db.flush()
        logger.info("Picker %s deleted", picker_id)


__all__ = ["PickerDirectory"]
