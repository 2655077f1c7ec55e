from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from stockpick.database.base import Base


class Picker(Base):
    __tablename__ = "pickers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    surname = Column(String, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def full_name(self) -> str:
        return "{} {}".format(self.name, self.surname)


__all__ = ["Picker"]
