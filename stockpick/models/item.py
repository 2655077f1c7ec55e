from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String

from stockpick.database.base import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True)

    sku = Column(String, nullable=False)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    location = Column(String, nullable=False, default="")
    barcode = Column(String)
    image_url = Column(String)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_items_quantity_non_negative"),
        Index("idx_items_sku", "sku"),
        Index("idx_items_barcode", "barcode"),
    )


__all__ = ["Item"]
