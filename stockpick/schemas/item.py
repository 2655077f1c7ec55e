from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemBase(BaseModel):
    sku: str
    name: str
    quantity: int = Field(default=0, ge=0)
    location: str = ""
    barcode: Optional[str] = None
    image_url: Optional[str] = None


class ItemCreate(ItemBase):
    pass


class ItemUpdate(BaseModel):
    sku: Optional[str] = None
    name: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    barcode: Optional[str] = None
    image_url: Optional[str] = None


class QuantityAdjust(BaseModel):
    delta: int


class ItemRead(ItemBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
