from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from stockpick.core.constants import OrderStatus, OrderType


class OrderLineIn(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)


class OrderCreate(BaseModel):
    order_type: OrderType
    items: List[OrderLineIn] = Field(default_factory=list)
    notes: Optional[str] = None

    store_name: Optional[str] = None
    store_location: Optional[str] = None
    store_reference: Optional[str] = None

    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    shipping_address: Optional[str] = None

    def metadata(self) -> dict:
        return self.model_dump(exclude={"order_type", "items", "notes"})


class OrderLineRead(BaseModel):
    item_id: int
    sku: str
    name: str
    location: str
    barcode: Optional[str] = None
    quantity: int
    scanned_quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderRead(BaseModel):
    id: int
    order_number: str
    order_type: OrderType
    status: OrderStatus
    items: List[OrderLineRead]
    total_items: int
    notes: Optional[str] = None

    store_name: Optional[str] = None
    store_location: Optional[str] = None
    store_reference: Optional[str] = None

    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    shipping_address: Optional[str] = None

    picker_id: Optional[int] = None
    picker_name: Optional[str] = None
    picker_surname: Optional[str] = None
    picker_full_name: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PickerAssign(BaseModel):
    picker_id: int


class OrderComplete(BaseModel):
    picker_id: Optional[int] = None


class OrderAdvance(BaseModel):
    status: OrderStatus


class ScanIn(BaseModel):
    code: str


class ScanRead(BaseModel):
    order_id: int
    item_id: int
    scanned: int
    required: int
    complete: bool
    already_complete: bool
    order_status: OrderStatus

    model_config = ConfigDict(from_attributes=True)


class LineProgressRead(BaseModel):
    item_id: int
    sku: str
    name: str
    location: str
    barcode: Optional[str] = None
    scanned: int
    required: int
    complete: bool

    model_config = ConfigDict(from_attributes=True)
