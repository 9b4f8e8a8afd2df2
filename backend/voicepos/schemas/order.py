"""Order schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from voicepos.models.order import OrderStatus
from voicepos.schemas.product import CartItem


class Order(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str | None = None
    customer_name: str | None = None
    items: list[CartItem]
    date: datetime
    subtotal: Decimal = Field(..., ge=0)
    tax: Decimal | None = Field(None, ge=0)
    total: Decimal = Field(..., ge=0)
    payment_method: str
    status: OrderStatus
    store_id: str | None = None
    notes: str | None = None


class OrderUpdate(BaseModel):
    status: OrderStatus | None = None
    notes: str | None = None


class OrderListResponse(BaseModel):
    items: list[Order]
    total: int
