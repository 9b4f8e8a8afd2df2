"""Customer schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=50)
    address: str = ""
    notes: str | None = None


class CustomerCreate(CustomerBase):
    id: str | None = Field(None, max_length=64)
    total_orders: int = Field(default=0, ge=0)
    total_spent: Decimal = Field(default=Decimal("0"), ge=0)


class CustomerUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    notes: str | None = None
    total_orders: int | None = Field(None, ge=0)
    total_spent: Decimal | None = Field(None, ge=0)


class Customer(CustomerBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    total_orders: int = 0
    total_spent: Decimal = Decimal("0")
    registration_date: datetime | None = None


class CustomerListResponse(BaseModel):
    items: list[Customer]
    total: int


class RecoveryRequest(BaseModel):
    """Payment received against a customer's credit balance."""
    amount: Decimal = Field(..., gt=0)
    payment_method: str = Field(..., min_length=1)
