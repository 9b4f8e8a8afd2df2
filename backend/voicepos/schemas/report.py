"""Sales report schemas."""

from datetime import date as date_type
from decimal import Decimal

from pydantic import BaseModel, Field

from voicepos.schemas.order import Order


class ProductSales(BaseModel):
    product_id: str
    name: str
    quantity: int
    revenue: Decimal


class SalesReport(BaseModel):
    date: date_type | None = None
    total_sales: Decimal = Decimal("0")
    total_orders: int = 0
    average_order_value: Decimal = Decimal("0")
    payment_methods: dict[str, Decimal] = Field(default_factory=dict)
    top_products: list[ProductSales] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
