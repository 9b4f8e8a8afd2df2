from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Product ──
class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0)
    category: str = Field(default="general", max_length=100)
    in_stock: int = Field(default=0, ge=0)
    store_id: Optional[str] = None
    barcode: Optional[str] = Field(None, max_length=100)
    image: str = ""
    description: Optional[str] = None

class ProductCreate(ProductBase):
    id: Optional[str] = Field(None, max_length=64)

class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    in_stock: Optional[int] = Field(None, ge=0)
    store_id: Optional[str] = None
    barcode: Optional[str] = Field(None, max_length=100)
    image: Optional[str] = None
    description: Optional[str] = None

class Product(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: str

class ProductListResponse(BaseModel):
    items: list[Product]
    total: int


# ── Cart item ──
class CartItem(Product):
    """A product line in a cart; unique by product id."""
    quantity: int = Field(..., ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
