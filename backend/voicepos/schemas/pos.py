"""POS session, checkout and tax settings schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from voicepos.schemas.customer import Customer
from voicepos.schemas.order import Order
from voicepos.schemas.product import CartItem


class PosSessionCreate(BaseModel):
    store_id: str | None = None


class CartItemAdd(BaseModel):
    product_id: str | None = None
    barcode: str | None = None

    @model_validator(mode="after")
    def check_reference(self):
        if not self.product_id and not self.barcode:
            raise ValueError("product_id or barcode is required")
        return self


class QuantityUpdate(BaseModel):
    quantity: int


class PaymentSelection(BaseModel):
    method_id: str = Field(..., min_length=1)


class CustomerSelection(BaseModel):
    # None → walk-in guest
    customer_id: str | None = None


class ConfirmRequest(BaseModel):
    method_id: str | None = None


class HoldRequest(BaseModel):
    notes: str | None = None


class CartTotals(BaseModel):
    """Cart totals rounded to cents for display."""
    item_count: int
    subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal


class PosSessionState(BaseModel):
    id: str
    store_id: str | None = None
    checkout_state: str
    payment_method: str
    customer: Customer | None = None
    items: list[CartItem]
    totals: CartTotals
    last_error: str | None = None


class CheckoutResponse(BaseModel):
    order: Order
    receipt_text: str
    customer_update_error: str | None = None
    session: PosSessionState


# ── Tax settings ───────────────────────────────────
class TaxSettings(BaseModel):
    default_rate: Decimal
    store_rates: dict[str, Decimal] = Field(default_factory=dict)


class TaxRateUpdate(BaseModel):
    rate: Decimal = Field(..., ge=0)
    store_id: str | None = None
