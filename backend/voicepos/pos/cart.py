"""Cart engine: line items and running totals for one POS session."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from voicepos.core.exceptions import ValidationError
from voicepos.schemas.product import CartItem, Product

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    """Round to cents for display; stored amounts stay unrounded."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class TaxTable:
    """Tax rates keyed by store id, falling back to a default rate."""

    def __init__(self, default_rate: Decimal, overrides: Mapping[str, Decimal] | None = None):
        self.default_rate = Decimal(default_rate)
        self._overrides: dict[str, Decimal] = {
            store_id: Decimal(rate) for store_id, rate in (overrides or {}).items()
        }
        self._validate(self.default_rate)
        for rate in self._overrides.values():
            self._validate(rate)

    @staticmethod
    def _validate(rate: Decimal) -> None:
        if rate < 0:
            raise ValidationError(f"Tax rate must be non-negative, got {rate}")

    def rate_for(self, store_id: str | None) -> Decimal:
        if store_id is not None and store_id in self._overrides:
            return self._overrides[store_id]
        return self.default_rate

    def set_rate(self, rate: Decimal, store_id: str | None = None) -> None:
        rate = Decimal(rate)
        self._validate(rate)
        if store_id is None:
            self.default_rate = rate
        else:
            self._overrides[store_id] = rate
        logger.info("Tax rate for %s set to %s", store_id or "default", rate)

    def overrides(self) -> dict[str, Decimal]:
        return dict(self._overrides)


class Cart:
    """Ordered line items, one per product id.

    Quantities are always >= 1; setting a quantity to zero or below removes
    the line instead.
    """

    def __init__(self, tax_rate: Decimal = Decimal("0.10")):
        if tax_rate < 0:
            raise ValidationError(f"Tax rate must be non-negative, got {tax_rate}")
        self.tax_rate = Decimal(tax_rate)
        self._items: list[CartItem] = []

    @property
    def items(self) -> list[CartItem]:
        return [item.model_copy(deep=True) for item in self._items]

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def _find(self, item_id: str) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def add_item(self, product: Product) -> None:
        """Add one unit of ``product``; an existing line is incremented."""
        index = self._find(product.id)
        if index is not None:
            existing = self._items[index]
            self._items[index] = existing.model_copy(update={"quantity": existing.quantity + 1})
            return
        data = product.model_dump()
        data.pop("quantity", None)
        self._items.append(CartItem(**data, quantity=1))

    def update_quantity(self, item_id: str, quantity: int) -> None:
        index = self._find(item_id)
        if index is None:
            return
        if quantity <= 0:
            del self._items[index]
            return
        self._items[index] = self._items[index].model_copy(update={"quantity": quantity})

    def remove_item(self, item_id: str) -> None:
        index = self._find(item_id)
        if index is not None:
            del self._items[index]

    def clear(self) -> None:
        self._items = []

    def restore(self, items: list[CartItem]) -> None:
        """Replace the cart contents, e.g. when resuming a held order."""
        self._items = [item.model_copy(deep=True) for item in items if item.quantity > 0]

    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self._items), Decimal("0"))

    def tax(self) -> Decimal:
        return self.subtotal() * self.tax_rate

    def total(self) -> Decimal:
        return self.subtotal() + self.tax()
