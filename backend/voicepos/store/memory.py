"""In-process catalog store.

Each instance owns its own collections; nothing is shared at module level,
so every POS app, session or test gets an isolated catalog.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from voicepos.core.exceptions import ValidationError
from voicepos.models.order import OrderStatus
from voicepos.schemas.customer import Customer, CustomerCreate
from voicepos.schemas.order import Order
from voicepos.schemas.product import Product, ProductCreate
from voicepos.store.base import CatalogStore, matches_search, new_id

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class _Collection(Generic[T]):
    """Insertion-ordered rows keyed by id; hands out copies only."""

    def __init__(self, model: type[T], label: str):
        self._model = model
        self._label = label
        self._rows: dict[str, T] = {}

    def add(self, item: T) -> T:
        item_id = getattr(item, "id")
        if item_id in self._rows:
            raise ValidationError(f"{self._label} '{item_id}' already exists")
        self._rows[item_id] = item.model_copy(deep=True)
        return item.model_copy(deep=True)

    def get(self, item_id: str) -> T | None:
        row = self._rows.get(item_id)
        return row.model_copy(deep=True) if row is not None else None

    def update(self, item_id: str, changes: dict[str, Any]) -> T | None:
        row = self._rows.get(item_id)
        if row is None:
            return None
        changes = {k: v for k, v in changes.items() if k != "id"}
        updated = self._model.model_validate({**row.model_dump(), **changes})
        self._rows[item_id] = updated
        return updated.model_copy(deep=True)

    def delete(self, item_id: str) -> bool:
        return self._rows.pop(item_id, None) is not None

    def all(self) -> list[T]:
        return [row.model_copy(deep=True) for row in self._rows.values()]

    def __len__(self) -> int:
        return len(self._rows)


class InMemoryCatalogStore(CatalogStore):
    def __init__(self) -> None:
        self._products: _Collection[Product] = _Collection(Product, "Product")
        self._customers: _Collection[Customer] = _Collection(Customer, "Customer")
        self._orders: _Collection[Order] = _Collection(Order, "Order")

    # ── Products ──────────────────────────────────
    async def add_product(self, data: ProductCreate | Product) -> Product:
        payload = data.model_dump()
        payload["id"] = payload.get("id") or new_id("product")
        return self._products.add(Product.model_validate(payload))

    async def get_product(self, product_id: str) -> Product | None:
        return self._products.get(product_id)

    async def update_product(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        return self._products.update(product_id, changes)

    async def delete_product(self, product_id: str) -> bool:
        return self._products.delete(product_id)

    async def list_products(
        self, category: str | None = None, search: str | None = None
    ) -> list[Product]:
        return [
            p for p in self._products.all()
            if (not category or category == "all" or p.category == category)
            and matches_search(search, p.name, p.barcode)
        ]

    async def find_product_by_barcode(self, barcode: str) -> Product | None:
        for product in self._products.all():
            if product.barcode == barcode:
                return product
        return None

    # ── Customers ─────────────────────────────────
    async def add_customer(self, data: CustomerCreate | Customer) -> Customer:
        payload = data.model_dump()
        payload["id"] = payload.get("id") or new_id("customer")
        payload["registration_date"] = payload.get("registration_date") or datetime.now(timezone.utc)
        return self._customers.add(Customer.model_validate(payload))

    async def get_customer(self, customer_id: str) -> Customer | None:
        return self._customers.get(customer_id)

    async def update_customer(self, customer_id: str, changes: dict[str, Any]) -> Customer | None:
        return self._customers.update(customer_id, changes)

    async def delete_customer(self, customer_id: str) -> bool:
        return self._customers.delete(customer_id)

    async def list_customers(self, search: str | None = None) -> list[Customer]:
        return [
            c for c in self._customers.all()
            if matches_search(search, c.name, c.email, c.phone)
        ]

    # ── Orders ────────────────────────────────────
    async def add_order(self, order: Order) -> Order:
        stored = self._orders.add(order)
        logger.debug("Order stored: %s (%d in store)", stored.id, len(self._orders))
        return stored

    async def get_order(self, order_id: str) -> Order | None:
        return self._orders.get(order_id)

    async def update_order(self, order_id: str, changes: dict[str, Any]) -> Order | None:
        return self._orders.update(order_id, changes)

    async def delete_order(self, order_id: str) -> bool:
        return self._orders.delete(order_id)

    async def list_orders(
        self,
        customer_id: str | None = None,
        status: OrderStatus | None = None,
        on_date: date | None = None,
    ) -> list[Order]:
        return [
            o for o in self._orders.all()
            if (customer_id is None or o.customer_id == customer_id)
            and (status is None or o.status == status)
            and (on_date is None or o.date.date() == on_date)
        ]
