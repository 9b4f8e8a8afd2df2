"""Catalog store interface.

The store is the only persistence seam of the POS core. Lookups that miss
return ``None`` (or ``False`` for deletes) instead of raising, and there is
no referential integrity between orders, products and customers.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from voicepos.models.order import OrderStatus
from voicepos.schemas.customer import Customer, CustomerCreate
from voicepos.schemas.order import Order
from voicepos.schemas.product import Product, ProductCreate


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class CatalogStore(ABC):
    """Async CRUD over products, customers and orders."""

    # ── Products ──────────────────────────────────
    @abstractmethod
    async def add_product(self, data: ProductCreate | Product) -> Product: ...

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None: ...

    @abstractmethod
    async def update_product(self, product_id: str, changes: dict[str, Any]) -> Product | None: ...

    @abstractmethod
    async def delete_product(self, product_id: str) -> bool: ...

    @abstractmethod
    async def list_products(
        self, category: str | None = None, search: str | None = None
    ) -> list[Product]: ...

    @abstractmethod
    async def find_product_by_barcode(self, barcode: str) -> Product | None: ...

    # ── Customers ─────────────────────────────────
    @abstractmethod
    async def add_customer(self, data: CustomerCreate | Customer) -> Customer: ...

    @abstractmethod
    async def get_customer(self, customer_id: str) -> Customer | None: ...

    @abstractmethod
    async def update_customer(self, customer_id: str, changes: dict[str, Any]) -> Customer | None: ...

    @abstractmethod
    async def delete_customer(self, customer_id: str) -> bool: ...

    @abstractmethod
    async def list_customers(self, search: str | None = None) -> list[Customer]: ...

    # ── Orders ────────────────────────────────────
    @abstractmethod
    async def add_order(self, order: Order) -> Order: ...

    @abstractmethod
    async def get_order(self, order_id: str) -> Order | None: ...

    @abstractmethod
    async def update_order(self, order_id: str, changes: dict[str, Any]) -> Order | None: ...

    @abstractmethod
    async def delete_order(self, order_id: str) -> bool: ...

    @abstractmethod
    async def list_orders(
        self,
        customer_id: str | None = None,
        status: OrderStatus | None = None,
        on_date: date | None = None,
    ) -> list[Order]: ...


def matches_search(search: str | None, *fields: str | None) -> bool:
    if not search:
        return True
    q = search.lower()
    return any(q in (f or "").lower() for f in fields)
