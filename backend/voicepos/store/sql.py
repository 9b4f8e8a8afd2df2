"""SQLAlchemy-backed catalog store (hosted database pass-through)."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from voicepos.core.exceptions import ValidationError
from voicepos.db.base import build_engine, build_sessionmaker, create_all
from voicepos.models.customer import CustomerRow
from voicepos.models.order import OrderRow, OrderStatus
from voicepos.models.product import ProductRow
from voicepos.schemas.customer import Customer, CustomerCreate
from voicepos.schemas.order import Order
from voicepos.schemas.product import Product, ProductCreate
from voicepos.store.base import CatalogStore, new_id

logger = logging.getLogger(__name__)


def _escape_like(s: str) -> str:
    """Escape SQL LIKE wildcards in user input."""
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _order_columns(order: Order) -> dict[str, Any]:
    data = order.model_dump()
    data["items"] = [item.model_dump(mode="json") for item in order.items]
    data["status"] = order.status.value
    return data


class SqlCatalogStore(CatalogStore):
    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ):
        self._sessionmaker = sessionmaker
        self._engine = engine

    @classmethod
    async def connect(cls, database_url: str) -> "SqlCatalogStore":
        """Build an engine for ``database_url`` and create missing tables."""
        engine = build_engine(database_url)
        await create_all(engine)
        logger.info("SQL catalog store connected: %s", engine.url.render_as_string(hide_password=True))
        return cls(build_sessionmaker(engine), engine)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    async def _add(self, row_cls, schema, columns: dict[str, Any], label: str):
        async with self._sessionmaker() as db:
            if await db.get(row_cls, columns["id"]) is not None:
                raise ValidationError(f"{label} '{columns['id']}' already exists")
            row = row_cls(**columns)
            db.add(row)
            await db.commit()
            await db.refresh(row)
            return schema.model_validate(row)

    async def _get(self, row_cls, schema, item_id: str):
        async with self._sessionmaker() as db:
            row = await db.get(row_cls, item_id)
            return schema.model_validate(row) if row is not None else None

    async def _update(self, row_cls, schema, item_id: str, changes: dict[str, Any], to_columns=None):
        async with self._sessionmaker() as db:
            row = await db.get(row_cls, item_id)
            if row is None:
                return None
            current = schema.model_validate(row)
            changes = {k: v for k, v in changes.items() if k != "id"}
            merged = schema.model_validate({**current.model_dump(), **changes})
            columns = to_columns(merged) if to_columns else merged.model_dump()
            for field, value in columns.items():
                setattr(row, field, value)
            await db.commit()
            await db.refresh(row)
            return schema.model_validate(row)

    async def _delete(self, row_cls, item_id: str) -> bool:
        async with self._sessionmaker() as db:
            row = await db.get(row_cls, item_id)
            if row is None:
                return False
            await db.delete(row)
            await db.commit()
            return True

    # ── Products ──────────────────────────────────
    async def add_product(self, data: ProductCreate | Product) -> Product:
        payload = data.model_dump()
        payload["id"] = payload.get("id") or new_id("product")
        product = Product.model_validate(payload)
        return await self._add(ProductRow, Product, product.model_dump(), "Product")

    async def get_product(self, product_id: str) -> Product | None:
        return await self._get(ProductRow, Product, product_id)

    async def update_product(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        return await self._update(ProductRow, Product, product_id, changes)

    async def delete_product(self, product_id: str) -> bool:
        return await self._delete(ProductRow, product_id)

    async def list_products(
        self, category: str | None = None, search: str | None = None
    ) -> list[Product]:
        query = select(ProductRow)
        if category and category != "all":
            query = query.where(ProductRow.category == category)
        if search:
            like = f"%{_escape_like(search)}%"
            query = query.where(
                or_(ProductRow.name.ilike(like, escape="\\"), ProductRow.barcode.ilike(like, escape="\\"))
            )
        async with self._sessionmaker() as db:
            result = await db.execute(query)
            return [Product.model_validate(row) for row in result.scalars().all()]

    async def find_product_by_barcode(self, barcode: str) -> Product | None:
        async with self._sessionmaker() as db:
            result = await db.execute(select(ProductRow).where(ProductRow.barcode == barcode))
            row = result.scalars().first()
            return Product.model_validate(row) if row is not None else None

    # ── Customers ─────────────────────────────────
    async def add_customer(self, data: CustomerCreate | Customer) -> Customer:
        payload = data.model_dump()
        payload["id"] = payload.get("id") or new_id("customer")
        payload["registration_date"] = payload.get("registration_date") or datetime.now(timezone.utc)
        customer = Customer.model_validate(payload)
        return await self._add(CustomerRow, Customer, customer.model_dump(), "Customer")

    async def get_customer(self, customer_id: str) -> Customer | None:
        return await self._get(CustomerRow, Customer, customer_id)

    async def update_customer(self, customer_id: str, changes: dict[str, Any]) -> Customer | None:
        return await self._update(CustomerRow, Customer, customer_id, changes)

    async def delete_customer(self, customer_id: str) -> bool:
        return await self._delete(CustomerRow, customer_id)

    async def list_customers(self, search: str | None = None) -> list[Customer]:
        query = select(CustomerRow)
        if search:
            like = f"%{_escape_like(search)}%"
            query = query.where(
                or_(
                    CustomerRow.name.ilike(like, escape="\\"),
                    CustomerRow.email.ilike(like, escape="\\"),
                    CustomerRow.phone.ilike(like, escape="\\"),
                )
            )
        async with self._sessionmaker() as db:
            result = await db.execute(query)
            return [Customer.model_validate(row) for row in result.scalars().all()]

    # ── Orders ────────────────────────────────────
    async def add_order(self, order: Order) -> Order:
        return await self._add(OrderRow, Order, _order_columns(order), "Order")

    async def get_order(self, order_id: str) -> Order | None:
        return await self._get(OrderRow, Order, order_id)

    async def update_order(self, order_id: str, changes: dict[str, Any]) -> Order | None:
        return await self._update(OrderRow, Order, order_id, changes, to_columns=_order_columns)

    async def delete_order(self, order_id: str) -> bool:
        return await self._delete(OrderRow, order_id)

    async def list_orders(
        self,
        customer_id: str | None = None,
        status: OrderStatus | None = None,
        on_date: date | None = None,
    ) -> list[Order]:
        query = select(OrderRow)
        if customer_id is not None:
            query = query.where(OrderRow.customer_id == customer_id)
        if status is not None:
            query = query.where(OrderRow.status == OrderStatus(status).value)
        if on_date is not None:
            query = query.where(func.date(OrderRow.date) == on_date.isoformat())
        query = query.order_by(OrderRow.date)
        async with self._sessionmaker() as db:
            result = await db.execute(query)
            return [Order.model_validate(row) for row in result.scalars().all()]
