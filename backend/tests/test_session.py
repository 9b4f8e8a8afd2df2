"""Tests for POS sessions: cart handlers, held orders and the registry."""

import asyncio
import logging
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from voicepos.core.config import settings
from voicepos.core.exceptions import (
    CheckoutCancelledError,
    EmptyCartError,
    InvalidTransitionError,
    NotFoundError,
)
from voicepos.models.order import OrderStatus
from voicepos.pos.cart import TaxTable
from voicepos.pos.checkout import CheckoutState
from voicepos.pos.gateway import MockPaymentGateway
from voicepos.pos.session import SessionRegistry
from voicepos.schemas.common import Document, DocumentKind, PaymentMethod
from voicepos.services.documents import DocumentSink
from voicepos.store import InMemoryCatalogStore, seed_catalog


async def _make_registry(delay=0, tax_table=None):
    store = InMemoryCatalogStore()
    await seed_catalog(store)
    documents = MagicMock(spec=DocumentSink)
    documents.render_receipt.return_value = Document(
        kind=DocumentKind.RECEIPT, filename="r.pdf", content=b"%PDF"
    )
    registry = SessionRegistry(
        store=store,
        gateway=MockPaymentGateway(delay=delay),
        documents=documents,
        tax_table=tax_table or TaxTable(Decimal("0.10")),
        payment_methods=[PaymentMethod(**m) for m in settings.PAYMENT_METHODS],
    )
    return registry, store


# ── Cart handlers ──────────────────────────────────

@pytest.mark.asyncio
async def test_add_unknown_product_is_ignored(caplog):
    registry, _ = await _make_registry()
    session = registry.create()

    with caplog.at_level(logging.WARNING):
        assert await session.add_product("nope") is None

    assert session.cart.is_empty
    assert "nope" in caplog.text


@pytest.mark.asyncio
async def test_add_by_barcode():
    registry, store = await _make_registry()
    session = registry.create()
    product = await store.get_product("product-3")

    item = await session.add_product_by_barcode(product.barcode)

    assert item.id == "product-3"
    assert await session.add_product_by_barcode("0000") is None


@pytest.mark.asyncio
async def test_cart_locked_while_processing():
    registry, _ = await _make_registry(delay=10)
    session = registry.create()
    await session.add_product("product-1")
    session.begin_checkout()

    task = asyncio.create_task(session.confirm_payment())
    await asyncio.sleep(0.01)

    with pytest.raises(InvalidTransitionError):
        await session.add_product("product-2")
    with pytest.raises(InvalidTransitionError):
        session.clear_cart()

    session.cancel_checkout()
    with pytest.raises(CheckoutCancelledError):
        await task


# ── Held orders ────────────────────────────────────

@pytest.mark.asyncio
async def test_hold_and_resume_round_trip():
    registry, store = await _make_registry()
    session = registry.create()
    await session.add_product("product-1")
    await session.add_product("product-1")
    await session.add_product("product-4")
    await session.select_customer("customer-2")

    held = await session.hold_order(notes="table 4")

    assert held.status == OrderStatus.IN_PROGRESS
    assert held.customer_id == "customer-2"
    assert session.cart.is_empty
    assert session.checkout.customer is None
    assert [o.id for o in await session.held_orders()] == [held.id]

    resumed = await session.resume_order(held.id)

    assert resumed.id == held.id
    assert [(i.id, i.quantity) for i in session.cart.items] == [("product-1", 2), ("product-4", 1)]
    assert session.checkout.customer.id == "customer-2"
    assert await store.get_order(held.id) is None


@pytest.mark.asyncio
async def test_hold_empty_cart_rejected():
    registry, _ = await _make_registry()
    with pytest.raises(EmptyCartError):
        await registry.create().hold_order()


@pytest.mark.asyncio
async def test_resume_requires_empty_cart():
    registry, _ = await _make_registry()
    session = registry.create()
    await session.add_product("product-1")
    held = await session.hold_order()
    await session.add_product("product-2")

    with pytest.raises(InvalidTransitionError):
        await session.resume_order(held.id)


@pytest.mark.asyncio
async def test_resume_rejects_unknown_and_completed_orders():
    registry, _ = await _make_registry()
    session = registry.create()

    with pytest.raises(NotFoundError):
        await session.resume_order("ORD-missing")

    await session.add_product("product-1")
    session.begin_checkout()
    result = await session.confirm_payment()

    with pytest.raises(InvalidTransitionError):
        await session.resume_order(result.order.id)


# ── Registry ───────────────────────────────────────

@pytest.mark.asyncio
async def test_registry_create_get_close():
    registry, _ = await _make_registry()
    first = registry.create(store_id="store-1")
    second = registry.create()

    assert first.id != second.id
    assert registry.get(first.id) is first
    assert len(registry) == 2

    assert registry.close(first.id) is True
    assert first.closed
    assert registry.get(first.id) is None
    assert registry.close(first.id) is False

    registry.close_all()
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_close_aborts_checkout():
    registry, _ = await _make_registry()
    session = registry.create()
    await session.add_product("product-1")
    session.begin_checkout()

    registry.close(session.id)

    assert session.checkout.state == CheckoutState.IDLE


@pytest.mark.asyncio
async def test_tax_rate_changes_reach_open_sessions():
    table = TaxTable(Decimal("0.10"))
    registry, _ = await _make_registry(tax_table=table)
    local = registry.create(store_id="store-2")
    other = registry.create()

    table.set_rate(Decimal("0.08"), "store-2")
    registry.refresh_tax_rates()

    assert local.cart.tax_rate == Decimal("0.08")
    assert other.cart.tax_rate == Decimal("0.10")


@pytest.mark.asyncio
async def test_closed_session_rejects_handlers():
    registry, store = await _make_registry()
    session = registry.create()
    await session.add_product("product-1")
    registry.close(session.id)

    with pytest.raises(InvalidTransitionError, match="closed"):
        await session.add_product("product-1")
    with pytest.raises(InvalidTransitionError, match="closed"):
        session.begin_checkout()
    with pytest.raises(InvalidTransitionError, match="closed"):
        await session.confirm_payment()
    with pytest.raises(InvalidTransitionError, match="closed"):
        await session.hold_order()

    assert session.cart.item_count == 1
    assert await store.list_orders() == []
