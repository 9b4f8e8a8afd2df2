"""Unit tests for the checkout state machine."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from voicepos.core.config import settings
from voicepos.core.exceptions import (
    CheckoutCancelledError,
    CheckoutFailedError,
    CustomerNotFoundError,
    DocumentGenerationError,
    EmptyCartError,
    InvalidPaymentMethodError,
    InvalidTransitionError,
    PaymentDeclinedError,
)
from voicepos.models.order import OrderStatus
from voicepos.pos.cart import Cart
from voicepos.pos.checkout import GUEST_NAME, CheckoutState, CheckoutStateMachine
from voicepos.pos.gateway import MockPaymentGateway, PaymentGateway
from voicepos.schemas.common import Document, DocumentKind, PaymentMethod
from voicepos.services.documents import DocumentSink, PdfDocumentSink
from voicepos.store import InMemoryCatalogStore, seed_catalog


def _documents():
    sink = MagicMock(spec=DocumentSink)
    sink.render_receipt.return_value = Document(
        kind=DocumentKind.RECEIPT, filename="receipt.pdf", content=b"%PDF-1.4 fake"
    )
    return sink


def _failing_gateway(exc):
    gateway = MagicMock(spec=PaymentGateway)
    gateway.settle = AsyncMock(side_effect=exc)
    return gateway


async def _make_machine(gateway=None, documents=None, products=("product-2", "product-2", "product-11")):
    store = InMemoryCatalogStore()
    await seed_catalog(store)
    cart = Cart(Decimal("0.10"))
    for product_id in products:
        cart.add_item(await store.get_product(product_id))
    machine = CheckoutStateMachine(
        cart=cart,
        store=store,
        gateway=gateway or MockPaymentGateway(delay=0),
        documents=documents or _documents(),
        payment_methods=[PaymentMethod(**m) for m in settings.PAYMENT_METHODS],
    )
    return machine, cart, store


def _record_states(machine):
    states = []
    machine.subscribe(lambda event: states.append(event.state) if event.kind == "state-changed" else None)
    return states


# ── Begin / cancel ─────────────────────────────────

@pytest.mark.asyncio
async def test_begin_on_empty_cart_rejected():
    machine, _, _ = await _make_machine(products=())
    with pytest.raises(EmptyCartError):
        machine.begin()
    assert machine.state == CheckoutState.IDLE


@pytest.mark.asyncio
async def test_begin_twice_is_noop():
    machine, _, _ = await _make_machine()
    states = _record_states(machine)
    machine.begin()
    machine.begin()
    assert machine.state == CheckoutState.PAYMENT_SELECTION
    assert states == [CheckoutState.PAYMENT_SELECTION]


@pytest.mark.asyncio
async def test_cancel_from_payment_selection_keeps_cart():
    machine, cart, _ = await _make_machine()
    machine.begin()
    machine.cancel()
    assert machine.state == CheckoutState.IDLE
    assert cart.item_count == 3


@pytest.mark.asyncio
async def test_confirm_requires_payment_selection():
    machine, _, _ = await _make_machine()
    with pytest.raises(InvalidTransitionError):
        await machine.confirm()


# ── Payment and customer selection ─────────────────

@pytest.mark.asyncio
async def test_unknown_payment_method_rejected():
    machine, _, _ = await _make_machine()
    machine.begin()
    with pytest.raises(InvalidPaymentMethodError):
        machine.select_payment("bitcoin")
    assert machine.payment_method == "cash"


@pytest.mark.asyncio
async def test_unknown_customer_leaves_selection_unchanged():
    machine, _, _ = await _make_machine()
    machine.begin()
    await machine.select_customer("customer-1")
    with pytest.raises(CustomerNotFoundError):
        await machine.select_customer("ghost")
    assert machine.customer.id == "customer-1"


# ── Confirm ────────────────────────────────────────

@pytest.mark.asyncio
async def test_confirm_creates_order_and_resets():
    machine, cart, store = await _make_machine()
    states = _record_states(machine)
    created = []
    machine.subscribe(lambda event: created.append(event.order) if event.kind == "order-created" else None)

    machine.begin()
    machine.select_payment("credit-card")
    result = await machine.confirm()

    assert result.order.status == OrderStatus.COMPLETED
    assert result.order.customer_name == GUEST_NAME
    assert result.order.payment_method == "credit-card"
    assert result.order.subtotal == Decimal("15.99")
    assert result.order.total == Decimal("17.589")
    assert result.receipt.content.startswith(b"%PDF")
    assert cart.is_empty
    assert machine.state == CheckoutState.IDLE
    assert machine.payment_method == "cash"
    assert machine.customer is None
    assert [o.id for o in created] == [result.order.id]
    assert states == [
        CheckoutState.PAYMENT_SELECTION,
        CheckoutState.PROCESSING,
        CheckoutState.COMPLETED,
        CheckoutState.IDLE,
    ]
    assert len(await store.list_orders()) == 1


@pytest.mark.asyncio
async def test_order_items_are_a_snapshot():
    machine, cart, store = await _make_machine()
    machine.begin()
    result = await machine.confirm()

    cart.add_item(await store.get_product("product-1"))
    await store.update_product("product-2", {"price": Decimal("99")})

    stored = await store.get_order(result.order.id)
    assert [(i.id, i.quantity) for i in stored.items] == [("product-2", 2), ("product-11", 1)]
    assert stored.items[0].price == Decimal("3.50")


@pytest.mark.asyncio
async def test_credit_sale_increases_customer_balance():
    machine, _, store = await _make_machine()
    before = await store.get_customer("customer-1")

    machine.begin()
    await machine.select_customer("customer-1")
    result = await machine.confirm("credit")

    after = await store.get_customer("customer-1")
    assert after.total_spent == before.total_spent + result.order.total
    assert result.customer_update_error is None


@pytest.mark.asyncio
async def test_cash_sale_leaves_customer_balance():
    machine, _, store = await _make_machine()
    before = await store.get_customer("customer-1")

    machine.begin()
    await machine.select_customer("customer-1")
    result = await machine.confirm("cash")

    assert result.order.customer_id == "customer-1"
    assert (await store.get_customer("customer-1")).total_spent == before.total_spent


@pytest.mark.asyncio
async def test_guest_credit_sale_touches_no_customer():
    machine, _, store = await _make_machine()
    before = await store.list_customers()

    machine.begin()
    await machine.confirm("credit")

    assert await store.list_customers() == before


@pytest.mark.asyncio
async def test_credit_update_failure_still_completes():
    machine, _, store = await _make_machine()
    machine.begin()
    await machine.select_customer("customer-1")

    with patch("voicepos.pos.checkout.apply_credit", AsyncMock(side_effect=RuntimeError("db down"))):
        result = await machine.confirm("credit")

    assert "db down" in result.customer_update_error
    assert await store.get_order(result.order.id) is not None
    assert machine.state == CheckoutState.IDLE


# ── Failures ───────────────────────────────────────

@pytest.mark.asyncio
async def test_declined_payment_returns_to_selection():
    machine, cart, store = await _make_machine(gateway=_failing_gateway(PaymentDeclinedError("Card declined")))
    states = _record_states(machine)
    machine.begin()

    with pytest.raises(CheckoutFailedError, match="Card declined"):
        await machine.confirm()

    assert machine.state == CheckoutState.PAYMENT_SELECTION
    assert "Card declined" in machine.last_error
    assert cart.item_count == 3
    assert await store.list_orders() == []
    assert states[-2:] == [CheckoutState.FAILED, CheckoutState.PAYMENT_SELECTION]


@pytest.mark.asyncio
async def test_receipt_failure_persists_nothing():
    documents = _documents()
    documents.render_receipt.side_effect = DocumentGenerationError("printer on fire")
    machine, cart, store = await _make_machine(documents=documents)
    machine.begin()

    with pytest.raises(CheckoutFailedError, match="receipt"):
        await machine.confirm()

    assert await store.list_orders() == []
    assert cart.item_count == 3
    assert machine.state == CheckoutState.PAYMENT_SELECTION


@pytest.mark.asyncio
async def test_unexpected_receipt_error_returns_to_selection():
    documents = _documents()
    documents.render_receipt.side_effect = ValueError("paragraph text")
    machine, cart, store = await _make_machine(documents=documents)
    machine.begin()

    with pytest.raises(CheckoutFailedError, match="paragraph text"):
        await machine.confirm()

    assert await store.list_orders() == []
    assert cart.item_count == 3
    assert machine.state == CheckoutState.PAYMENT_SELECTION
    machine.cancel()
    assert machine.state == CheckoutState.IDLE


@pytest.mark.asyncio
async def test_markup_payment_method_completes_with_pdf_receipt():
    machine, _, store = await _make_machine(documents=PdfDocumentSink())
    machine.payment_methods = [*machine.payment_methods, PaymentMethod(id="<b>gift", name="Gift card")]
    machine.begin()

    result = await machine.confirm("<b>gift")

    assert result.receipt.content.startswith(b"%PDF")
    assert result.order.payment_method == "<b>gift"
    assert machine.state == CheckoutState.IDLE
    assert len(await store.list_orders()) == 1


@pytest.mark.asyncio
async def test_persist_failure_keeps_cart():
    machine, cart, store = await _make_machine()
    machine.begin()

    with patch.object(store, "add_order", AsyncMock(side_effect=RuntimeError("disk full"))):
        with pytest.raises(CheckoutFailedError, match="disk full"):
            await machine.confirm()

    assert cart.item_count == 3
    assert machine.state == CheckoutState.PAYMENT_SELECTION


@pytest.mark.asyncio
async def test_retry_after_failure_succeeds():
    gateway = MagicMock(spec=PaymentGateway)
    gateway.settle = AsyncMock(side_effect=[PaymentDeclinedError("Card declined"), None])
    machine, _, store = await _make_machine(gateway=gateway)
    machine.begin()

    with pytest.raises(CheckoutFailedError):
        await machine.confirm()
    result = await machine.confirm()

    assert machine.state == CheckoutState.IDLE
    assert [o.id for o in await store.list_orders()] == [result.order.id]


# ── Cancellation while processing ──────────────────

@pytest.mark.asyncio
async def test_cancel_during_processing_aborts_settlement():
    machine, cart, store = await _make_machine(gateway=MockPaymentGateway(delay=10))
    machine.begin()

    task = asyncio.create_task(machine.confirm())
    await asyncio.sleep(0.01)
    assert machine.state == CheckoutState.PROCESSING

    machine.cancel()
    assert machine.state == CheckoutState.PAYMENT_SELECTION

    with pytest.raises(CheckoutCancelledError):
        await task
    assert cart.item_count == 3
    assert await store.list_orders() == []


@pytest.mark.asyncio
async def test_abort_during_processing_returns_to_idle():
    machine, _, store = await _make_machine(gateway=MockPaymentGateway(delay=10))
    machine.begin()

    task = asyncio.create_task(machine.confirm())
    await asyncio.sleep(0.01)
    machine.abort()

    with pytest.raises(CheckoutCancelledError):
        await task
    assert machine.state == CheckoutState.IDLE
    assert await store.list_orders() == []


# ── Observers ──────────────────────────────────────

@pytest.mark.asyncio
async def test_unsubscribe_and_failing_listener():
    machine, _, _ = await _make_machine()
    seen = []
    unsubscribe = machine.subscribe(seen.append)
    machine.subscribe(MagicMock(side_effect=RuntimeError("listener bug")))

    machine.begin()
    unsubscribe()
    machine.cancel()

    assert len(seen) == 1
    assert machine.state == CheckoutState.IDLE
