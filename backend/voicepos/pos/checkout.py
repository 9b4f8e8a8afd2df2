"""Checkout state machine.

    IDLE ──begin──▶ PAYMENT_SELECTION ──confirm──▶ PROCESSING ──▶ COMPLETED ──▶ IDLE
      ▲                 │      ▲                      │
      └─────cancel──────┘      └──── FAILED ◀─────────┘  (or cancel)

COMPLETED and FAILED are transient: observers see them, callers never wait
in them.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Sequence

from voicepos.core.exceptions import (
    CheckoutCancelledError,
    CheckoutFailedError,
    CustomerNotFoundError,
    EmptyCartError,
    InvalidPaymentMethodError,
    InvalidTransitionError,
)
from voicepos.models.order import OrderStatus
from voicepos.pos.cart import Cart, round_money
from voicepos.pos.gateway import PaymentGateway
from voicepos.schemas.common import Document, PaymentMethod
from voicepos.schemas.customer import Customer
from voicepos.schemas.order import Order
from voicepos.services.customers import apply_credit
from voicepos.services.documents import DocumentSink
from voicepos.store.base import CatalogStore

logger = logging.getLogger(__name__)

GUEST_NAME = "Walk-in Customer"


class CheckoutState(str, Enum):
    IDLE = "idle"
    PAYMENT_SELECTION = "payment-selection"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class CheckoutEvent:
    kind: str  # "state-changed" | "order-created"
    state: CheckoutState
    order: Order | None = None


@dataclass
class CheckoutResult:
    order: Order
    receipt: Document | None
    customer_update_error: str | None = None


CheckoutListener = Callable[[CheckoutEvent], None]


def generate_order_id() -> str:
    """Timestamped order id with a random suffix so ids stay unique within a second."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"ORD-{stamp}-{uuid.uuid4().hex[:6].upper()}"


class CheckoutStateMachine:
    def __init__(
        self,
        cart: Cart,
        store: CatalogStore,
        gateway: PaymentGateway,
        documents: DocumentSink,
        payment_methods: Sequence[PaymentMethod],
        default_payment_method: str = "cash",
        credit_payment_method: str = "credit",
        store_id: str | None = None,
    ):
        self.cart = cart
        self.store = store
        self.gateway = gateway
        self.documents = documents
        self.payment_methods = payment_methods
        self.default_payment_method = default_payment_method
        self.credit_payment_method = credit_payment_method
        self.store_id = store_id

        self.state = CheckoutState.IDLE
        self.payment_method = default_payment_method
        self.customer: Customer | None = None
        self.last_error: str | None = None
        self._listeners: list[CheckoutListener] = []
        self._settlement: asyncio.Task | None = None
        self._cancel_requested = False

    # ── Observers ─────────────────────────────────
    def subscribe(self, listener: CheckoutListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: CheckoutEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Checkout listener failed on %s", event.kind)

    def _set_state(self, state: CheckoutState) -> None:
        self.state = state
        self._emit(CheckoutEvent("state-changed", state))

    # ── Transitions ───────────────────────────────
    def begin(self) -> None:
        if self.state == CheckoutState.PAYMENT_SELECTION:
            return
        if self.state != CheckoutState.IDLE:
            raise InvalidTransitionError(f"Cannot begin checkout while {self.state.value}")
        if self.cart.is_empty:
            raise EmptyCartError("Cart is empty. Add products before checkout.")
        self.last_error = None
        self._set_state(CheckoutState.PAYMENT_SELECTION)

    def select_payment(self, method_id: str) -> None:
        if self.state == CheckoutState.PROCESSING:
            raise InvalidTransitionError("Payment is already processing")
        if method_id not in {m.id for m in self.payment_methods}:
            raise InvalidPaymentMethodError(method_id)
        self.payment_method = method_id

    async def select_customer(self, customer_id: str | None) -> Customer | None:
        """Attach a customer to the sale; ``None`` means walk-in guest."""
        if self.state == CheckoutState.PROCESSING:
            raise InvalidTransitionError("Payment is already processing")
        if customer_id is None:
            self.customer = None
            return None
        customer = await self.store.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        self.customer = customer
        return customer

    def cancel(self) -> None:
        if self.state == CheckoutState.PAYMENT_SELECTION:
            self._set_state(CheckoutState.IDLE)
        elif self.state == CheckoutState.PROCESSING:
            if self._settlement is None or not self._settlement.cancel():
                raise InvalidTransitionError("Payment has already been settled")
            self._cancel_requested = True
            logger.info("Payment settlement cancelled")
            self._set_state(CheckoutState.PAYMENT_SELECTION)

    def abort(self) -> None:
        """Cancel any in-flight settlement and return to IDLE; used on session close."""
        if self._settlement is not None and not self._settlement.done():
            self._cancel_requested = True
            self._settlement.cancel()
        if self.state != CheckoutState.IDLE:
            self._set_state(CheckoutState.IDLE)

    def _fail(self, message: str, cause: Exception) -> CheckoutFailedError:
        self.last_error = message
        logger.error("Checkout failed: %s", message)
        self._set_state(CheckoutState.FAILED)
        self._set_state(CheckoutState.PAYMENT_SELECTION)
        return CheckoutFailedError(message, cause=cause)

    def _build_order(self) -> Order:
        customer = self.customer
        return Order(
            id=generate_order_id(),
            customer_id=customer.id if customer else None,
            customer_name=customer.name if customer else GUEST_NAME,
            items=self.cart.items,
            date=datetime.now(timezone.utc),
            subtotal=self.cart.subtotal(),
            tax=self.cart.tax(),
            total=self.cart.total(),
            payment_method=self.payment_method,
            status=OrderStatus.COMPLETED,
            store_id=self.store_id,
        )

    async def confirm(self, method_id: str | None = None) -> CheckoutResult:
        """Settle the payment and turn the cart into a stored order."""
        if self.state != CheckoutState.PAYMENT_SELECTION:
            raise InvalidTransitionError(f"Cannot confirm payment while {self.state.value}")
        if method_id is not None:
            self.select_payment(method_id)
        if self.cart.is_empty:
            raise EmptyCartError()

        self._set_state(CheckoutState.PROCESSING)
        self._cancel_requested = False
        self._settlement = asyncio.ensure_future(
            self.gateway.settle(round_money(self.cart.total()), self.payment_method)
        )
        try:
            await self._settlement
        except asyncio.CancelledError:
            if self.state == CheckoutState.PROCESSING:
                self._set_state(CheckoutState.PAYMENT_SELECTION)
            if self._cancel_requested:
                self._cancel_requested = False
                raise CheckoutCancelledError() from None
            raise
        except Exception as exc:
            raise self._fail(f"Payment failed: {getattr(exc, 'message', exc)}", exc) from exc
        finally:
            self._settlement = None

        order = self._build_order()
        try:
            receipt = self.documents.render_receipt(order)
        except Exception as exc:
            raise self._fail(f"Could not generate receipt: {getattr(exc, 'message', exc)}", exc) from exc
        try:
            stored = await self.store.add_order(order)
        except Exception as exc:
            raise self._fail(f"Could not save order: {getattr(exc, 'message', exc)}", exc) from exc
        logger.info("Order %s completed: %s via %s", stored.id, round_money(stored.total), stored.payment_method)

        customer_update_error = None
        if stored.payment_method == self.credit_payment_method and stored.customer_id:
            try:
                await apply_credit(self.store, stored.customer_id, stored.total)
            except Exception as exc:
                customer_update_error = f"Order saved but customer balance was not updated: {getattr(exc, 'message', exc)}"
                logger.error("Credit update failed for order %s: %s", stored.id, exc)

        self.cart.clear()
        self.payment_method = self.default_payment_method
        self.customer = None
        self._emit(CheckoutEvent("order-created", CheckoutState.COMPLETED, stored))
        self._set_state(CheckoutState.COMPLETED)
        self._set_state(CheckoutState.IDLE)
        return CheckoutResult(order=stored, receipt=receipt, customer_update_error=customer_update_error)
