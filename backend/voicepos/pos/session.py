"""POS sessions: one cart and one checkout per register.

The methods here are the handler functions shared by the HTTP routes and
the voice commands.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Sequence

from voicepos.core.exceptions import (
    EmptyCartError,
    InvalidTransitionError,
    NotFoundError,
)
from voicepos.models.order import OrderStatus
from voicepos.pos.cart import Cart, TaxTable
from voicepos.pos.checkout import (
    GUEST_NAME,
    CheckoutResult,
    CheckoutState,
    CheckoutStateMachine,
    generate_order_id,
)
from voicepos.pos.gateway import PaymentGateway
from voicepos.schemas.auth import User
from voicepos.schemas.common import PaymentMethod
from voicepos.schemas.order import Order
from voicepos.schemas.product import CartItem
from voicepos.services.documents import DocumentSink
from voicepos.store.base import CatalogStore

logger = logging.getLogger(__name__)


class PosSession:
    def __init__(
        self,
        session_id: str,
        store: CatalogStore,
        gateway: PaymentGateway,
        documents: DocumentSink,
        tax_table: TaxTable,
        payment_methods: Sequence[PaymentMethod],
        default_payment_method: str = "cash",
        credit_payment_method: str = "credit",
        store_id: str | None = None,
        cashier: User | None = None,
    ):
        self.id = session_id
        self.store = store
        self.store_id = store_id
        self.cashier = cashier
        self.tax_table = tax_table
        self.cart = Cart(tax_table.rate_for(store_id))
        self.checkout = CheckoutStateMachine(
            cart=self.cart,
            store=store,
            gateway=gateway,
            documents=documents,
            payment_methods=payment_methods,
            default_payment_method=default_payment_method,
            credit_payment_method=credit_payment_method,
            store_id=store_id,
        )
        self.closed = False

    def _ensure_open(self) -> None:
        if self.closed:
            raise InvalidTransitionError(f"POS session {self.id} is closed")

    def _ensure_cart_editable(self) -> None:
        self._ensure_open()
        if self.checkout.state == CheckoutState.PROCESSING:
            raise InvalidTransitionError("Cart cannot change while payment is processing")

    def refresh_tax_rate(self) -> None:
        self.cart.tax_rate = self.tax_table.rate_for(self.store_id)

    # ── Cart handlers ─────────────────────────────
    async def add_product(self, product_id: str) -> CartItem | None:
        """Add one unit of a catalog product; unknown ids are ignored."""
        self._ensure_cart_editable()
        product = await self.store.get_product(product_id)
        if product is None:
            logger.warning("Product %s not found; nothing added to cart", product_id)
            return None
        self.cart.add_item(product)
        return next(item for item in self.cart.items if item.id == product.id)

    async def add_product_by_barcode(self, barcode: str) -> CartItem | None:
        self._ensure_cart_editable()
        product = await self.store.find_product_by_barcode(barcode)
        if product is None:
            logger.warning("No product with barcode %s", barcode)
            return None
        return await self.add_product(product.id)

    def update_quantity(self, item_id: str, quantity: int) -> None:
        self._ensure_cart_editable()
        self.cart.update_quantity(item_id, quantity)

    def remove_item(self, item_id: str) -> None:
        self._ensure_cart_editable()
        self.cart.remove_item(item_id)

    def clear_cart(self) -> None:
        self._ensure_cart_editable()
        self.cart.clear()

    # ── Checkout handlers ─────────────────────────
    def begin_checkout(self) -> None:
        self._ensure_open()
        self.checkout.begin()

    def select_payment(self, method_id: str) -> None:
        self._ensure_open()
        self.checkout.select_payment(method_id)

    async def select_customer(self, customer_id: str | None):
        self._ensure_open()
        return await self.checkout.select_customer(customer_id)

    async def confirm_payment(self, method_id: str | None = None) -> CheckoutResult:
        self._ensure_open()
        return await self.checkout.confirm(method_id)

    def cancel_checkout(self) -> None:
        self._ensure_open()
        self.checkout.cancel()

    # ── Held orders ───────────────────────────────
    async def hold_order(self, notes: str | None = None) -> Order:
        """Park the cart as an in-progress order and start a fresh sale."""
        self._ensure_open()
        if self.checkout.state == CheckoutState.PROCESSING:
            raise InvalidTransitionError("Cannot hold an order while payment is processing")
        if self.cart.is_empty:
            raise EmptyCartError("Cart is empty. Nothing to hold.")

        customer = self.checkout.customer
        order = Order(
            id=generate_order_id(),
            customer_id=customer.id if customer else None,
            customer_name=customer.name if customer else GUEST_NAME,
            items=self.cart.items,
            date=datetime.now(timezone.utc),
            subtotal=self.cart.subtotal(),
            tax=self.cart.tax(),
            total=self.cart.total(),
            payment_method=self.checkout.payment_method,
            status=OrderStatus.IN_PROGRESS,
            store_id=self.store_id,
            notes=notes,
        )
        stored = await self.store.add_order(order)

        self.checkout.cancel()
        self.cart.clear()
        await self.checkout.select_customer(None)
        logger.info("Order %s held with %d items", stored.id, len(stored.items))
        return stored

    async def resume_order(self, order_id: str) -> Order:
        """Move a held order back into the (empty, idle) cart."""
        self._ensure_open()
        if self.checkout.state != CheckoutState.IDLE or not self.cart.is_empty:
            raise InvalidTransitionError("Finish or clear the current sale before resuming an order")

        order = await self.store.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order not found: {order_id}")
        if order.status != OrderStatus.IN_PROGRESS:
            raise InvalidTransitionError(f"Order {order_id} is {order.status.value}, not held")

        if order.customer_id and await self.store.get_customer(order.customer_id) is not None:
            await self.checkout.select_customer(order.customer_id)
        self.cart.restore(order.items)
        await self.store.delete_order(order_id)
        logger.info("Order %s resumed", order_id)
        return order

    async def held_orders(self) -> list[Order]:
        return await self.store.list_orders(status=OrderStatus.IN_PROGRESS)

    def close(self) -> None:
        self.checkout.abort()
        self.closed = True


class SessionRegistry:
    """Creates and tracks the open POS sessions of one app instance."""

    def __init__(
        self,
        store: CatalogStore,
        gateway: PaymentGateway,
        documents: DocumentSink,
        tax_table: TaxTable,
        payment_methods: Sequence[PaymentMethod],
        default_payment_method: str = "cash",
        credit_payment_method: str = "credit",
    ):
        self.store = store
        self.gateway = gateway
        self.documents = documents
        self.tax_table = tax_table
        self.payment_methods = payment_methods
        self.default_payment_method = default_payment_method
        self.credit_payment_method = credit_payment_method
        self._sessions: dict[str, PosSession] = {}

    def create(self, cashier: User | None = None, store_id: str | None = None) -> PosSession:
        session = PosSession(
            session_id=f"session-{uuid.uuid4().hex[:12]}",
            store=self.store,
            gateway=self.gateway,
            documents=self.documents,
            tax_table=self.tax_table,
            payment_methods=self.payment_methods,
            default_payment_method=self.default_payment_method,
            credit_payment_method=self.credit_payment_method,
            store_id=store_id,
            cashier=cashier,
        )
        self._sessions[session.id] = session
        logger.info("POS session %s opened by %s", session.id, cashier.username if cashier else "anonymous")
        return session

    def get(self, session_id: str) -> PosSession | None:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info("POS session %s closed", session_id)
        return True

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)

    def refresh_tax_rates(self) -> None:
        for session in self._sessions.values():
            session.refresh_tax_rate()

    def __len__(self) -> int:
        return len(self._sessions)
