"""Customer credit balance: accumulation on credit sales, recovery payments."""

import logging
from decimal import Decimal

from voicepos.core.exceptions import CustomerNotFoundError, ValidationError
from voicepos.schemas.customer import Customer
from voicepos.store.base import CatalogStore

logger = logging.getLogger(__name__)


async def apply_credit(store: CatalogStore, customer_id: str, amount: Decimal) -> Customer:
    """Add ``amount`` to the customer's outstanding balance (``total_spent``)."""
    customer = await store.get_customer(customer_id)
    if customer is None:
        raise CustomerNotFoundError(customer_id)
    updated = await store.update_customer(
        customer_id, {"total_spent": customer.total_spent + amount}
    )
    if updated is None:
        raise CustomerNotFoundError(customer_id)
    logger.info("Credit of %s recorded for customer %s", amount, customer_id)
    return updated


async def record_recovery(
    store: CatalogStore,
    customer_id: str,
    amount: Decimal,
    payment_method: str,
    allowed_methods: list[str] | None = None,
) -> Customer:
    """Reduce the customer's balance by a received payment, never below zero."""
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    if allowed_methods is not None and payment_method not in allowed_methods:
        raise ValidationError(f"Unknown payment method: {payment_method}")

    customer = await store.get_customer(customer_id)
    if customer is None:
        raise CustomerNotFoundError(customer_id)

    balance = max(customer.total_spent - amount, Decimal("0"))
    updated = await store.update_customer(customer_id, {"total_spent": balance})
    if updated is None:
        raise CustomerNotFoundError(customer_id)
    logger.info(
        "Recovered %s from customer %s via %s (balance %s)",
        amount, customer_id, payment_method, balance,
    )
    return updated


async def customers_with_balance(store: CatalogStore) -> list[Customer]:
    return [c for c in await store.list_customers() if c.total_spent > 0]
