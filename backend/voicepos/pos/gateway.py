"""Payment settlement collaborators."""

import asyncio
import logging
from abc import ABC, abstractmethod
from decimal import Decimal

logger = logging.getLogger(__name__)


class PaymentGateway(ABC):
    """Settles a payment; raising means the payment did not go through.

    Implementations must tolerate ``asyncio.CancelledError`` at any await
    point: checkout cancellation cancels the settling task.
    """

    @abstractmethod
    async def settle(self, amount: Decimal, method: str) -> None: ...


class MockPaymentGateway(PaymentGateway):
    """Always approves after a fixed delay."""

    def __init__(self, delay: float = 1.5):
        self.delay = delay

    async def settle(self, amount: Decimal, method: str) -> None:
        logger.debug("Settling %s via %s (mock, %.1fs)", amount, method, self.delay)
        await asyncio.sleep(self.delay)
