"""Domain error taxonomy.

Routers translate these into HTTP responses; core code raises them and never
leaves a half-applied mutation behind.
"""


class POSError(Exception):
    """Base class for every error raised by the POS core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ── Validation ─────────────────────────────────────
class ValidationError(POSError):
    pass


class InvalidPaymentMethodError(ValidationError):
    def __init__(self, method_id: str):
        super().__init__(f"Unknown payment method: {method_id}")
        self.method_id = method_id


# ── Not found ──────────────────────────────────────
class NotFoundError(POSError):
    pass


# ── State ──────────────────────────────────────────
class StateError(POSError):
    pass


class EmptyCartError(StateError):
    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class InvalidTransitionError(StateError):
    pass


class CustomerNotFoundError(StateError):
    def __init__(self, customer_id: str):
        super().__init__(f"Customer not found: {customer_id}")
        self.customer_id = customer_id


# ── External I/O ───────────────────────────────────
class ExternalServiceError(POSError):
    pass


class PaymentDeclinedError(ExternalServiceError):
    pass


class DocumentGenerationError(ExternalServiceError):
    pass


class SpeechRecognitionError(ExternalServiceError):
    """Speech platform failure, identified by a platform error code."""

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or f"Speech recognition error: {code}")
        self.code = code


class CheckoutFailedError(POSError):
    """Checkout rolled back to payment selection; the cart is untouched."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class CheckoutCancelledError(CheckoutFailedError):
    """Settlement was cancelled while processing; back to payment selection."""

    def __init__(self, message: str = "Payment cancelled"):
        super().__init__(message)
