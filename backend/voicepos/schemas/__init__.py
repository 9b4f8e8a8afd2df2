from voicepos.schemas.product import (
    Product, ProductCreate, ProductUpdate, ProductListResponse, CartItem,
)
from voicepos.schemas.customer import (
    Customer, CustomerCreate, CustomerUpdate, CustomerListResponse, RecoveryRequest,
)
from voicepos.schemas.order import Order, OrderUpdate, OrderListResponse
from voicepos.schemas.auth import (
    LoginRequest, TokenResponse, User, UserCreate, UserUpdate, CurrentUser,
)
from voicepos.schemas.common import PaymentMethod, ImportResult, Document, DocumentKind
from voicepos.schemas.report import ProductSales, SalesReport
from voicepos.schemas.pos import (
    PosSessionCreate, CartItemAdd, QuantityUpdate, PaymentSelection, CustomerSelection,
    ConfirmRequest, HoldRequest, CartTotals, PosSessionState, CheckoutResponse,
    TaxSettings, TaxRateUpdate,
)
from voicepos.schemas.voice import (
    VoicePageRequest, VoiceDispatchRequest, VoiceCommandInfo, VoiceState, VoiceDispatchResponse,
)

__all__ = [
    "Product", "ProductCreate", "ProductUpdate", "ProductListResponse", "CartItem",
    "Customer", "CustomerCreate", "CustomerUpdate", "CustomerListResponse", "RecoveryRequest",
    "Order", "OrderUpdate", "OrderListResponse",
    "LoginRequest", "TokenResponse", "User", "UserCreate", "UserUpdate", "CurrentUser",
    "PaymentMethod", "ImportResult", "Document", "DocumentKind",
    "ProductSales", "SalesReport",
    "PosSessionCreate", "CartItemAdd", "QuantityUpdate", "PaymentSelection", "CustomerSelection",
    "ConfirmRequest", "HoldRequest", "CartTotals", "PosSessionState", "CheckoutResponse",
    "TaxSettings", "TaxRateUpdate",
    "VoicePageRequest", "VoiceDispatchRequest", "VoiceCommandInfo", "VoiceState", "VoiceDispatchResponse",
]
