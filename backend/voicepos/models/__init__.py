"""SQLAlchemy tables and shared enums."""

from voicepos.models.role import Feature, RoleType
from voicepos.models.product import ProductRow
from voicepos.models.customer import CustomerRow
from voicepos.models.order import OrderRow, OrderStatus, ORDER_STATUS_TRANSITIONS

__all__ = [
    "Feature",
    "RoleType",
    "ProductRow",
    "CustomerRow",
    "OrderRow",
    "OrderStatus",
    "ORDER_STATUS_TRANSITIONS",
]
