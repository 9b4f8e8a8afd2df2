"""Product table."""

from decimal import Decimal

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from voicepos.db.base import Base
from voicepos.models.mixins import StringPrimaryKeyMixin, TimestampMixin


class ProductRow(StringPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="general")
    in_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    store_id: Mapped[str | None] = mapped_column(String(64))
    barcode: Mapped[str | None] = mapped_column(String(100), index=True)
    image: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Product {self.id}: {self.name}>"
