from enum import Enum

from pydantic import BaseModel, Field


class PaymentMethod(BaseModel):
    id: str
    name: str


class ImportResult(BaseModel):
    """Outcome of a bulk import; row errors never abort the batch."""
    added: int = 0
    updated: int = 0
    errors: list[str] = Field(default_factory=list)


class DocumentKind(str, Enum):
    RECEIPT = "receipt"
    DAILY_SALES_REPORT = "daily-sales-report"
    CATALOG = "catalog"


class Document(BaseModel):
    """A rendered file ready to be downloaded or printed."""
    kind: DocumentKind
    filename: str
    media_type: str = "application/pdf"
    content: bytes
