"""
Unit tests for receipt layout and PDF documents.

Receipts print rounded amounts even though orders keep unrounded totals.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from voicepos.core.exceptions import DocumentGenerationError
from voicepos.models.order import OrderStatus
from voicepos.schemas.common import DocumentKind
from voicepos.schemas.order import Order
from voicepos.schemas.product import CartItem, Product
from voicepos.services.documents import PdfDocumentSink
from voicepos.services.receipt import (
    format_receipt_text,
    generate_esc_pos_commands,
    generate_receipt_lines,
    receipt_from_order,
)
from voicepos.services.reports import summarize_sales


# ── Helpers ──────────────────────────────────────────────────────────────────

def _make_order(*, order_id="ORD-20260101120000-ABC123", customer_name="John Smith", notes=None):
    items = [
        CartItem(id="product-2", name="Cappuccino", price=Decimal("3.50"), category="drinks", quantity=2),
        CartItem(id="product-11", name="Burger", price=Decimal("8.99"), category="food", quantity=1),
    ]
    return Order(
        id=order_id,
        customer_id="customer-1",
        customer_name=customer_name,
        items=items,
        date=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
        subtotal=Decimal("15.99"),
        tax=Decimal("1.599"),
        total=Decimal("17.589"),
        payment_method="cash",
        status=OrderStatus.COMPLETED,
        notes=notes,
    )


# ── Receipt data ─────────────────────────────────────────────────────────────

def test_receipt_data_rounds_to_cents():
    data = receipt_from_order(_make_order(), "Main Store", cashier_name="Admin User")

    assert data.subtotal == Decimal("15.99")
    assert data.tax == Decimal("1.60")
    assert data.total == Decimal("17.59")
    assert data.tax_rate == Decimal("10.00")
    assert [i.line_total for i in data.items] == [Decimal("7.00"), Decimal("8.99")]


def test_receipt_text_layout():
    text = format_receipt_text(receipt_from_order(_make_order(notes="No onions"), "Main Store", "Admin User"))

    assert "Main Store" in text
    assert "Order: ORD-20260101120000-ABC123" in text
    assert "Cashier: Admin User" in text
    assert "Customer: John Smith" in text
    assert "  2 x $3.50 = $7.00" in text
    assert "Tax (10.00%): $1.60" in text
    assert "TOTAL: $17.59" in text
    assert "Notes: No onions" in text


def test_zero_tax_line_omitted():
    order = _make_order().model_copy(update={"tax": Decimal("0"), "total": Decimal("15.99")})
    lines = generate_receipt_lines(receipt_from_order(order, "Main Store"))
    assert not any(line.text.startswith("Tax") for line in lines)


def test_esc_pos_stream_framing():
    raw = generate_esc_pos_commands(receipt_from_order(_make_order(), "Main Store"))
    assert raw.startswith(b"\x1b@")
    assert raw.endswith(b"\x1dV\x00")
    assert b"TOTAL: $17.59" in raw


# ── PDF documents ────────────────────────────────────────────────────────────

def test_pdf_receipt():
    doc = PdfDocumentSink("Main Store").render_receipt(_make_order(customer_name="A & B <Ltd>"))

    assert doc.kind == DocumentKind.RECEIPT
    assert doc.media_type == "application/pdf"
    assert doc.filename.endswith(".pdf")
    assert doc.content.startswith(b"%PDF")


def test_pdf_daily_report_and_catalog():
    sink = PdfDocumentSink()
    report = summarize_sales([_make_order()], on_date=date(2026, 1, 1))
    products = [Product(id="product-1", name="Espresso", price=Decimal("2.50"), category="drinks", in_stock=3)]

    assert sink.render(DocumentKind.DAILY_SALES_REPORT, report).content.startswith(b"%PDF")
    assert sink.render("catalog", products).content.startswith(b"%PDF")


def test_pdf_failure_raises_document_error():
    with patch("voicepos.services.documents.SimpleDocTemplate.build", side_effect=ValueError("layout")):
        with pytest.raises(DocumentGenerationError, match="layout"):
            PdfDocumentSink().render_receipt(_make_order())


def test_pdf_receipt_escapes_markup_in_payment_method():
    order = _make_order().model_copy(update={"payment_method": "<b>gift"})

    doc = PdfDocumentSink().render_receipt(order)

    assert doc.content.startswith(b"%PDF")


def test_pdf_element_errors_raise_document_error():
    with patch("voicepos.services.documents.Paragraph", side_effect=ValueError("bad markup")):
        with pytest.raises(DocumentGenerationError, match="bad markup"):
            PdfDocumentSink().render_receipt(_make_order())
        with pytest.raises(DocumentGenerationError, match="bad markup"):
            PdfDocumentSink().render_catalog([])
