"""PDF documents: receipts, daily sales reports and the product catalog."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from io import BytesIO
from typing import Any, Callable
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from voicepos.core.exceptions import DocumentGenerationError
from voicepos.pos.cart import round_money
from voicepos.schemas.common import Document, DocumentKind
from voicepos.schemas.order import Order
from voicepos.schemas.product import Product
from voicepos.schemas.report import SalesReport
from voicepos.services.receipt import receipt_from_order

logger = logging.getLogger(__name__)

RECEIPT_PAGE_SIZE = (80 * mm, 200 * mm)
HEADER_BLUE = colors.Color(41 / 255, 128 / 255, 185 / 255)

GRID_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), HEADER_BLUE),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
    ("FONTSIZE", (0, 0), (-1, -1), 9),
    ("INNERGRID", (0, 0), (-1, -1), 0.25, colors.black),
    ("BOX", (0, 0), (-1, -1), 0.75, colors.black),
    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
]


class DocumentSink(ABC):
    """Renders printable documents; failures raise ``DocumentGenerationError``."""

    @abstractmethod
    def render_receipt(self, order: Order) -> Document: ...

    @abstractmethod
    def render_daily_sales_report(self, report: SalesReport) -> Document: ...

    @abstractmethod
    def render_catalog(self, products: list[Product]) -> Document: ...

    def render(self, kind: DocumentKind | str, payload: Any) -> Document:
        kind = DocumentKind(kind)
        if kind == DocumentKind.RECEIPT:
            return self.render_receipt(payload)
        if kind == DocumentKind.DAILY_SALES_REPORT:
            return self.render_daily_sales_report(payload)
        return self.render_catalog(payload)


class PdfDocumentSink(DocumentSink):
    def __init__(self, store_name: str = "Main Store", currency: str = "$"):
        self.store_name = store_name
        self.currency = currency

    def _money(self, amount: Decimal) -> str:
        return f"{self.currency}{round_money(amount):,.2f}"

    def _build(
        self,
        kind: DocumentKind,
        filename: str,
        make_elements: Callable[[], list],
        **doc_kwargs,
    ) -> Document:
        buffer = BytesIO()
        try:
            elements = make_elements()
            doc = SimpleDocTemplate(buffer, **doc_kwargs)
            doc.build(elements)
        except Exception as exc:
            logger.error("Failed to render %s %s: %s", kind.value, filename, exc)
            raise DocumentGenerationError(
                f"Could not generate {kind.value.replace('-', ' ')}: {exc}"
            ) from exc
        return Document(kind=kind, filename=filename, content=buffer.getvalue())

    # ── Receipt ───────────────────────────────────
    def render_receipt(self, order: Order) -> Document:
        return self._build(
            DocumentKind.RECEIPT,
            f"receipt-{order.id}.pdf",
            lambda: self._receipt_elements(order),
            pagesize=RECEIPT_PAGE_SIZE,
            leftMargin=5 * mm,
            rightMargin=5 * mm,
            topMargin=5 * mm,
            bottomMargin=5 * mm,
        )

    def _receipt_elements(self, order: Order) -> list:
        data = receipt_from_order(order, self.store_name, currency=self.currency)
        styles = getSampleStyleSheet()
        small = styles["Normal"].clone("receipt", fontSize=8, leading=10)
        title = styles["Title"].clone("receipt-title", fontSize=12, leading=14)

        elements: list = [
            Paragraph(escape(data.store_name), title),
            Paragraph("RECEIPT", small),
            Paragraph(f"Date: {data.order_date:%Y-%m-%d %H:%M}", small),
            Paragraph(f"Order: #{escape(data.order_id)}", small),
        ]
        if data.customer_name:
            elements.append(Paragraph(f"Customer: {escape(data.customer_name)}", small))
        elements.append(Spacer(1, 4))

        rows = [["Item", "Qty", "Price", "Total"]]
        rows += [
            [item.name, str(item.quantity), self._money(item.unit_price), self._money(item.line_total)]
            for item in data.items
        ]
        items_table = Table(rows, colWidths=[25 * mm, 10 * mm, 15 * mm, 15 * mm], repeatRows=1)
        items_table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 7),
            ("ALIGN", (1, 0), (1, -1), "CENTER"),
            ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
            ("LINEBELOW", (0, 0), (-1, 0), 0.5, colors.grey),
        ]))
        elements += [items_table, Spacer(1, 4)]

        totals = [["Subtotal:", self._money(data.subtotal)]]
        if data.tax > 0:
            totals.append([f"Tax ({data.tax_rate}%):", self._money(data.tax)])
        totals.append(["TOTAL:", self._money(data.total)])
        totals_table = Table(totals, colWidths=[35 * mm, 30 * mm])
        totals_table.setStyle(TableStyle([
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ]))
        elements += [
            totals_table,
            Spacer(1, 4),
            Paragraph(f"Payment Method: {escape(data.payment_method)}", small),
        ]
        if data.notes:
            elements.append(Paragraph(f"Notes: {escape(data.notes)}", small))
        elements += [Spacer(1, 8), Paragraph(escape(data.footer_message), small)]
        return elements

    # ── Daily sales report ────────────────────────
    def render_daily_sales_report(self, report: SalesReport) -> Document:
        day = report.date.isoformat() if report.date else datetime.now().date().isoformat()
        return self._build(
            DocumentKind.DAILY_SALES_REPORT,
            f"daily-sales-{day}.pdf",
            lambda: self._report_elements(report, day),
            pagesize=A4,
            rightMargin=40,
            leftMargin=40,
            topMargin=60,
            bottomMargin=40,
        )

    def _report_elements(self, report: SalesReport, day: str) -> list:
        styles = getSampleStyleSheet()
        elements: list = [
            Paragraph(f"{escape(self.store_name)} - Daily Sales Report", styles["Heading1"]),
            Paragraph(f"Date: {day}", styles["Normal"]),
            Spacer(1, 12),
            Paragraph("Sales Summary", styles["Heading2"]),
        ]
        summary = Table([
            ["Total Sales", self._money(report.total_sales)],
            ["Total Orders", str(report.total_orders)],
            ["Average Order Value", self._money(report.average_order_value)],
        ], colWidths=[170, 200], hAlign="LEFT")
        summary.setStyle(TableStyle([
            ("FONTSIZE", (0, 0), (-1, -1), 11),
            ("LINEABOVE", (0, 0), (-1, 0), 0.5, colors.black),
            ("LINEBELOW", (0, -1), (-1, -1), 0.5, colors.black),
        ]))
        elements += [summary, Spacer(1, 12)]

        if report.payment_methods:
            elements.append(Paragraph("Payment Methods", styles["Heading2"]))
            methods = [["Payment Method", "Amount"]] + [
                [method, self._money(amount)] for method, amount in report.payment_methods.items()
            ]
            methods_table = Table(methods, hAlign="LEFT")
            methods_table.setStyle(TableStyle(GRID_STYLE))
            elements += [methods_table, Spacer(1, 12)]

        elements.append(Paragraph("Order Details", styles["Heading2"]))
        orders = [["Order ID", "Time", "Customer", "Items", "Payment Method", "Total"]] + [
            [
                order.id,
                f"{order.date:%H:%M}",
                order.customer_name or "Guest",
                str(len(order.items)),
                order.payment_method,
                self._money(order.total),
            ]
            for order in report.orders
        ]
        orders_table = Table(orders, repeatRows=1)
        orders_table.setStyle(TableStyle(GRID_STYLE + [("ALIGN", (3, 1), (-1, -1), "RIGHT")]))
        elements.append(orders_table)

        if report.top_products:
            elements += [Spacer(1, 12), Paragraph("Top Selling Products", styles["Heading2"])]
            top = [["#", "Product", "Quantity", "Revenue"]] + [
                [str(rank), p.name, str(p.quantity), self._money(p.revenue)]
                for rank, p in enumerate(report.top_products, start=1)
            ]
            top_table = Table(top, hAlign="LEFT")
            top_table.setStyle(TableStyle(GRID_STYLE))
            elements.append(top_table)
        return elements

    # ── Catalog ───────────────────────────────────
    def render_catalog(self, products: list[Product]) -> Document:
        return self._build(
            DocumentKind.CATALOG,
            "catalog.pdf",
            lambda: self._catalog_elements(products),
            pagesize=A4,
        )

    def _catalog_elements(self, products: list[Product]) -> list:
        styles = getSampleStyleSheet()
        rows = [["ID", "Name", "Category", "Barcode", "Price", "In Stock"]] + [
            [p.id, p.name, p.category, p.barcode or "", self._money(p.price), str(p.in_stock)]
            for p in products
        ]
        table = Table(rows, repeatRows=1)
        table.setStyle(TableStyle(GRID_STYLE + [("ALIGN", (4, 1), (-1, -1), "RIGHT")]))
        return [
            Paragraph(f"{escape(self.store_name)} - Product Catalog", styles["Heading1"]),
            Paragraph(f"{len(products)} products", styles["Normal"]),
            Spacer(1, 12),
            table,
        ]
