"""Receipt layout for thermal printers and plain-text previews."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel

from voicepos.pos.cart import round_money
from voicepos.schemas.order import Order

LINE_WIDTH = 32


class ReceiptLine(BaseModel):
    """Single line in receipt."""
    text: str
    align: Literal["left", "center", "right"] = "left"
    bold: bool = False
    double_height: bool = False
    double_width: bool = False


class ReceiptItem(BaseModel):
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class ReceiptData(BaseModel):
    """Everything printed on a receipt, already rounded to cents."""
    store_name: str
    order_id: str
    order_date: datetime
    cashier_name: str | None = None
    customer_name: str | None = None

    items: list[ReceiptItem]

    subtotal: Decimal
    tax: Decimal
    tax_rate: Decimal | None = None
    total: Decimal

    payment_method: str
    currency: str = "$"
    notes: str | None = None
    footer_message: str = "Thank you for your purchase!"


def receipt_from_order(
    order: Order,
    store_name: str,
    cashier_name: str | None = None,
    currency: str = "$",
) -> ReceiptData:
    """Snapshot an order into printable receipt data."""
    subtotal = order.subtotal
    tax = order.tax or Decimal("0")
    return ReceiptData(
        store_name=store_name,
        order_id=order.id,
        order_date=order.date,
        cashier_name=cashier_name,
        customer_name=order.customer_name,
        items=[
            ReceiptItem(
                name=item.name,
                quantity=item.quantity,
                unit_price=round_money(item.price),
                line_total=round_money(item.line_total),
            )
            for item in order.items
        ],
        subtotal=round_money(subtotal),
        tax=round_money(tax),
        tax_rate=round_money(tax / subtotal * 100) if subtotal else None,
        total=round_money(order.total),
        payment_method=order.payment_method,
        currency=currency,
        notes=order.notes,
    )


def _money(receipt_data: ReceiptData, amount: Decimal) -> str:
    return f"{receipt_data.currency}{amount:,.2f}"


def generate_receipt_lines(receipt_data: ReceiptData) -> list[ReceiptLine]:
    """Generate formatted receipt lines for thermal printer (58mm/80mm)."""
    lines: list[ReceiptLine] = []

    lines.append(ReceiptLine(
        text=receipt_data.store_name,
        align="center",
        bold=True,
        double_width=True,
    ))
    lines.append(ReceiptLine(text="RECEIPT", align="center"))
    lines.append(ReceiptLine(text="=" * LINE_WIDTH, align="center"))

    lines.append(ReceiptLine(text=f"Order: {receipt_data.order_id}", bold=True))
    lines.append(ReceiptLine(text=receipt_data.order_date.strftime("%Y-%m-%d %H:%M:%S")))
    if receipt_data.cashier_name:
        lines.append(ReceiptLine(text=f"Cashier: {receipt_data.cashier_name}"))
    if receipt_data.customer_name:
        lines.append(ReceiptLine(text=f"Customer: {receipt_data.customer_name}"))

    lines.append(ReceiptLine(text="-" * LINE_WIDTH))

    for item in receipt_data.items:
        lines.append(ReceiptLine(text=item.name))
        lines.append(ReceiptLine(text=(
            f"  {item.quantity} x {_money(receipt_data, item.unit_price)} = "
            f"{_money(receipt_data, item.line_total)}"
        )))

    lines.append(ReceiptLine(text="-" * LINE_WIDTH))

    lines.append(ReceiptLine(
        text=f"Subtotal: {_money(receipt_data, receipt_data.subtotal)}",
        align="right",
    ))
    if receipt_data.tax > 0:
        label = f"Tax ({receipt_data.tax_rate}%)" if receipt_data.tax_rate is not None else "Tax"
        lines.append(ReceiptLine(
            text=f"{label}: {_money(receipt_data, receipt_data.tax)}",
            align="right",
        ))

    lines.append(ReceiptLine(text="=" * LINE_WIDTH))
    lines.append(ReceiptLine(
        text=f"TOTAL: {_money(receipt_data, receipt_data.total)}",
        align="right",
        bold=True,
        double_height=True,
    ))

    lines.append(ReceiptLine(text="-" * LINE_WIDTH))
    lines.append(ReceiptLine(text=f"Payment: {receipt_data.payment_method}"))

    if receipt_data.notes:
        lines.append(ReceiptLine(text="-" * LINE_WIDTH))
        lines.append(ReceiptLine(text=f"Notes: {receipt_data.notes}"))

    lines.append(ReceiptLine(text="=" * LINE_WIDTH))
    lines.append(ReceiptLine(
        text=receipt_data.footer_message,
        align="center",
        bold=True,
    ))
    lines.append(ReceiptLine(text=" "))  # Blank line for printer to cut

    return lines


def format_receipt_text(receipt_data: ReceiptData) -> str:
    """Generate plain text receipt for preview/testing."""
    lines = generate_receipt_lines(receipt_data)
    return "\n".join(line.text for line in lines)


def generate_esc_pos_commands(receipt_data: ReceiptData) -> bytes:
    """ESC/POS byte stream for 58mm/80mm thermal printers."""
    lines = generate_receipt_lines(receipt_data)

    ESC = b'\x1b'
    GS = b'\x1d'

    commands = ESC + b'@'

    for line in lines:
        commands += ESC + {"center": b'a\x01', "right": b'a\x02'}.get(line.align, b'a\x00')
        commands += ESC + (b'E\x01' if line.bold else b'E\x00')

        if line.double_height and line.double_width:
            commands += GS + b'!\x30'
        elif line.double_height:
            commands += GS + b'!\x10'
        elif line.double_width:
            commands += GS + b'!\x20'
        else:
            commands += GS + b'!\x00'

        commands += line.text.encode('utf-8') + b'\n'

    # Full cut
    commands += GS + b'V\x00'

    return commands
