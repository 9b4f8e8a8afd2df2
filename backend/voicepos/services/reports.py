"""Daily sales aggregation."""

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Iterable

from voicepos.models.order import OrderStatus
from voicepos.schemas.order import Order
from voicepos.schemas.report import ProductSales, SalesReport
from voicepos.store.base import CatalogStore


def summarize_sales(
    orders: Iterable[Order], on_date: date | None = None, top_n: int = 5
) -> SalesReport:
    """Aggregate completed orders; held and cancelled orders are not sales."""
    completed = [o for o in orders if o.status == OrderStatus.COMPLETED]

    total_sales = sum((o.total for o in completed), Decimal("0"))
    by_method: dict[str, Decimal] = OrderedDict()
    by_product: dict[str, ProductSales] = OrderedDict()

    for order in completed:
        by_method[order.payment_method] = by_method.get(order.payment_method, Decimal("0")) + order.total
        for item in order.items:
            entry = by_product.get(item.id)
            if entry is None:
                entry = by_product[item.id] = ProductSales(
                    product_id=item.id, name=item.name, quantity=0, revenue=Decimal("0")
                )
            entry.quantity += item.quantity
            entry.revenue += item.line_total

    top_products = sorted(by_product.values(), key=lambda p: p.quantity, reverse=True)[:top_n]

    return SalesReport(
        date=on_date,
        total_sales=total_sales,
        total_orders=len(completed),
        average_order_value=total_sales / len(completed) if completed else Decimal("0"),
        payment_methods=dict(by_method),
        top_products=top_products,
        orders=completed,
    )


async def daily_sales_report(store: CatalogStore, on_date: date, top_n: int = 5) -> SalesReport:
    orders = await store.list_orders(on_date=on_date)
    return summarize_sales(orders, on_date=on_date, top_n=top_n)
