"""Unit tests for daily sales aggregation."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from voicepos.models.order import OrderStatus
from voicepos.schemas.order import Order
from voicepos.schemas.product import CartItem
from voicepos.services.reports import daily_sales_report, summarize_sales
from voicepos.store import InMemoryCatalogStore


def _make_order(order_id, total, method="cash", status=OrderStatus.COMPLETED, items=None, when=None):
    items = items or [
        CartItem(id="product-1", name="Espresso", price=Decimal("2.50"), category="drinks", quantity=1)
    ]
    return Order(
        id=order_id,
        items=items,
        date=when or datetime(2026, 3, 4, 9, tzinfo=timezone.utc),
        subtotal=Decimal(total),
        tax=Decimal("0"),
        total=Decimal(total),
        payment_method=method,
        status=status,
    )


# ── Aggregation ────────────────────────────────────

def test_summary_counts_completed_orders_only():
    orders = [
        _make_order("ORD-1", "10.00"),
        _make_order("ORD-2", "20.00", method="credit-card"),
        _make_order("ORD-3", "99.00", status=OrderStatus.IN_PROGRESS),
        _make_order("ORD-4", "50.00", status=OrderStatus.CANCELLED),
    ]
    report = summarize_sales(orders, on_date=date(2026, 3, 4))

    assert report.total_orders == 2
    assert report.total_sales == Decimal("30.00")
    assert report.average_order_value == Decimal("15.00")
    assert report.payment_methods == {"cash": Decimal("10.00"), "credit-card": Decimal("20.00")}
    assert [o.id for o in report.orders] == ["ORD-1", "ORD-2"]


def test_top_products_by_quantity():
    burger = CartItem(id="product-11", name="Burger", price=Decimal("8.99"), category="food", quantity=3)
    cake = CartItem(id="product-4", name="Chocolate Cake", price=Decimal("4.99"), category="dessert", quantity=1)
    report = summarize_sales([
        _make_order("ORD-1", "31.96", items=[burger, cake]),
        _make_order("ORD-2", "8.99", items=[burger.model_copy(update={"quantity": 1})]),
    ], top_n=1)

    assert len(report.top_products) == 1
    top = report.top_products[0]
    assert top.product_id == "product-11"
    assert top.quantity == 4
    assert top.revenue == Decimal("35.96")


def test_empty_day():
    report = summarize_sales([])
    assert report.total_orders == 0
    assert report.total_sales == 0
    assert report.average_order_value == 0


@pytest.mark.asyncio
async def test_daily_report_filters_by_date():
    store = InMemoryCatalogStore()
    await store.add_order(_make_order("ORD-1", "5.00"))
    await store.add_order(_make_order("ORD-2", "7.00", when=datetime(2026, 3, 5, 9, tzinfo=timezone.utc)))

    report = await daily_sales_report(store, date(2026, 3, 4))

    assert report.date == date(2026, 3, 4)
    assert [o.id for o in report.orders] == ["ORD-1"]
