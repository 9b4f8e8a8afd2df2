"""Unit tests for Excel import/export of products and customers."""

from decimal import Decimal

import pytest

from voicepos.core.exceptions import ValidationError
from voicepos.services.spreadsheets import (
    CUSTOMER_COLUMNS,
    CUSTOMER_EXPORT_COLUMNS,
    PRODUCT_COLUMNS,
    customers_template,
    export_customers,
    export_products,
    import_customers,
    import_products,
    products_template,
    read_rows,
    write_workbook,
)
from voicepos.store import InMemoryCatalogStore, seed_catalog


# ── Products ───────────────────────────────────────

@pytest.mark.asyncio
async def test_import_products_reports_bad_rows_and_keeps_good_ones():
    store = InMemoryCatalogStore()
    content = write_workbook(PRODUCT_COLUMNS, [
        {"name": "Green Tea", "price": 2.75, "category": "drinks", "inStock": 12},
        {"name": "Mystery", "price": "abc"},
        {"name": "", "price": 1},
        {"name": "Scone", "price": "3.10", "inStock": "lots"},
        {"name": "Muffin", "price": "2"},
    ])

    result = await import_products(store, content)

    assert result.added == 2
    assert result.updated == 0
    assert len(result.errors) == 3
    assert result.errors[0].startswith("Row 3: Invalid price")
    assert result.errors[1].startswith("Row 4: Missing required fields")
    assert result.errors[2].startswith("Row 5: Invalid stock")

    products = {p.name: p for p in await store.list_products()}
    assert products["Green Tea"].price == Decimal("2.75")
    assert products["Green Tea"].in_stock == 12
    assert products["Muffin"].in_stock == 0
    assert products["Muffin"].category == "general"


@pytest.mark.asyncio
async def test_import_errors_report_sheet_rows_after_blank_rows():
    store = InMemoryCatalogStore()
    content = write_workbook(PRODUCT_COLUMNS, [
        {"name": "Green Tea", "price": 2.75},
        {},
        {},
        {"name": "Mystery", "price": "abc"},
    ])

    result = await import_products(store, content)

    assert result.added == 1
    assert result.errors == ["Row 5: Invalid price for product: Mystery"]


@pytest.mark.asyncio
async def test_import_products_updates_by_id():
    store = InMemoryCatalogStore()
    await seed_catalog(store)
    content = write_workbook(PRODUCT_COLUMNS, [
        {"id": "product-1", "name": "Double Espresso", "price": 3, "category": "drinks", "inStock": 50},
        {"id": "product-999", "name": "Ghost", "price": 1},
    ])

    result = await import_products(store, content)

    assert result.updated == 1
    assert "unknown id product-999" in result.errors[0]
    espresso = await store.get_product("product-1")
    assert espresso.name == "Double Espresso"
    assert espresso.price == Decimal("3")


# ── Customers ──────────────────────────────────────

@pytest.mark.asyncio
async def test_import_customers_never_touches_balances():
    store = InMemoryCatalogStore()
    await seed_catalog(store)
    await store.update_customer("customer-1", {"total_spent": Decimal("42"), "total_orders": 3})
    content = write_workbook(CUSTOMER_EXPORT_COLUMNS, [
        {"id": "customer-1", "name": "John A. Smith", "email": "john@example.com", "totalSpent": 0, "totalOrders": 0},
        {"name": "New Person", "phone": 5550199},
        {"email": "anonymous@example.com"},
    ])

    result = await import_customers(store, content)

    assert (result.added, result.updated) == (1, 1)
    assert result.errors[0].startswith("Row 4: Missing required name")
    john = await store.get_customer("customer-1")
    assert john.name == "John A. Smith"
    assert john.total_spent == Decimal("42")
    assert john.total_orders == 3
    new = [c for c in await store.list_customers() if c.name == "New Person"][0]
    assert new.phone == "5550199"


# ── Export and templates ───────────────────────────

@pytest.mark.asyncio
async def test_export_products_round_trips_through_import():
    source = InMemoryCatalogStore()
    await seed_catalog(source)
    exported = await export_products(source)

    rows = read_rows(exported)
    assert len(rows) == 12
    assert list(rows[0]) == PRODUCT_COLUMNS

    target = InMemoryCatalogStore()
    for row in rows:
        row["id"] = None
    result = await import_products(target, write_workbook(PRODUCT_COLUMNS, rows))
    assert result.added == 12
    assert result.errors == []


@pytest.mark.asyncio
async def test_export_customers_includes_totals():
    store = InMemoryCatalogStore()
    await seed_catalog(store)

    rows = read_rows(await export_customers(store))

    assert [r["name"] for r in rows] == ["John Smith", "Maria Garcia"]
    assert rows[0]["totalSpent"] == 0


def test_templates_have_headers_and_example_row():
    products = read_rows(products_template())
    customers = read_rows(customers_template())
    assert len(products) == 1 and set(products[0]) <= set(PRODUCT_COLUMNS)
    assert len(customers) == 1 and set(customers[0]) <= set(CUSTOMER_COLUMNS)


def test_invalid_file_rejected():
    with pytest.raises(ValidationError):
        read_rows(b"this is not a workbook")
