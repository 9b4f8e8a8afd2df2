"""Excel import/export of products and customers.

Sheets use a header row; column names match the ones the POS client
exports (``inStock``, ``totalSpent`` ...). A bad row is reported in the
``ImportResult`` and the rest of the batch carries on.
"""

import logging
import zipfile
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Any, Iterable

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import ValidationError as SchemaError

from voicepos.core.exceptions import ValidationError
from voicepos.schemas.common import ImportResult
from voicepos.schemas.customer import CustomerCreate
from voicepos.schemas.product import ProductCreate
from voicepos.store.base import CatalogStore

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

PRODUCT_COLUMNS = ["id", "name", "price", "category", "description", "barcode", "inStock", "image"]
CUSTOMER_COLUMNS = ["id", "name", "email", "phone", "address", "notes"]
CUSTOMER_EXPORT_COLUMNS = CUSTOMER_COLUMNS + ["totalOrders", "totalSpent", "registrationDate"]

PRODUCT_TEMPLATE_ROW = {
    "id": "",  # blank → new product
    "name": "Sample Product",
    "price": 9.99,
    "category": "drinks",
    "description": "Product description",
    "barcode": "123456789",
    "inStock": 100,
    "image": "https://example.com/image.jpg",
}
CUSTOMER_TEMPLATE_ROW = {
    "id": "",  # blank → new customer
    "name": "John Doe",
    "email": "john.doe@example.com",
    "phone": "555-123-4567",
    "address": "123 Main St, Anytown, USA",
    "notes": "Regular customer",
}


# ── Workbook I/O ───────────────────────────────────
def read_numbered_rows(content: bytes) -> list[tuple[int, dict[str, Any]]]:
    """(sheet row number, row dict) pairs of the first sheet; blank rows are skipped."""
    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise ValidationError(f"Not a valid Excel file: {exc}") from exc

    try:
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        keys = [str(h).strip() if h is not None else "" for h in header]
        records = []
        for line, values in enumerate(rows, start=2):
            if all(v is None or str(v).strip() == "" for v in values):
                continue
            records.append((line, {k: v for k, v in zip(keys, values) if k}))
        return records
    finally:
        workbook.close()


def read_rows(content: bytes) -> list[dict[str, Any]]:
    """Rows of the first sheet as dicts keyed by the header row."""
    return [row for _, row in read_numbered_rows(content)]


def write_workbook(columns: list[str], rows: Iterable[dict[str, Any]], title: str = "Sheet1") -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    sheet.append(columns)
    for row in rows:
        sheet.append([row.get(column) for column in columns])
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# ── Cell parsing ───────────────────────────────────
def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _price(value: Any) -> Decimal | None:
    try:
        return Decimal(_text(value))
    except InvalidOperation:
        return None


def _stock(value: Any) -> int | None:
    text = _text(value)
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        return None


def _error_text(exc: SchemaError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())


# ── Import ─────────────────────────────────────────
async def import_products(store: CatalogStore, content: bytes) -> ImportResult:
    result = ImportResult()
    for line, row in read_numbered_rows(content):
        name = _text(row.get("name"))
        raw_price = row.get("price")
        if not name or raw_price is None or _text(raw_price) == "":
            result.errors.append(f"Row {line}: Missing required fields for product: {row}")
            continue
        price = _price(raw_price)
        if price is None:
            result.errors.append(f"Row {line}: Invalid price for product: {name}")
            continue
        in_stock = _stock(row.get("inStock", row.get("in_stock")))
        if in_stock is None:
            result.errors.append(f"Row {line}: Invalid stock quantity for product: {name}")
            continue

        product_id = _text(row.get("id")) or None
        try:
            data = ProductCreate(
                id=product_id,
                name=name,
                price=price,
                category=_text(row.get("category")) or "general",
                description=_text(row.get("description")) or None,
                barcode=_text(row.get("barcode")) or None,
                in_stock=in_stock,
                image=_text(row.get("image")),
            )
        except SchemaError as exc:
            result.errors.append(f"Row {line}: Invalid product {name}: {_error_text(exc)}")
            continue

        if product_id:
            changes = data.model_dump(exclude={"id"})
            if await store.update_product(product_id, changes) is None:
                result.errors.append(f"Row {line}: Failed to update product: {name} (unknown id {product_id})")
                continue
            result.updated += 1
        else:
            await store.add_product(data)
            result.added += 1

    logger.info(
        "Product import: %d added, %d updated, %d errors",
        result.added, result.updated, len(result.errors),
    )
    return result


async def import_customers(store: CatalogStore, content: bytes) -> ImportResult:
    result = ImportResult()
    for line, row in read_numbered_rows(content):
        name = _text(row.get("name"))
        if not name:
            result.errors.append(f"Row {line}: Missing required name field for customer: {row}")
            continue

        fields = {
            "name": name,
            "email": _text(row.get("email")),
            "phone": _text(row.get("phone")),
            "address": _text(row.get("address")),
            "notes": _text(row.get("notes")) or None,
        }
        try:
            data = CustomerCreate(**fields)
        except SchemaError as exc:
            result.errors.append(f"Row {line}: Invalid customer {name}: {_error_text(exc)}")
            continue

        customer_id = _text(row.get("id"))
        if customer_id:
            # Balances and order counts are never imported
            if await store.update_customer(customer_id, fields) is None:
                result.errors.append(f"Row {line}: Failed to update customer: {name} (unknown id {customer_id})")
                continue
            result.updated += 1
        else:
            await store.add_customer(data)
            result.added += 1

    logger.info(
        "Customer import: %d added, %d updated, %d errors",
        result.added, result.updated, len(result.errors),
    )
    return result


# ── Export ─────────────────────────────────────────
async def export_products(store: CatalogStore) -> bytes:
    rows = [
        {
            "id": p.id,
            "name": p.name,
            "price": float(p.price),
            "category": p.category,
            "description": p.description or "",
            "barcode": p.barcode or "",
            "inStock": p.in_stock,
            "image": p.image,
        }
        for p in await store.list_products()
    ]
    return write_workbook(PRODUCT_COLUMNS, rows, "Products")


async def export_customers(store: CatalogStore) -> bytes:
    rows = [
        {
            "id": c.id,
            "name": c.name,
            "email": c.email,
            "phone": c.phone,
            "address": c.address,
            "notes": c.notes or "",
            "totalOrders": c.total_orders,
            "totalSpent": float(c.total_spent),
            "registrationDate": c.registration_date.replace(tzinfo=None) if c.registration_date else None,
        }
        for c in await store.list_customers()
    ]
    return write_workbook(CUSTOMER_EXPORT_COLUMNS, rows, "Customers")


def products_template() -> bytes:
    return write_workbook(PRODUCT_COLUMNS, [PRODUCT_TEMPLATE_ROW], "Products")


def customers_template() -> bytes:
    return write_workbook(CUSTOMER_COLUMNS, [CUSTOMER_TEMPLATE_ROW], "Customers")
