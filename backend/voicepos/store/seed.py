"""Sample catalog loaded into a fresh store."""

import logging
from decimal import Decimal

from voicepos.schemas.customer import CustomerCreate
from voicepos.schemas.product import ProductCreate
from voicepos.store.base import CatalogStore

logger = logging.getLogger(__name__)

CATEGORIES: list[dict[str, str]] = [
    {"id": "all", "name": "All Products"},
    {"id": "drinks", "name": "Drinks"},
    {"id": "food", "name": "Food"},
    {"id": "dessert", "name": "Desserts"},
    {"id": "electronics", "name": "Electronics"},
    {"id": "clothing", "name": "Clothing"},
]

# (name, price, category, in_stock)
SAMPLE_PRODUCTS: list[tuple[str, str, str, int]] = [
    ("Espresso", "2.50", "drinks", 100),
    ("Cappuccino", "3.50", "drinks", 100),
    ("Chicken Sandwich", "6.99", "food", 30),
    ("Chocolate Cake", "4.99", "dessert", 20),
    ("Vegetable Salad", "5.99", "food", 25),
    ("Fresh Orange Juice", "3.99", "drinks", 40),
    ("Cheesecake", "4.50", "dessert", 15),
    ("Iced Coffee", "3.75", "drinks", 60),
    ("Wireless Earbuds", "59.99", "electronics", 10),
    ("T-Shirt", "19.99", "clothing", 25),
    ("Burger", "8.99", "food", 20),
    ("Smart Watch", "129.99", "electronics", 8),
]

SAMPLE_CUSTOMERS: list[dict[str, str]] = [
    {"id": "customer-1", "name": "John Smith", "email": "john@example.com", "phone": "555-0101"},
    {"id": "customer-2", "name": "Maria Garcia", "email": "maria@example.com", "phone": "555-0102"},
]


async def seed_catalog(store: CatalogStore) -> int:
    """Add the sample products and customers that are not already present.

    Returns the number of records added, so seeding an existing store twice
    is harmless.
    """
    added = 0
    for index, (name, price, category, in_stock) in enumerate(SAMPLE_PRODUCTS, start=1):
        product_id = f"product-{index}"
        if await store.get_product(product_id) is not None:
            continue
        await store.add_product(ProductCreate(
            id=product_id,
            name=name,
            price=Decimal(price),
            category=category,
            in_stock=in_stock,
            barcode=str(8901234566 + index),
        ))
        added += 1

    for row in SAMPLE_CUSTOMERS:
        if await store.get_customer(row["id"]) is not None:
            continue
        await store.add_customer(CustomerCreate(**row))
        added += 1

    logger.info("Seeded %d sample records", added)
    return added
