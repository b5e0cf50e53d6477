"""Seed the sample catalogue (products, customers, orders) into Postgres.

Creates each product (by name) and customer (by email) if missing, then
clears the cache so no instance serves lists cached before the seed.

Usage:
    python -m scripts.seed_dev_data [--create-tables]

Requires: DATABASE_URL (Postgres), existing DB unless --create-tables.
CACHE_REDIS_URL is optional; when set, the shared L2 namespace is cleared too.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

from app.application.dtos.customer import CustomerData
from app.application.dtos.order import OrderData, OrderItemData
from app.application.dtos.product import ProductData
from app.application.interfaces.repositories import (
    ICustomerRepository,
    IOrderRepository,
    IProductRepository,
)
from app.core.config import get_settings
from app.infrastructure.cache import build_hybrid_cache
from app.infrastructure.persistence import database
from app.infrastructure.persistence.repositories import (
    CustomerRepository,
    OrderRepository,
    ProductRepository,
)

logger = logging.getLogger("scripts.seed_dev_data")

SEED_PRODUCTS: tuple[ProductData, ...] = (
    ProductData(name="Laptop", description="High-performance laptop", price=Decimal("1299.99")),
    ProductData(name="Mouse", description="Wireless mouse", price=Decimal("29.99")),
    ProductData(name="Keyboard", description="Mechanical keyboard", price=Decimal("99.99")),
    ProductData(name="Monitor", description="4K monitor", price=Decimal("399.99")),
    ProductData(name="Headphones", description="Noise-cancelling headphones", price=Decimal("199.99")),
)

SEED_CUSTOMERS: tuple[CustomerData, ...] = (
    CustomerData(name="John Doe", email="john@example.com"),
    CustomerData(name="Jane Smith", email="jane@example.com"),
    CustomerData(name="Bob Johnson", email="bob@example.com"),
)

# (customer email, ((product name, quantity), ...)); unit price is the product price.
SEED_ORDERS: tuple[tuple[str, tuple[tuple[str, int], ...]], ...] = (
    ("john@example.com", (("Laptop", 1), ("Mouse", 2))),
    ("jane@example.com", (("Keyboard", 1),)),
    ("john@example.com", (("Monitor", 1),)),
)


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees DATABASE_* when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


async def seed_catalogue(
    product_repo: IProductRepository,
    customer_repo: ICustomerRepository,
    order_repo: IOrderRepository,
) -> tuple[int, int, int]:
    """Create missing seed rows; return how many products, customers and orders were created.

    Sample orders are added only when the order table is empty, so running
    the script twice does not duplicate them. All rows share one session;
    the single commit at the end makes the seed all-or-nothing.
    """
    products = {p.name: p for p in await product_repo.get_all()}
    customers = {c.email: c for c in await customer_repo.get_all()}
    created_products = 0
    for product in SEED_PRODUCTS:
        if product.name not in products:
            products[product.name] = await product_repo.create(product)
            created_products += 1
    created_customers = 0
    for customer in SEED_CUSTOMERS:
        if customer.email not in customers:
            customers[customer.email] = await customer_repo.create(customer)
            created_customers += 1
    created_orders = 0
    if not await order_repo.get_all():
        for email, lines in SEED_ORDERS:
            items = tuple(
                OrderItemData(
                    product_id=products[name].id,
                    quantity=quantity,
                    unit_price=products[name].price,
                )
                for name, quantity in lines
            )
            await order_repo.create(OrderData(customer_id=customers[email].id, items=items))
            created_orders += 1
    await product_repo.save_changes()
    return created_products, created_customers, created_orders


async def run(create_tables: bool = False) -> None:
    settings = get_settings()
    if create_tables:
        await database.create_tables()
    database._ensure_engine()
    assert database.AsyncSessionLocal is not None
    async with database.AsyncSessionLocal() as session:
        created = await seed_catalogue(
            ProductRepository(session), CustomerRepository(session), OrderRepository(session)
        )
    logger.info("Seeded %d products, %d customers and %d orders", *created)

    # Lists cached before the seed would hide the new rows until their TTL.
    cache, redis_tier = build_hybrid_cache(settings)
    if redis_tier is not None:
        await redis_tier.connect()
    try:
        await cache.clear()
    finally:
        if redis_tier is not None:
            await redis_tier.disconnect()
        await database.dispose_engine()


def main() -> None:
    _load_env()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    asyncio.run(run(create_tables="--create-tables" in sys.argv[1:]))


if __name__ == "__main__":
    main()
