#!/usr/bin/env python3
"""
Build a sample SQLite database for trying out schema_scout.

Creates a small shop schema with Faker data and loads it through the
ingestion path, so every table gets inferred affinities, keys and unique
constraints. Foreign keys are left undeclared for the relations command
to discover; order_items carries a few orphan product references.

Usage:
    python samples/build_sample_db.py [path/to/shop.db]
"""

import asyncio
import random
import sys
from pathlib import Path

import numpy as np
import pandas as pd
from faker import Faker

from schema_scout.ingest import ingest_frame
from schema_scout.store import SqliteStore

# Initialize Faker with seed for reproducibility
fake = Faker()
Faker.seed(42)
random.seed(42)
np.random.seed(42)

OUTPUT_PATH = Path(__file__).parent / "shop.db"


def generate_categories() -> pd.DataFrame:
    """Category tree: three roots with two children each."""
    rows = []
    for root_id, name in enumerate(["Books", "Music", "Garden"], start=1):
        rows.append({"id": root_id, "name": name, "category_id": None})
    child_id = 4
    for root_id in (1, 2, 3):
        for _ in range(2):
            rows.append({"id": child_id, "name": fake.word().title(), "category_id": root_id})
            child_id += 1
    return pd.DataFrame(rows)


def generate_customers(n: int = 200) -> pd.DataFrame:
    customers = []
    for i in range(1, n + 1):
        customers.append({
            "id": i,
            "name": fake.name(),
            "email": f"user{i}@{fake.free_email_domain()}",
            "is_vip": random.choices(["yes", "no"], weights=[0.1, 0.9])[0],
            "joined": fake.date_between(start_date="-5y", end_date="-1m").isoformat(),
        })
    return pd.DataFrame(customers)


def generate_products(categories_df: pd.DataFrame, n: int = 60) -> pd.DataFrame:
    category_ids = categories_df["id"].tolist()
    products = []
    for i in range(1, n + 1):
        products.append({
            "product_id": i,
            "category_id": random.choice(category_ids),
            "title": fake.catch_phrase(),
            "price": round(random.uniform(2, 250), 2),
        })
    return pd.DataFrame(products)


def generate_orders(customers_df: pd.DataFrame, n: int = 800) -> pd.DataFrame:
    customer_ids = customers_df["id"].tolist()
    orders = []
    for i in range(1, n + 1):
        # Guest checkouts have no customer
        customer_id = random.choice(customer_ids) if random.random() > 0.05 else None
        orders.append({
            "id": i,
            "customer_id": customer_id,
            "placed_at": fake.date_time_between(start_date="-2y", end_date="now").isoformat(sep=" "),
            "total": round(random.uniform(5, 500), 2),
        })
    return pd.DataFrame(orders)


def generate_order_items(orders_df: pd.DataFrame, products_df: pd.DataFrame) -> pd.DataFrame:
    product_ids = products_df["product_id"].tolist()
    items = []
    item_id = 1
    for order_id in orders_df["id"]:
        for _ in range(random.randint(1, 4)):
            # Roughly 3% of lines point at products that were since removed
            product_id = random.choice(product_ids) if random.random() > 0.03 else 9000 + item_id
            items.append({
                "id": item_id,
                "orderId": order_id,
                "product_id": product_id,
                "qty": random.randint(1, 5),
            })
            item_id += 1
    return pd.DataFrame(items)


async def build(path: Path) -> None:
    categories_df = generate_categories()
    customers_df = generate_customers()
    products_df = generate_products(categories_df)
    orders_df = generate_orders(customers_df)
    items_df = generate_order_items(orders_df, products_df)

    frames = {
        "categories": categories_df,
        "customers": customers_df,
        "products": products_df,
        "orders": orders_df,
        "order_items": items_df,
    }

    async with SqliteStore(path) as store:
        for name, df in frames.items():
            result = await ingest_frame(store, name, df)
            print(f"  - {result.table_name}: {result.inserted} rows, "
                  f"primary key {result.profile.primary_key or '-'}")


def main():
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else OUTPUT_PATH
    if path.exists():
        path.unlink()

    print(f"Building sample database: {path}")
    asyncio.run(build(path))
    print(f"\nTry: schema-scout relations {path}")


if __name__ == "__main__":
    main()
