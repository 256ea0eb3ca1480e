"""
Shared fixtures: temporary SQLite databases seeded with small schemas.
"""

import sqlite3
from pathlib import Path

import pytest
import pytest_asyncio

from schema_scout.store import SqliteStore


ROLES_USERS = """
CREATE TABLE roles (id INTEGER PRIMARY KEY, name TEXT NOT NULL);
INSERT INTO roles VALUES (1, 'admin'), (2, 'editor'), (3, 'viewer');
CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, role_id INTEGER);
INSERT INTO users VALUES (1, 'ann', 1), (2, 'bob', 1), (3, 'cat', 2), (4, 'dan', 3);
"""

ROLES_USERS_ORPHAN = """
CREATE TABLE roles (id INTEGER PRIMARY KEY, name TEXT NOT NULL);
INSERT INTO roles VALUES (1, 'admin'), (2, 'editor'), (3, 'viewer');
CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, role_id INTEGER);
INSERT INTO users VALUES (1, 'ann', 1), (2, 'bob', 1), (3, 'cat', 2), (4, 'dan', 99);
"""

SHOP = """
CREATE TABLE customers (id INTEGER PRIMARY KEY, email TEXT NOT NULL UNIQUE, vip TEXT);
INSERT INTO customers VALUES
    (1, 'a@example.com', 'yes'), (2, 'b@example.com', 'no'), (3, 'c@example.com', NULL);
CREATE TABLE categories (id INTEGER PRIMARY KEY, name TEXT, category_id INTEGER);
INSERT INTO categories VALUES (1, 'root', NULL), (2, 'books', 1), (3, 'music', 1);
CREATE TABLE orders (
    id INTEGER PRIMARY KEY,
    customer_id INTEGER,
    category TEXT,
    placed_at TEXT,
    total REAL
);
INSERT INTO orders VALUES
    (1, 1, 'books', '2024-01-02', 12.5),
    (2, 1, 'music', '2024-01-03', 8.0),
    (3, 2, 'books', '2024-02-10 10:30', 20.25),
    (4, 3, NULL, '2024-03-01T09:00:00Z', 5.0),
    (5, NULL, 'books', '2024-03-05', 7.75);
"""


def seed_database(path: Path, script: str) -> Path:
    """Create a SQLite file and run a SQL script against it."""
    conn = sqlite3.connect(path)
    try:
        conn.executescript(script)
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def make_db(tmp_path):
    """Factory that seeds a database file and returns its path."""
    def factory(script: str, name: str = "test.db") -> Path:
        return seed_database(tmp_path / name, script)
    return factory


@pytest.fixture
def shop_db(make_db):
    """Path to a small shop database."""
    return make_db(SHOP, "shop.db")


@pytest_asyncio.fixture
async def make_store(make_db):
    """Factory that seeds a database and opens a store on it; stores are closed afterwards."""
    stores = []

    def factory(script: str, name: str = "test.db") -> SqliteStore:
        store = SqliteStore(make_db(script, name))
        stores.append(store)
        return store

    yield factory

    for store in stores:
        await store.close()


@pytest_asyncio.fixture
async def empty_store(tmp_path):
    """Store on a fresh, empty database file."""
    store = SqliteStore(tmp_path / "empty.db")
    await store.connect()
    yield store
    await store.close()
