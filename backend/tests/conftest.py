import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import sqlite3
import tempfile
from fastapi.testclient import TestClient

from main import app
from models.connection import ConnectionRequest

SHOP_DDL = [
    "CREATE TABLE customers (id INTEGER PRIMARY KEY, name TEXT NOT NULL);",
    """CREATE TABLE orders (
        id INTEGER PRIMARY KEY,
        customer_id INTEGER REFERENCES customers(id),
        status TEXT
    );""",
    "CREATE INDEX ix_orders_customer ON orders (customer_id);",
    """CREATE TRIGGER trg_orders_status AFTER UPDATE ON orders
    BEGIN
        UPDATE orders SET status = upper(NEW.status) WHERE id = NEW.id;
    END;""",
    """CREATE TABLE employees (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        manager_id INTEGER REFERENCES employees(id)
    );""",
]

SHOP_ROWS = [
    "INSERT INTO customers (id, name) VALUES (1, 'Ada'), (2, 'Grace');",
    "INSERT INTO orders (id, customer_id, status) VALUES (1, 1, 'NEW'), (2, 1, 'SHIPPED');",
    "INSERT INTO employees (id, name, manager_id) VALUES "
    "(1, 'Ceo', NULL), (2, 'Vp', 1), (3, 'Dev', 2), (4, 'Intern', 2);",
]


def make_sqlite_db(statements: list[str]) -> str:
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    conn = sqlite3.connect(path)
    cur = conn.cursor()
    for statement in statements:
        cur.execute(statement)
    conn.commit()
    conn.close()
    return path


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def shop_db():
    path = make_sqlite_db(SHOP_DDL + SHOP_ROWS)
    try:
        yield path
    finally:
        os.remove(path)


@pytest.fixture
def shop_request(shop_db):
    return ConnectionRequest(db_type="sqlite", file_path=shop_db)


@pytest.fixture
def sqlite_db_factory():
    """Build throwaway SQLite files from DDL/DML statements."""
    paths = []

    def factory(statements: list[str]) -> str:
        path = make_sqlite_db(statements)
        paths.append(path)
        return path

    yield factory
    for path in paths:
        os.remove(path)
