#!/usr/bin/env python3
"""
Seed a local SQLite database with a foreign-key-rich demo schema for trying the extractor.
Usage (from the repository root):
    python scripts/seed_demo_db.py
    sql-data-extractor extract-rows --db sqlite --connection sqlite:///scripts/demo.db \
        --table order_items --limit 5 --output-dir out
    sql-data-extractor extract-schema --db sqlite --connection sqlite:///scripts/demo.db --output-dir out
Creates: scripts/demo.db
"""
import sqlite3
import random
from datetime import datetime, timedelta
from pathlib import Path

DB_PATH = Path(__file__).parent / "demo.db"

DDL = [
    """
    CREATE TABLE IF NOT EXISTS regions (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        TEXT UNIQUE NOT NULL
    )""",
    """
    CREATE TABLE IF NOT EXISTS employees (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        TEXT NOT NULL,
        region_id   INTEGER REFERENCES regions(id),
        manager_id  INTEGER REFERENCES employees(id)
    )""",
    """
    CREATE TABLE IF NOT EXISTS customers (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        name            TEXT NOT NULL,
        email           TEXT UNIQUE NOT NULL,
        account_manager INTEGER REFERENCES employees(id),
        created_at      TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE IF NOT EXISTS products (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        sku         TEXT UNIQUE NOT NULL,
        name        TEXT NOT NULL,
        price       REAL NOT NULL
    )""",
    """
    CREATE TABLE IF NOT EXISTS orders (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        customer_id     INTEGER REFERENCES customers(id),
        order_date      TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        status          TEXT CHECK(status IN ('PENDING','SHIPPED','CANCELLED','DELIVERED'))
    )""",
    """
    CREATE TABLE IF NOT EXISTS order_items (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        order_id    INTEGER REFERENCES orders(id),
        product_id  INTEGER REFERENCES products(id),
        quantity    INTEGER NOT NULL,
        unit_price  REAL NOT NULL
    )""",
    "CREATE INDEX IF NOT EXISTS ix_orders_customer ON orders (customer_id)",
    "CREATE INDEX IF NOT EXISTS ix_order_items_order ON order_items (order_id)",
]

STATUSES = ['PENDING', 'SHIPPED', 'CANCELLED', 'DELIVERED']
REGIONS  = ['North America', 'Europe', 'Asia Pacific']

def seed():
    conn = sqlite3.connect(DB_PATH)
    cur  = conn.cursor()

    for stmt in DDL:
        cur.execute(stmt)

    for r in REGIONS:
        cur.execute("INSERT OR IGNORE INTO regions(name) VALUES (?)", (r,))

    # employees: one head, then each hire reports to an earlier employee
    cur.execute("INSERT INTO employees(name, region_id, manager_id) VALUES (?,?,?)", ("Head of Sales", 1, None))
    for i in range(2, 21):
        cur.execute("INSERT INTO employees(name, region_id, manager_id) VALUES (?,?,?)",
                    (f"Employee {i}", random.randint(1, len(REGIONS)), random.randint(1, i - 1)))

    for i in range(1, 51):
        cur.execute("INSERT OR IGNORE INTO customers(name, email, account_manager, created_at) VALUES (?,?,?,?)",
                    (f"Customer {i}", f"user{i}@example.com", random.randint(1, 20),
                     datetime.now() - timedelta(days=random.randint(10, 730))))

    for i in range(1, 21):
        cur.execute("INSERT OR IGNORE INTO products(sku, name, price) VALUES (?,?,?)",
                    (f"SKU-{i:04d}", f"Product {i}", round(random.uniform(5, 500), 2)))

    for _ in range(200):
        cur.execute("INSERT INTO orders(customer_id, order_date, status) VALUES (?,?,?)",
                    (random.randint(1, 50), datetime.now() - timedelta(days=random.randint(0, 365)),
                     random.choice(STATUSES)))
        order_id = cur.lastrowid
        for _ in range(random.randint(1, 4)):
            cur.execute("INSERT INTO order_items(order_id, product_id, quantity, unit_price) VALUES (?,?,?,?)",
                        (order_id, random.randint(1, 20), random.randint(1, 5), round(random.uniform(5, 500), 2)))

    conn.commit()
    conn.close()
    print(f"Demo database seeded: {DB_PATH}")
    print("   Tables: regions, employees, customers, products, orders, order_items")

if __name__ == "__main__":
    seed()
