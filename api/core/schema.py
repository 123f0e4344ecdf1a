"""
Table definitions and demo rows.

All DDL is idempotent so it can run on every startup.
"""

from __future__ import annotations

from typing import Any

CREATE_ITEMS_TABLE = """
CREATE TABLE IF NOT EXISTS items (
    name VARCHAR (50) NOT NULL,
    brand VARCHAR (50) NOT NULL,
    shopname VARCHAR (50) NOT NULL,
    tags TEXT[] NOT NULL DEFAULT '{}',
    amount NUMERIC NOT NULL
)
"""

# Tables created before `tags` existed get the column added in place.
ADD_ITEMS_TAGS_COLUMN = """
ALTER TABLE items
ADD COLUMN IF NOT EXISTS tags TEXT[] NOT NULL DEFAULT '{}'
"""

# Tables created with a scale-0 amount column would round fractional amounts.
WIDEN_ITEMS_AMOUNT_COLUMN = """
ALTER TABLE items
ALTER COLUMN amount TYPE NUMERIC
"""

CREATE_ORDERS_TABLE = """
CREATE TABLE IF NOT EXISTS orders (
    orderno SERIAL PRIMARY KEY,
    date TIMESTAMP NOT NULL,
    amount NUMERIC (10, 2) NOT NULL,
    status VARCHAR (50) NOT NULL
)
"""

INSERT_DEFAULT_ITEM = """
INSERT INTO items (name, brand, shopname, tags, amount)
VALUES ($1, $2, $3, $4, $5)
"""

CLEAR_ITEMS = "DELETE FROM items"

DEFAULT_ITEMS: tuple[dict[str, Any], ...] = (
    {"name": "Widget", "brand": "Acme", "shopname": "Corner Shop", "tags": ["tools"], "amount": 9.5},
    {"name": "Gadget", "brand": "Acme", "shopname": "Corner Shop", "tags": ["tools", "sale"], "amount": 19.99},
    {"name": "Teapot", "brand": "Brewster", "shopname": "High Street", "tags": ["kitchen"], "amount": 24},
)


def default_item_args(items: tuple[dict[str, Any], ...] | list[dict[str, Any]]) -> list[tuple[Any, ...]]:
    return [
        (
            item["name"],
            item["brand"],
            item["shopname"],
            list(item.get("tags") or []),
            item["amount"],
        )
        for item in items
    ]
