"""
Item persistence (raw SQL).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from core.db import Connector


async def insert_item(
    connector: Connector,
    *,
    name: str,
    brand: str,
    shopname: str,
    amount: Decimal,
) -> list[dict[str, Any]]:
    return await connector.query(
        """
        INSERT INTO items (name, brand, shopname, amount)
        VALUES ($1, $2, $3, $4)
        RETURNING name, brand, shopname, tags, amount
        """,
        name,
        brand,
        shopname,
        amount,
    )


async def list_items(connector: Connector) -> list[dict[str, Any]]:
    return await connector.query(
        """
        SELECT
          name,
          brand,
          shopname,
          tags,
          amount
        FROM items
        """
    )
