"""
Item business logic: presence checks and row mapping.
"""

from __future__ import annotations

from typing import Any

from core.db import Connector
from core.errors import INVALID_PARAMETERS, ValidationError

from . import repository, schemas

REQUIRED_FIELDS = ("name", "brand", "shopname", "amount")


def _to_item_response(row: dict[str, Any]) -> schemas.ItemResponse:
    return schemas.ItemResponse(
        name=str(row["name"]),
        brand=str(row["brand"]),
        shopname=str(row["shopname"]),
        tags=[str(tag) for tag in (row.get("tags") or [])],
        amount=float(row["amount"]),
    )


def validate_create(payload: schemas.CreateItemRequest) -> None:
    # Falsy counts as missing: "", 0 and null are all rejected.
    if not all(getattr(payload, field) for field in REQUIRED_FIELDS):
        raise ValidationError(INVALID_PARAMETERS)


async def create_item(
    connector: Connector,
    payload: schemas.CreateItemRequest,
) -> list[schemas.ItemResponse]:
    validate_create(payload)
    rows = await repository.insert_item(
        connector,
        name=str(payload.name),
        brand=str(payload.brand),
        shopname=str(payload.shopname),
        amount=payload.amount,
    )
    return [_to_item_response(row) for row in rows]


async def list_items(connector: Connector) -> list[schemas.ItemResponse]:
    rows = await repository.list_items(connector)
    return [_to_item_response(row) for row in rows]
