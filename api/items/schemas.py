"""
Pydantic schemas for item endpoints.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class CreateItemRequest(BaseModel):
    # Presence is checked in the service so a missing field answers 400, not 422.
    name: str | None = None
    brand: str | None = None
    shopname: str | None = None
    # Bound as-is so NUMERIC keeps every digit; NaN and infinities are rejected.
    amount: Decimal | None = Field(default=None, allow_inf_nan=False)


class ItemResponse(BaseModel):
    name: str
    brand: str
    shopname: str
    tags: list[str] = Field(default_factory=list)
    amount: float
