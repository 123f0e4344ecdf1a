"""
Item API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from core.db import Connector

from . import schemas, service

router = APIRouter()


def get_connector(request: Request) -> Connector:
    return request.app.state.connector


@router.post("/items", response_model=list[schemas.ItemResponse])
async def create_item(
    payload: schemas.CreateItemRequest,
    connector: Connector = Depends(get_connector),
) -> list[schemas.ItemResponse]:
    """
    Insert one item and return the persisted row.
    """
    return await service.create_item(connector, payload)


@router.get("/items", response_model=list[schemas.ItemResponse])
async def list_items(
    connector: Connector = Depends(get_connector),
) -> list[schemas.ItemResponse]:
    return await service.list_items(connector)
