"""
API endpoints for school inventory items.
"""

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from uuid import UUID

from library_api.core.database import get_db
from library_api.core.exceptions import LibraryError
from library_api.models.inventory import ItemCondition
from library_api.services.inventory_service import InventoryService
from library_api.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryItemResponse,
    InventoryListResponse
)
from .errors import http_error

router = APIRouter()


@router.post("/inventory", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    item_data: InventoryItemCreate,
    db: AsyncSession = Depends(get_db)
):
    try:
        return await InventoryService.create_item(db, item_data)
    except LibraryError as e:
        raise http_error(e)


@router.get("/inventory", response_model=InventoryListResponse)
async def get_all_items(
    condition: Optional[ItemCondition] = Query(None),
    category: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    items = await InventoryService.get_all_items(db, condition=condition, category=category)
    return InventoryListResponse(items=items, total=len(items))


@router.get("/inventory/{item_id}", response_model=InventoryItemResponse)
async def get_item(
    item_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    try:
        return await InventoryService.get_item(db, item_id)
    except LibraryError as e:
        raise http_error(e)


@router.put("/inventory/{item_id}", response_model=InventoryItemResponse)
async def update_item(
    item_id: UUID,
    item_data: InventoryItemUpdate,
    db: AsyncSession = Depends(get_db)
):
    try:
        return await InventoryService.update_item(db, item_id, item_data)
    except (LibraryError, ValueError) as e:
        raise http_error(e)


@router.delete("/inventory/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    try:
        await InventoryService.delete_item(db, item_id)
    except LibraryError as e:
        raise http_error(e)
    return None
