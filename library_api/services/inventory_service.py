"""
Service for managing school inventory items.
"""

import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, func

from library_api.core.exceptions import NotFound, PersistenceFailure
from library_api.models.inventory import InventoryItem, ItemCondition
from library_api.schemas.inventory import InventoryItemCreate, InventoryItemUpdate

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for non-book inventory."""

    @staticmethod
    async def create_item(
        db: AsyncSession,
        item_data: InventoryItemCreate
    ) -> InventoryItem:
        item = InventoryItem(**item_data.model_dump())
        db.add(item)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure("Failed to create inventory item", e) from e
        await db.refresh(item)
        logger.info(f"Created inventory item: {item.item_name} x{item.quantity}")
        return item

    @staticmethod
    async def get_item(
        db: AsyncSession,
        item_id: UUID
    ) -> InventoryItem:
        result = await db.execute(
            select(InventoryItem).where(InventoryItem.id == item_id)
        )
        item = result.scalars().first()
        if not item:
            raise NotFound("Inventory item", item_id)
        return item

    @staticmethod
    async def get_all_items(
        db: AsyncSession,
        condition: Optional[ItemCondition] = None,
        category: Optional[str] = None
    ) -> List[InventoryItem]:
        """All items, newest first."""
        query = select(InventoryItem)

        if condition is not None:
            query = query.where(InventoryItem.condition == condition)

        if category:
            query = query.where(InventoryItem.category == category)

        query = query.order_by(InventoryItem.created_at.desc(), InventoryItem.item_name)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_total_quantity(db: AsyncSession) -> int:
        result = await db.execute(
            select(func.coalesce(func.sum(InventoryItem.quantity), 0))
        )
        return int(result.scalar() or 0)

    @staticmethod
    async def update_item(
        db: AsyncSession,
        item_id: UUID,
        item_data: InventoryItemUpdate
    ) -> InventoryItem:
        item = await InventoryService.get_item(db, item_id)

        # Update only provided fields
        update_data = item_data.changes()
        for field, value in update_data.items():
            setattr(item, field, value)

        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure(f"Failed to update inventory item {item_id}", e) from e
        await db.refresh(item)
        logger.info(f"Updated inventory item: {item.item_name}")
        return item

    @staticmethod
    async def delete_item(
        db: AsyncSession,
        item_id: UUID
    ) -> None:
        item = await InventoryService.get_item(db, item_id)
        name = item.item_name
        try:
            await db.delete(item)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure(f"Failed to delete inventory item {item_id}", e) from e
        logger.info(f"Deleted inventory item: {name}")
