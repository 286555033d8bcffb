"""
Pydantic schemas for InventoryItem model.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from library_api.models.inventory import ItemCondition
from .common import PartialUpdate


class InventoryItemBase(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    condition: ItemCondition = ItemCondition.BAIK
    quantity: int = Field(0, ge=0)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)


class InventoryItemCreate(InventoryItemBase):
    pass


class InventoryItemUpdate(PartialUpdate):
    """Schema for updating an item. All fields optional."""
    required_fields = frozenset({"item_name", "category", "condition", "quantity"})

    item_name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    condition: Optional[ItemCondition] = None
    quantity: Optional[int] = Field(None, ge=0)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)


class InventoryItemResponse(InventoryItemBase):
    id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InventoryListResponse(BaseModel):
    items: List[InventoryItemResponse]
    total: int
