"""
Inventory Model for non-book school assets (furniture, equipment, etc.).
"""

from sqlalchemy import Column, String, DateTime, Integer, Text, Uuid, CheckConstraint, Enum as SQLEnum
from sqlalchemy.sql import func
import uuid
import enum

from library_api.core.database import Base


class ItemCondition(enum.Enum):
    """Physical condition of an inventory item."""
    BAIK = "baik"
    RUSAK_RINGAN = "rusak_ringan"
    RUSAK_BERAT = "rusak_berat"
    HILANG = "hilang"


class InventoryItem(Base):
    __tablename__ = "inventory"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    item_name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    condition = Column(SQLEnum(ItemCondition), nullable=False, default=ItemCondition.BAIK)
    quantity = Column(Integer, nullable=False, default=0)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )

    def __repr__(self):
        return f"<InventoryItem(name='{self.item_name}', quantity={self.quantity})>"
