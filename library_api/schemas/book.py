"""
Pydantic schemas for Book model.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from .common import PartialUpdate


# Book Base Schema
class BookBase(BaseModel):
    book_code: str = Field(..., min_length=1, max_length=50, description="Unique human-readable code")
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    publisher: Optional[str] = Field(None, max_length=255)
    publication_year: Optional[int] = Field(None, ge=0, le=9999)
    category: Optional[str] = Field(None, max_length=100)
    total_copies: int = Field(..., ge=1, description="Number of physical copies")
    shelf_location: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    cover_url: Optional[str] = Field(None, max_length=500)


class BookCreate(BookBase):
    """Schema for creating a new book. available_copies starts at total_copies."""
    pass


class BookUpdate(PartialUpdate):
    """Schema for updating a book. All fields optional."""
    required_fields = frozenset({"book_code", "title", "author", "total_copies"})

    book_code: Optional[str] = Field(None, min_length=1, max_length=50)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    publisher: Optional[str] = Field(None, max_length=255)
    publication_year: Optional[int] = Field(None, ge=0, le=9999)
    category: Optional[str] = Field(None, max_length=100)
    total_copies: Optional[int] = Field(None, ge=1)
    shelf_location: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    cover_url: Optional[str] = Field(None, max_length=500)


class StockAdjustment(BaseModel):
    """Schema for a manual stock adjustment."""
    delta: int = Field(..., description="+1 to restore a copy, -1 to take one out")


class BookResponse(BookBase):
    """Schema for book response."""
    id: UUID
    available_copies: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookListResponse(BaseModel):
    """Schema for list of books response."""
    books: List[BookResponse]
    total: int
