"""
Pydantic schemas for Borrowing model.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from uuid import UUID

from library_api.models.borrowing import BorrowingStatus
from .book import BookResponse
from .common import PartialUpdate


class BorrowingCreate(BaseModel):
    """Schema for lending a book."""
    borrower_name: str = Field(..., min_length=1, max_length=255)
    borrower_unit: str = Field(..., min_length=1, max_length=100)
    book_id: UUID
    due_date: Optional[date] = Field(None, description="Defaults to DEFAULT_LOAN_DAYS after borrow_date")
    borrow_date: Optional[date] = Field(None, description="Defaults to today")
    notes: Optional[str] = None


class BorrowingUpdate(PartialUpdate):
    """Non-stock fields only; use the return endpoint to close a loan."""
    required_fields = frozenset({"borrower_name", "borrower_unit", "due_date"})

    borrower_name: Optional[str] = Field(None, min_length=1, max_length=255)
    borrower_unit: Optional[str] = Field(None, min_length=1, max_length=100)
    due_date: Optional[date] = None
    notes: Optional[str] = None


class BorrowingResponse(BaseModel):
    id: UUID
    borrower_name: str
    borrower_unit: str
    book_id: UUID
    borrow_date: date
    due_date: date
    return_date: Optional[date] = None
    status: BorrowingStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    book: Optional[BookResponse] = None
    is_overdue: bool = False

    class Config:
        from_attributes = True


class BorrowingListResponse(BaseModel):
    borrowings: List[BorrowingResponse]
    total: int
