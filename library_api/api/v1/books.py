"""
API endpoints for the book catalog.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from library_api.core.database import get_db
from library_api.core.exceptions import LibraryError
from library_api.services.book_service import BookService
from library_api.schemas.book import (
    BookCreate,
    BookUpdate,
    BookResponse,
    BookListResponse,
    StockAdjustment
)
from .errors import http_error

router = APIRouter()


@router.post("/books", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    book_data: BookCreate,
    db: AsyncSession = Depends(get_db)
):
    """Add a book to the catalog with all copies available."""
    try:
        return await BookService.create_book(db, book_data)
    except LibraryError as e:
        raise http_error(e)


@router.get("/books", response_model=BookListResponse)
async def get_all_books(
    category: Optional[str] = Query(None, description="Filter by category"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db)
):
    """Get all books, newest first."""
    books = await BookService.get_all_books(db, category=category, skip=skip, limit=limit)
    total = await BookService.get_books_count(db, category=category)
    return BookListResponse(books=books, total=total)


@router.get("/books/search", response_model=List[BookResponse])
async def search_books(
    q: str = Query(..., min_length=1, description="Matches title, author or book code"),
    db: AsyncSession = Depends(get_db)
):
    return await BookService.search_books(db, q)


@router.get("/books/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    book = await BookService.get_book_by_id(db, book_id)
    if not book:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found"
        )
    return book


@router.put("/books/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: UUID,
    book_data: BookUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Update a book. Changing total_copies shifts available_copies by the same amount."""
    try:
        return await BookService.update_book(db, book_id, book_data)
    except (LibraryError, ValueError) as e:
        raise http_error(e)


@router.post("/books/{book_id}/adjust", response_model=BookResponse)
async def adjust_stock(
    book_id: UUID,
    adjustment: StockAdjustment,
    db: AsyncSession = Depends(get_db)
):
    """Manually move available_copies (e.g. a copy found or lost)."""
    try:
        return await BookService.adjust_availability(db, book_id, adjustment.delta)
    except (LibraryError, ValueError) as e:
        raise http_error(e)


@router.delete("/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Delete a book and its borrowing history. Refused while copies are on loan."""
    try:
        await BookService.delete_book(db, book_id)
    except LibraryError as e:
        raise http_error(e)
    return None
