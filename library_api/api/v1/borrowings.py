"""
API endpoints for lending and returning books.
"""

from datetime import date
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from uuid import UUID

from library_api.core.clock import Clock, get_clock
from library_api.core.database import get_db
from library_api.core.exceptions import LibraryError
from library_api.models.borrowing import Borrowing, BorrowingStatus
from library_api.services.borrowing_service import BorrowingService
from library_api.schemas.borrowing import (
    BorrowingCreate,
    BorrowingUpdate,
    BorrowingResponse,
    BorrowingListResponse
)
from .errors import http_error

router = APIRouter()


def to_response(borrowing: Borrowing, today: date) -> BorrowingResponse:
    response = BorrowingResponse.model_validate(borrowing)
    response.is_overdue = borrowing.is_overdue_on(today)
    return response


@router.post("/borrowings", response_model=BorrowingResponse, status_code=status.HTTP_201_CREATED)
async def create_borrowing(
    borrowing_data: BorrowingCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Lend a copy of a book. Fails with 409 when no copy is available."""
    try:
        borrowing = await BorrowingService.create_borrowing(db, borrowing_data, clock=clock)
    except (LibraryError, ValueError) as e:
        raise http_error(e)
    return to_response(borrowing, clock.today())


@router.get("/borrowings", response_model=BorrowingListResponse)
async def get_all_borrowings(
    borrowing_status: Optional[BorrowingStatus] = Query(None, alias="status"),
    overdue: bool = Query(False, description="Only outstanding loans past their due date"),
    q: Optional[str] = Query(None, description="Matches borrower name, borrower unit or book title"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    today = clock.today()
    if overdue:
        borrowings = await BorrowingService.get_overdue_borrowings(db, clock=clock)
    else:
        borrowings = await BorrowingService.get_all_borrowings(db, status=borrowing_status, search=q)
    items = [to_response(b, today) for b in borrowings]
    return BorrowingListResponse(borrowings=items, total=len(items))


@router.get("/borrowings/{borrowing_id}", response_model=BorrowingResponse)
async def get_borrowing(
    borrowing_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    try:
        borrowing = await BorrowingService.get_borrowing(db, borrowing_id)
    except LibraryError as e:
        raise http_error(e)
    return to_response(borrowing, clock.today())


@router.patch("/borrowings/{borrowing_id}", response_model=BorrowingResponse)
async def update_borrowing(
    borrowing_id: UUID,
    borrowing_data: BorrowingUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Edit borrower details, due date or notes."""
    try:
        borrowing = await BorrowingService.update_borrowing(db, borrowing_id, borrowing_data)
    except (LibraryError, ValueError) as e:
        raise http_error(e)
    return to_response(borrowing, clock.today())


@router.post("/borrowings/{borrowing_id}/return", response_model=BorrowingResponse)
async def return_book(
    borrowing_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Record the return of a borrowed book."""
    try:
        borrowing = await BorrowingService.return_book(db, borrowing_id, clock=clock)
    except LibraryError as e:
        raise http_error(e)
    return to_response(borrowing, clock.today())


@router.delete("/borrowings/{borrowing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_borrowing(
    borrowing_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Delete a borrowing record; an outstanding loan gives its copy back."""
    try:
        await BorrowingService.delete_borrowing(db, borrowing_id)
    except LibraryError as e:
        raise http_error(e)
    return None
