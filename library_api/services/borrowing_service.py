"""
Borrowing ledger and the borrow / return / delete workflow.

Each workflow step commits on its own, so a failure in the second write is
undone by an explicit compensating write. A failed compensation is raised as
CompensationFailure carrying both errors.
"""

import logging
from datetime import timedelta
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, or_

from library_api.core.clock import Clock
from library_api.core.config import settings
from library_api.core.exceptions import (
    LibraryError, NotFound, OutOfStock, InvalidState,
    PersistenceFailure, CompensationFailure
)
from library_api.models.book import Book
from library_api.models.borrowing import Borrowing, BorrowingStatus, OUTSTANDING_STATUSES
from library_api.schemas.borrowing import BorrowingCreate, BorrowingUpdate
from library_api.services.book_service import BookService

logger = logging.getLogger(__name__)


class BorrowingLedger:
    """Persistence for borrowing records. Every write commits."""

    @staticmethod
    async def get(
        db: AsyncSession,
        borrowing_id: UUID
    ) -> Optional[Borrowing]:
        """Get a borrowing with its book joined, reloaded from the database."""
        result = await db.execute(
            select(Borrowing)
            .where(Borrowing.id == borrowing_id)
            .execution_options(populate_existing=True)
        )
        return result.unique().scalars().first()

    @staticmethod
    async def list_all(
        db: AsyncSession,
        status: Optional[BorrowingStatus] = None,
        limit: Optional[int] = None,
        outstanding: bool = False,
        search: Optional[str] = None
    ) -> List[Borrowing]:
        """
        All borrowings, newest first.

        ``outstanding`` keeps loans whose copy is still out. ``search`` is a
        case-insensitive match on borrower name, borrower unit or book title.
        """
        query = select(Borrowing)
        if status is not None:
            query = query.where(Borrowing.status == status)
        if outstanding:
            query = query.where(Borrowing.status.in_(OUTSTANDING_STATUSES))
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.outerjoin(Book, Borrowing.book_id == Book.id).where(or_(
                Borrowing.borrower_name.ilike(pattern),
                Borrowing.borrower_unit.ilike(pattern),
                Book.title.ilike(pattern),
            ))
        query = query.order_by(Borrowing.created_at.desc(), Borrowing.borrow_date.desc())
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query.execution_options(populate_existing=True))
        return list(result.unique().scalars().all())

    @staticmethod
    async def insert(
        db: AsyncSession,
        borrowing: Borrowing
    ) -> Borrowing:
        db.add(borrowing)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure("Failed to insert borrowing", e) from e
        return await BorrowingLedger.get(db, borrowing.id)

    @staticmethod
    async def update(
        db: AsyncSession,
        borrowing_id: UUID,
        values: dict
    ) -> Borrowing:
        borrowing = await BorrowingLedger.get(db, borrowing_id)
        if not borrowing:
            raise NotFound("Borrowing", borrowing_id)

        for field, value in values.items():
            setattr(borrowing, field, value)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure(f"Failed to update borrowing {borrowing_id}", e) from e
        return await BorrowingLedger.get(db, borrowing_id)

    @staticmethod
    async def delete(
        db: AsyncSession,
        borrowing_id: UUID
    ) -> None:
        borrowing = await BorrowingLedger.get(db, borrowing_id)
        if not borrowing:
            raise NotFound("Borrowing", borrowing_id)
        try:
            await db.delete(borrowing)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure(f"Failed to delete borrowing {borrowing_id}", e) from e


def snapshot(borrowing: Borrowing) -> dict:
    """Column values of a borrowing, enough to re-insert it."""
    return {
        "id": borrowing.id,
        "borrower_name": borrowing.borrower_name,
        "borrower_unit": borrowing.borrower_unit,
        "book_id": borrowing.book_id,
        "borrow_date": borrowing.borrow_date,
        "due_date": borrowing.due_date,
        "return_date": borrowing.return_date,
        "status": borrowing.status,
        "notes": borrowing.notes,
        "created_at": borrowing.created_at,
    }


def _persistence_failure(message: str, error: Exception) -> PersistenceFailure:
    if isinstance(error, PersistenceFailure):
        return error
    failure = PersistenceFailure(message, error)
    failure.__cause__ = error
    return failure


class BorrowingService:
    """Borrow, return and delete loans together with the book stock."""

    @staticmethod
    async def get_borrowing(
        db: AsyncSession,
        borrowing_id: UUID
    ) -> Borrowing:
        borrowing = await BorrowingLedger.get(db, borrowing_id)
        if not borrowing:
            raise NotFound("Borrowing", borrowing_id)
        return borrowing

    @staticmethod
    async def get_all_borrowings(
        db: AsyncSession,
        status: Optional[BorrowingStatus] = None,
        search: Optional[str] = None
    ) -> List[Borrowing]:
        return await BorrowingLedger.list_all(db, status=status, search=search)

    @staticmethod
    async def get_overdue_borrowings(
        db: AsyncSession,
        clock: Optional[Clock] = None
    ) -> List[Borrowing]:
        today = (clock or Clock()).today()
        borrowings = await BorrowingLedger.list_all(db, outstanding=True)
        return [b for b in borrowings if b.is_overdue_on(today)]

    @staticmethod
    async def create_borrowing(
        db: AsyncSession,
        borrowing_data: BorrowingCreate,
        clock: Optional[Clock] = None
    ) -> Borrowing:
        """
        Lend one copy of a book.

        Takes the copy first, then writes the loan record; if the record
        cannot be written the copy is put back.
        """
        clock = clock or Clock()
        book_id = borrowing_data.book_id
        borrow_date = borrowing_data.borrow_date or clock.today()
        due_date = borrowing_data.due_date or borrow_date + timedelta(days=settings.DEFAULT_LOAN_DAYS)
        if due_date < borrow_date:
            raise ValueError("Due date cannot be before the borrow date")

        book = await BookService.get_book_by_id(db, book_id)
        if not book:
            raise NotFound("Book", book_id)
        if book.available_copies <= 0:
            raise OutOfStock(book_id)

        await BookService.adjust_availability(db, book_id, -1)

        borrowing = Borrowing(
            borrower_name=borrowing_data.borrower_name,
            borrower_unit=borrowing_data.borrower_unit,
            book_id=book_id,
            borrow_date=borrow_date,
            due_date=due_date,
            return_date=None,
            status=BorrowingStatus.BORROWED,
            notes=borrowing_data.notes,
        )
        try:
            created = await BorrowingLedger.insert(db, borrowing)
        except (LibraryError, SQLAlchemyError) as e:
            logger.warning(f"Borrowing insert failed for book {book_id}, restoring stock: {e}")
            await BorrowingService._compensate(db, book_id, +1, e)
            raise _persistence_failure("Failed to create borrowing", e)

        logger.info(f"Created borrowing {created.id} of book {book_id} for {created.borrower_name}")
        return created

    @staticmethod
    async def return_book(
        db: AsyncSession,
        borrowing_id: UUID,
        clock: Optional[Clock] = None
    ) -> Borrowing:
        """Close an outstanding loan and put the copy back on the shelf."""
        clock = clock or Clock()
        borrowing = await BorrowingService.get_borrowing(db, borrowing_id)
        if not borrowing.is_outstanding:
            raise InvalidState(
                f"Borrowing {borrowing_id} is {borrowing.status.value}, only outstanding loans can be returned"
            )
        book_id = borrowing.book_id

        await BookService.adjust_availability(db, book_id, +1)

        try:
            updated = await BorrowingLedger.update(db, borrowing_id, {
                "status": BorrowingStatus.RETURNED,
                "return_date": clock.today(),
            })
        except (LibraryError, SQLAlchemyError) as e:
            logger.warning(f"Return update failed for borrowing {borrowing_id}, taking copy back out: {e}")
            await BorrowingService._compensate(db, book_id, -1, e)
            raise _persistence_failure("Failed to record return", e)

        logger.info(f"Returned borrowing {borrowing_id} of book {book_id}")
        return updated

    @staticmethod
    async def update_borrowing(
        db: AsyncSession,
        borrowing_id: UUID,
        borrowing_data: BorrowingUpdate
    ) -> Borrowing:
        """Edit borrower details, due date or notes. Stock is untouched."""
        borrowing = await BorrowingService.get_borrowing(db, borrowing_id)
        values = borrowing_data.changes()
        due_date = values.get("due_date")
        if due_date is not None and due_date < borrowing.borrow_date:
            raise ValueError("Due date cannot be before the borrow date")
        if not values:
            return borrowing
        updated = await BorrowingLedger.update(db, borrowing_id, values)
        logger.info(f"Updated borrowing {borrowing_id}: {sorted(values)}")
        return updated

    @staticmethod
    async def delete_borrowing(
        db: AsyncSession,
        borrowing_id: UUID
    ) -> None:
        """
        Discard a loan record.

        The record is deleted before the stock is restored; if restoring the
        copy fails the record is written back.
        """
        borrowing = await BorrowingService.get_borrowing(db, borrowing_id)
        record = snapshot(borrowing)
        was_outstanding = borrowing.is_outstanding

        await BorrowingLedger.delete(db, borrowing_id)

        if was_outstanding:
            try:
                await BookService.adjust_availability(db, record["book_id"], +1)
            except NotFound:
                logger.warning(f"Book {record['book_id']} of borrowing {borrowing_id} no longer exists, no stock to restore")
            except (LibraryError, SQLAlchemyError) as e:
                logger.warning(f"Stock restore failed after deleting borrowing {borrowing_id}, re-inserting it: {e}")
                try:
                    await BorrowingLedger.insert(db, Borrowing(**record))
                except (LibraryError, SQLAlchemyError) as rollback_error:
                    logger.error(
                        f"Could not re-insert borrowing {borrowing_id}: original={e!r} rollback={rollback_error!r}"
                    )
                    raise CompensationFailure(e, rollback_error) from rollback_error
                raise _persistence_failure("Failed to restore stock for deleted borrowing", e)

        logger.info(f"Deleted borrowing {borrowing_id} (restored stock: {was_outstanding})")

    @staticmethod
    async def _compensate(
        db: AsyncSession,
        book_id: UUID,
        delta: int,
        original: Exception
    ) -> None:
        try:
            await BookService.adjust_availability(db, book_id, delta)
        except (LibraryError, SQLAlchemyError) as rollback_error:
            logger.error(
                f"Stock compensation {delta:+d} failed for book {book_id}: "
                f"original={original!r} rollback={rollback_error!r}"
            )
            raise CompensationFailure(original, rollback_error) from rollback_error
        logger.info(f"Compensated stock of book {book_id} by {delta:+d}")
