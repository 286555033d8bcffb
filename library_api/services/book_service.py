"""
Service for managing the book catalog and its stock counters.
"""

import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import select, update, delete, func, or_, case

from library_api.core.exceptions import (
    NotFound, OutOfStock, InvalidState, DuplicateBookCode,
    BookHasActiveLoans, PersistenceFailure
)
from library_api.models.book import Book
from library_api.models.borrowing import Borrowing
from library_api.schemas.book import BookCreate, BookUpdate

logger = logging.getLogger(__name__)


class BookService:
    """Service for the book catalog."""

    @staticmethod
    async def create_book(
        db: AsyncSession,
        book_data: BookCreate
    ) -> Book:
        """Create a new book with every copy available."""
        if await BookService.get_book_by_code(db, book_data.book_code):
            raise DuplicateBookCode(book_data.book_code)

        book = Book(**book_data.model_dump())
        book.available_copies = book.total_copies
        db.add(book)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if await BookService.code_in_use(db, book_data.book_code):
                raise DuplicateBookCode(book_data.book_code) from e
            raise PersistenceFailure("Failed to create book", e) from e
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure("Failed to create book", e) from e
        await db.refresh(book)
        logger.info(f"Created book: {book.title} ({book.book_code})")
        return book

    @staticmethod
    async def get_book_by_id(
        db: AsyncSession,
        book_id: UUID
    ) -> Optional[Book]:
        """Get a book by its ID, always reloading the row from the database."""
        result = await db.execute(
            select(Book)
            .where(Book.id == book_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def get_book_by_code(
        db: AsyncSession,
        book_code: str
    ) -> Optional[Book]:
        result = await db.execute(
            select(Book).where(Book.book_code == book_code)
        )
        return result.scalars().first()

    @staticmethod
    async def code_in_use(
        db: AsyncSession,
        book_code: str,
        exclude_id: Optional[UUID] = None
    ) -> bool:
        """Whether another committed book already holds ``book_code``."""
        query = select(func.count(Book.id)).where(Book.book_code == book_code)
        if exclude_id is not None:
            query = query.where(Book.id != exclude_id)
        result = await db.execute(query)
        return (result.scalar() or 0) > 0

    @staticmethod
    async def get_all_books(
        db: AsyncSession,
        category: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Book]:
        """Get all books, newest first, optionally filtered by category."""
        query = select(Book)

        if category:
            query = query.where(Book.category == category)

        query = query.order_by(Book.created_at.desc(), Book.title)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_books_count(
        db: AsyncSession,
        category: Optional[str] = None
    ) -> int:
        query = select(func.count(Book.id))

        if category:
            query = query.where(Book.category == category)

        result = await db.execute(query)
        return result.scalar() or 0

    @staticmethod
    async def search_books(
        db: AsyncSession,
        query_text: str
    ) -> List[Book]:
        """Case-insensitive search on title, author and book code."""
        pattern = f"%{query_text.strip()}%"
        result = await db.execute(
            select(Book)
            .where(or_(
                Book.title.ilike(pattern),
                Book.author.ilike(pattern),
                Book.book_code.ilike(pattern),
            ))
            .order_by(Book.created_at.desc(), Book.title)
        )
        return list(result.scalars().all())

    @staticmethod
    async def update_book(
        db: AsyncSession,
        book_id: UUID,
        book_data: BookUpdate
    ) -> Book:
        """
        Update a book.

        Changing ``total_copies`` shifts ``available_copies`` by the same
        difference. The new total may not drop below the copies on loan.
        """
        book = await BookService.get_book_by_id(db, book_id)
        if not book:
            raise NotFound("Book", book_id)

        update_data = book_data.changes()

        new_code = update_data.get("book_code")
        if new_code and new_code != book.book_code:
            if await BookService.get_book_by_code(db, new_code):
                raise DuplicateBookCode(new_code)

        new_total = update_data.pop("total_copies", None)
        if new_total is not None and new_total != book.total_copies:
            if new_total < book.active_loans:
                raise InvalidState(
                    f"Book has {book.active_loans} copies on loan; total_copies cannot be {new_total}"
                )
            diff = new_total - book.total_copies
            book.total_copies = new_total
            book.available_copies = Book.available_copies + diff

        for field, value in update_data.items():
            setattr(book, field, value)

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if new_code and await BookService.code_in_use(db, new_code, exclude_id=book_id):
                raise DuplicateBookCode(new_code) from e
            raise PersistenceFailure("Failed to update book", e) from e
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure("Failed to update book", e) from e

        book = await BookService.get_book_by_id(db, book_id)
        logger.info(f"Updated book: {book.title}")
        return book

    @staticmethod
    async def adjust_availability(
        db: AsyncSession,
        book_id: UUID,
        delta: int
    ) -> Book:
        """
        Move ``available_copies`` by ``delta`` in a single conditional UPDATE.

        A decrement only matches while enough copies remain, so concurrent
        borrowers cannot both take the last copy. An increment is capped at
        ``total_copies``.

        Raises:
            NotFound: the book does not exist.
            OutOfStock: a decrement would take the counter below zero.
            PersistenceFailure: the UPDATE itself failed.
        """
        if delta == 0:
            raise ValueError("Stock adjustment delta must be non-zero")

        new_value = Book.available_copies + delta
        stmt = update(Book).where(Book.id == book_id)
        if delta < 0:
            stmt = stmt.where(new_value >= 0).values(
                available_copies=new_value,
                updated_at=func.now()
            )
        else:
            stmt = stmt.values(
                available_copies=case(
                    (new_value > Book.total_copies, Book.total_copies),
                    else_=new_value
                ),
                updated_at=func.now()
            )
        stmt = stmt.execution_options(synchronize_session=False)

        try:
            result = await db.execute(stmt)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure(f"Failed to adjust stock of book {book_id}", e) from e

        book = await BookService.get_book_by_id(db, book_id)
        if result.rowcount == 0:
            if not book:
                raise NotFound("Book", book_id)
            raise OutOfStock(book_id)
        if not book:
            raise NotFound("Book", book_id)

        logger.info(f"Adjusted stock of {book.book_code} by {delta:+d}: {book.available_copies}/{book.total_copies}")
        return book

    @staticmethod
    async def delete_book(
        db: AsyncSession,
        book_id: UUID
    ) -> None:
        """
        Delete a book together with its (returned) borrowing history.

        Refused while any copy is on loan.
        """
        book = await BookService.get_book_by_id(db, book_id)
        if not book:
            raise NotFound("Book", book_id)

        if book.available_copies != book.total_copies:
            raise BookHasActiveLoans(book_id, book.active_loans)

        title = book.title
        try:
            await db.execute(
                delete(Borrowing)
                .where(Borrowing.book_id == book_id)
                .execution_options(synchronize_session=False)
            )
            await db.delete(book)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceFailure(f"Failed to delete book {book_id}", e) from e

        logger.info(f"Deleted book and its borrowing history: {title}")
