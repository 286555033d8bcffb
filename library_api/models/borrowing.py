"""
Borrowing Model for loan records.

A borrowing links one borrower to one copy of a book. ``status`` only ever
moves from ``borrowed`` to ``returned``; "overdue" is derived from the due
date at read time and is never written by the borrowing workflow. Rows that
still carry a stored ``overdue`` status are treated as outstanding loans.
"""

from datetime import date

from sqlalchemy import Column, String, DateTime, Date, Text, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum

from library_api.core.database import Base


class BorrowingStatus(enum.Enum):
    """Persisted lifecycle status of a borrowing."""
    BORROWED = "borrowed"
    RETURNED = "returned"
    OVERDUE = "overdue"


# Statuses of a loan whose copy is still out; "overdue" only appears on legacy rows
OUTSTANDING_STATUSES = (BorrowingStatus.BORROWED, BorrowingStatus.OVERDUE)


class Borrowing(Base):
    __tablename__ = "borrowings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    borrower_name = Column(String(255), nullable=False)
    borrower_unit = Column(String(100), nullable=False)  # class or staff unit
    book_id = Column(Uuid(as_uuid=True), ForeignKey("books.id"), nullable=False, index=True)

    borrow_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)
    status = Column(SQLEnum(BorrowingStatus), nullable=False, default=BorrowingStatus.BORROWED)
    notes = Column(Text, nullable=True)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Optional: None when the book row is gone
    book = relationship("Book", lazy="joined")

    @property
    def is_outstanding(self) -> bool:
        return self.status in OUTSTANDING_STATUSES

    def is_overdue_on(self, today: date) -> bool:
        """Outstanding and past its due date."""
        return self.is_outstanding and self.due_date < today

    def __repr__(self):
        return f"<Borrowing(borrower='{self.borrower_name}', book_id='{self.book_id}', status='{self.status.value}')>"
