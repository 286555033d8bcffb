"""
Book Model for the school library catalog.

``available_copies`` is a counter of copies not currently on loan. It is only
changed through ``BookService.adjust_availability`` (borrow/return/delete of a
loan) and when ``total_copies`` is edited.
"""

from sqlalchemy import Column, String, DateTime, Integer, Text, Uuid, CheckConstraint
from sqlalchemy.sql import func
import uuid

from library_api.core.database import Base


class Book(Base):
    """Catalog entry with its physical stock counters."""
    __tablename__ = "books"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    book_code = Column(String(50), unique=True, index=True, nullable=False)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    publisher = Column(String(255), nullable=True)
    publication_year = Column(Integer, nullable=True)
    category = Column(String(100), nullable=True)

    # Stock
    total_copies = Column(Integer, nullable=False, default=1)
    available_copies = Column(Integer, nullable=False, default=1)

    shelf_location = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    cover_url = Column(String(500), nullable=True)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("total_copies >= 1", name="ck_books_total_copies_positive"),
        CheckConstraint("available_copies >= 0", name="ck_books_available_copies_non_negative"),
        CheckConstraint("available_copies <= total_copies", name="ck_books_available_within_total"),
    )

    @property
    def active_loans(self) -> int:
        """Copies currently out on loan."""
        return (self.total_copies or 0) - (self.available_copies or 0)

    def __repr__(self):
        return f"<Book(code='{self.book_code}', title='{self.title}', available={self.available_copies}/{self.total_copies})>"
