"""
Domain errors raised by the catalog, borrowing and inventory services.

The API layer maps these onto HTTP status codes; services never swallow them.
"""

from typing import Optional


class LibraryError(Exception):
    """Base class for all library domain errors."""


class NotFound(LibraryError):
    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class OutOfStock(LibraryError):
    def __init__(self, book_id):
        self.book_id = book_id
        super().__init__(f"Book {book_id} has no available copies")


class InvalidState(LibraryError):
    pass


class DuplicateBookCode(LibraryError):
    def __init__(self, book_code: str):
        self.book_code = book_code
        super().__init__(f"A book with code '{book_code}' already exists")


class BookHasActiveLoans(LibraryError):
    def __init__(self, book_id, active_loans: int):
        self.book_id = book_id
        self.active_loans = active_loans
        super().__init__(
            f"Book {book_id} has {active_loans} active loan(s) and cannot be deleted"
        )


class PersistenceFailure(LibraryError):
    """A store write failed, possibly after a partial effect was compensated."""

    def __init__(self, message: str, original: Optional[BaseException] = None):
        self.original = original
        super().__init__(message)


class CompensationFailure(LibraryError):
    """The rollback write issued after a failed step failed as well."""

    def __init__(self, original: BaseException, rollback: BaseException):
        self.original = original
        self.rollback = rollback
        super().__init__(
            f"Compensation failed: original error: {original!r}; rollback error: {rollback!r}"
        )
