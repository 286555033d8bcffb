from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel

from .borrowing import BorrowingResponse


class MonthlyStat(BaseModel):
    month: str  # YYYY-MM
    borrowed: int
    returned: int
    new_books: int


class CategoryStat(BaseModel):
    name: str
    count: int
    percentage: int


class PopularBook(BaseModel):
    book_id: UUID
    title: str
    author: str
    category: Optional[str] = None
    borrow_count: int
    percentage: float


class PopularBooksReport(BaseModel):
    books: List[PopularBook]
    total_borrowings: int


class OverdueMonth(BaseModel):
    month: str  # YYYY-MM of the due date
    count: int


class OverdueReport(BaseModel):
    by_month: List[OverdueMonth]
    total_overdue: int
    average_days_overdue: float
    borrowings: List[BorrowingResponse]


class MostPopular(BaseModel):
    title: str
    count: int


class SummaryStats(BaseModel):
    total_borrowings: int
    active_borrowings: int
    returned_borrowings: int
    overdue_borrowings: int
    overdue_rate: float
    average_per_day: float
    most_popular: Optional[MostPopular] = None
    total_books: int
    available_books: int


class DashboardStats(BaseModel):
    total_books: int
    available_books: int
    active_borrowings: int
    overdue_borrowings: int
    total_borrowings: int
    total_inventory: int
