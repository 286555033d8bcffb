"""
Report Service
Aggregates borrowing and catalog data for the reports and dashboard views.

The aggregation functions are pure: they take already-fetched collections
and return plain dicts. Output ordering never depends on input ordering.
"""

import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.core.clock import Clock
from library_api.core.config import settings
from library_api.models.book import Book
from library_api.models.borrowing import Borrowing, BorrowingStatus
from library_api.services.book_service import BookService
from library_api.services.borrowing_service import BorrowingLedger

logger = logging.getLogger(__name__)


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def iter_months(start: date, end: date) -> List[str]:
    """Month keys from the month of ``start`` through the month of ``end``."""
    months = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.append(f"{year:04d}-{month:02d}")
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return months


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def monthly_stats(
    borrowings: Iterable[Borrowing],
    books: Iterable[Book],
    start: date,
    end: date
) -> List[Dict]:
    """Borrowings, returns and new books per calendar month in [start, end]."""
    if end < start:
        raise ValueError("End date cannot be before start date")

    borrowed = defaultdict(int)
    returned = defaultdict(int)
    new_books = defaultdict(int)

    for b in borrowings:
        if b.borrow_date:
            borrowed[month_key(b.borrow_date)] += 1
        if b.return_date and b.status == BorrowingStatus.RETURNED:
            returned[month_key(b.return_date)] += 1

    for book in books:
        if book.created_at:
            new_books[month_key(book.created_at)] += 1

    return [
        {
            "month": key,
            "borrowed": borrowed[key],
            "returned": returned[key],
            "new_books": new_books[key],
        }
        for key in iter_months(start, end)
    ]


def category_stats(
    books: Sequence[Book],
    limit: int = 8,
    default_category: Optional[str] = None
) -> List[Dict]:
    """Share of the catalog per category, largest first."""
    default_category = default_category or settings.DEFAULT_CATEGORY
    total = len(books)
    if total == 0:
        return []

    counts = defaultdict(int)
    for book in books:
        counts[book.category or default_category] += 1

    rows = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [
        {
            "name": name,
            "count": count,
            "percentage": _round_half_up(count / total * 100),
        }
        for name, count in rows[:limit]
    ]


def popular_books(
    borrowings: Sequence[Borrowing],
    books: Iterable[Book],
    limit: int = 10
) -> Dict:
    """Most borrowed books with their share of all borrowings."""
    catalog = {book.id: book for book in books}
    total = len(borrowings)

    counts = defaultdict(int)
    for b in borrowings:
        counts[b.book_id] += 1

    ranked = []
    for book_id, count in counts.items():
        book = catalog.get(book_id)
        if book is None:
            continue
        ranked.append({
            "book_id": book_id,
            "title": book.title,
            "author": book.author,
            "category": book.category,
            "borrow_count": count,
            "percentage": round(count / total * 100, 1) if total else 0.0,
        })

    ranked.sort(key=lambda row: (-row["borrow_count"], row["title"], str(row["book_id"])))
    return {"books": ranked[:limit], "total_borrowings": total}


def overdue_stats(borrowings: Iterable[Borrowing], today: date) -> Dict:
    """Outstanding loans past their due date, grouped by due month."""
    overdue = sorted(
        (b for b in borrowings if b.is_overdue_on(today)),
        key=lambda b: (b.due_date, str(b.id))
    )

    by_month = defaultdict(int)
    total_days = 0
    for b in overdue:
        by_month[month_key(b.due_date)] += 1
        total_days += max(0, math.ceil((today - b.due_date) / timedelta(days=1)))

    average = round(total_days / len(overdue), 2) if overdue else 0.0

    return {
        "by_month": [
            {"month": month, "count": count}
            for month, count in sorted(by_month.items())
        ],
        "total_overdue": len(overdue),
        "average_days_overdue": average,
        "borrowings": overdue,
    }


def summary_stats(
    borrowings: Sequence[Borrowing],
    books: Sequence[Book],
    today: date
) -> Dict:
    """Headline figures for the reports page."""
    total = len(borrowings)
    active = sum(1 for b in borrowings if b.is_outstanding)
    returned = sum(1 for b in borrowings if b.status == BorrowingStatus.RETURNED)
    overdue = sum(1 for b in borrowings if b.is_overdue_on(today))

    window_start = today - timedelta(days=30)
    recent = sum(1 for b in borrowings if b.borrow_date and b.borrow_date >= window_start)

    # keyed by book so two editions sharing a title stay apart
    book_counts = defaultdict(int)
    titles = {}
    for b in borrowings:
        if b.book is not None:
            book_counts[b.book_id] += 1
            titles[b.book_id] = b.book.title
    most_popular = None
    if book_counts:
        book_id, count = min(
            book_counts.items(),
            key=lambda item: (-item[1], titles[item[0]], str(item[0]))
        )
        most_popular = {"title": titles[book_id], "count": count}

    return {
        "total_borrowings": total,
        "active_borrowings": active,
        "returned_borrowings": returned,
        "overdue_borrowings": overdue,
        "overdue_rate": round(overdue / total * 100, 1) if total else 0.0,
        "average_per_day": round(recent / 30, 1),
        "most_popular": most_popular,
        "total_books": len(books),
        "available_books": sum(book.available_copies or 0 for book in books),
    }


class ReportService:
    """Reads fresh collections and runs the aggregations over them."""

    @staticmethod
    async def _snapshot(db: AsyncSession):
        books = await BookService.get_all_books(db)
        borrowings = await BorrowingLedger.list_all(db)
        return books, borrowings

    @staticmethod
    async def get_monthly_report(
        db: AsyncSession,
        start: date,
        end: date
    ) -> List[Dict]:
        books, borrowings = await ReportService._snapshot(db)
        logger.info(f"Generating monthly report {start} - {end}")
        return monthly_stats(borrowings, books, start, end)

    @staticmethod
    async def get_category_report(
        db: AsyncSession,
        limit: Optional[int] = None
    ) -> List[Dict]:
        books = await BookService.get_all_books(db)
        return category_stats(books, limit or settings.REPORT_CATEGORY_LIMIT)

    @staticmethod
    async def get_popular_report(
        db: AsyncSession,
        limit: Optional[int] = None
    ) -> Dict:
        books, borrowings = await ReportService._snapshot(db)
        return popular_books(borrowings, books, limit or settings.REPORT_POPULAR_LIMIT)

    @staticmethod
    async def get_overdue_report(
        db: AsyncSession,
        clock: Optional[Clock] = None
    ) -> Dict:
        today = (clock or Clock()).today()
        borrowings = await BorrowingLedger.list_all(db, outstanding=True)
        return overdue_stats(borrowings, today)

    @staticmethod
    async def get_summary(
        db: AsyncSession,
        clock: Optional[Clock] = None
    ) -> Dict:
        today = (clock or Clock()).today()
        books, borrowings = await ReportService._snapshot(db)
        return summary_stats(borrowings, books, today)
