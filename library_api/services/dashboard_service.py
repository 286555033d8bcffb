"""
Dashboard Service
Headline counters and chart data for the landing dashboard.
"""

import logging
from datetime import date
from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from library_api.core.clock import Clock
from library_api.core.config import settings
from library_api.models.book import Book
from library_api.models.borrowing import Borrowing, OUTSTANDING_STATUSES
from library_api.services.book_service import BookService
from library_api.services.borrowing_service import BorrowingLedger
from library_api.services.inventory_service import InventoryService
from library_api.services.report_service import monthly_stats, category_stats, popular_books

logger = logging.getLogger(__name__)


def months_back(today: date, months: int) -> date:
    """First day of the month ``months - 1`` months before ``today``'s month."""
    index = today.year * 12 + (today.month - 1) - (months - 1)
    return date(index // 12, index % 12 + 1, 1)


class DashboardService:

    @staticmethod
    async def get_stats(
        db: AsyncSession,
        clock: Optional[Clock] = None
    ) -> Dict:
        """Copies on the shelf, loans out, overdue loans and inventory size."""
        today = (clock or Clock()).today()

        book_totals = await db.execute(
            select(
                func.coalesce(func.sum(Book.total_copies), 0),
                func.coalesce(func.sum(Book.available_copies), 0),
            )
        )
        total_books, available_books = book_totals.one()

        total_borrowings = (await db.execute(select(func.count(Borrowing.id)))).scalar() or 0
        active_borrowings = (await db.execute(
            select(func.count(Borrowing.id)).where(Borrowing.status.in_(OUTSTANDING_STATUSES))
        )).scalar() or 0
        overdue_borrowings = (await db.execute(
            select(func.count(Borrowing.id)).where(
                Borrowing.status.in_(OUTSTANDING_STATUSES),
                Borrowing.due_date < today
            )
        )).scalar() or 0

        total_inventory = await InventoryService.get_total_quantity(db)
        logger.debug(f"Dashboard stats for {today}: {active_borrowings} active, {overdue_borrowings} overdue")

        return {
            "total_books": int(total_books),
            "available_books": int(available_books),
            "active_borrowings": active_borrowings,
            "overdue_borrowings": overdue_borrowings,
            "total_borrowings": total_borrowings,
            "total_inventory": total_inventory,
        }

    @staticmethod
    async def get_recent_borrowings(
        db: AsyncSession,
        limit: Optional[int] = None
    ) -> List[Borrowing]:
        return await BorrowingLedger.list_all(db, limit=limit or settings.RECENT_BORROWINGS_LIMIT)

    @staticmethod
    async def get_monthly_stats(
        db: AsyncSession,
        clock: Optional[Clock] = None,
        months: Optional[int] = None
    ) -> List[Dict]:
        """Activity for the last N months, the current month included."""
        today = (clock or Clock()).today()
        start = months_back(today, months or settings.DASHBOARD_MONTHS)
        books = await BookService.get_all_books(db)
        borrowings = await BorrowingLedger.list_all(db)
        return monthly_stats(borrowings, books, start, today)

    @staticmethod
    async def get_category_stats(db: AsyncSession) -> List[Dict]:
        books = await BookService.get_all_books(db)
        return category_stats(books, settings.DASHBOARD_CATEGORY_LIMIT)

    @staticmethod
    async def get_popular_books(
        db: AsyncSession,
        limit: Optional[int] = None
    ) -> Dict:
        books = await BookService.get_all_books(db)
        borrowings = await BorrowingLedger.list_all(db)
        return popular_books(borrowings, books, limit or settings.DASHBOARD_POPULAR_LIMIT)
