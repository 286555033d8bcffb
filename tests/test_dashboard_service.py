from datetime import date, timedelta

import pytest

from library_api.core.clock import FixedClock
from library_api.models.inventory import ItemCondition
from library_api.schemas.borrowing import BorrowingCreate
from library_api.schemas.inventory import InventoryItemCreate
from library_api.services.borrowing_service import BorrowingService
from library_api.services.dashboard_service import DashboardService
from library_api.services.inventory_service import InventoryService
from library_api.services.report_service import ReportService

from conftest import TODAY

pytestmark = pytest.mark.asyncio


async def lend(db, book_id, borrow_date, due_date):
    return await BorrowingService.create_borrowing(
        db,
        BorrowingCreate(
            borrower_name="Agus",
            borrower_unit="Guru",
            book_id=book_id,
            borrow_date=borrow_date,
            due_date=due_date,
        ),
        clock=FixedClock(borrow_date),
    )


@pytest.fixture
def library(db, clock, make_book):
    async def _build():
        novel = await make_book(title="Laskar Pelangi", category="Novel", total_copies=3)
        sains = await make_book(title="Fisika Dasar", category="Sains", total_copies=2)
        overdue = await lend(db, novel.id, date(2023, 12, 20), date(2024, 1, 1))
        current = await lend(db, novel.id, date(2024, 1, 8), TODAY + timedelta(days=5))
        returned = await lend(db, sains.id, date(2024, 1, 2), date(2024, 1, 9))
        await BorrowingService.return_book(db, returned.id, clock=clock)
        await InventoryService.create_item(db, InventoryItemCreate(
            item_name="Kursi baca", category="Furnitur", quantity=12
        ))
        await InventoryService.create_item(db, InventoryItemCreate(
            item_name="Proyektor", category="Elektronik", quantity=1, condition=ItemCondition.RUSAK_RINGAN
        ))
        return {"novel": novel, "sains": sains, "overdue": overdue, "current": current}

    return _build


async def test_stats_count_copies_loans_and_inventory(db, clock, library):
    await library()

    stats = await DashboardService.get_stats(db, clock=clock)

    assert stats == {
        "total_books": 5,
        "available_books": 3,
        "active_borrowings": 2,
        "overdue_borrowings": 1,
        "total_borrowings": 3,
        "total_inventory": 13,
    }


async def test_stats_on_empty_library(db, clock):
    stats = await DashboardService.get_stats(db, clock=clock)
    assert stats["total_books"] == 0
    assert stats["available_books"] == 0
    assert stats["total_inventory"] == 0


async def test_recent_borrowings_limit(db, clock, library):
    await library()
    recent = await DashboardService.get_recent_borrowings(db, limit=2)
    assert len(recent) == 2


async def test_monthly_stats_cover_last_six_months(db, clock, library):
    await library()

    rows = await DashboardService.get_monthly_stats(db, clock=clock)

    assert [row["month"] for row in rows] == [
        "2023-08", "2023-09", "2023-10", "2023-11", "2023-12", "2024-01"
    ]
    by_month = {row["month"]: row for row in rows}
    assert by_month["2023-12"]["borrowed"] == 1
    assert by_month["2024-01"]["borrowed"] == 2
    assert by_month["2024-01"]["returned"] == 1


async def test_category_and_popular_views(db, clock, library):
    built = await library()

    categories = await DashboardService.get_category_stats(db)
    assert [(row["name"], row["percentage"]) for row in categories] == [("Novel", 50), ("Sains", 50)]

    popular = await DashboardService.get_popular_books(db)
    assert popular["total_borrowings"] == 3
    assert popular["books"][0]["book_id"] == built["novel"].id
    assert popular["books"][0]["borrow_count"] == 2


async def test_overdue_report_reads_live_loans(db, clock, library):
    built = await library()

    report = await ReportService.get_overdue_report(db, clock=clock)

    assert report["total_overdue"] == 1
    assert [b.id for b in report["borrowings"]] == [built["overdue"].id]
    assert report["average_days_overdue"] == 9.0


async def test_summary_reads_live_data(db, clock, library):
    await library()
    summary = await ReportService.get_summary(db, clock=clock)
    assert summary["total_borrowings"] == 3
    assert summary["most_popular"] == {"title": "Laskar Pelangi", "count": 2}
    assert summary["available_books"] == 3
