import random
import uuid
from datetime import date, datetime, timedelta

import pytest

from library_api.models.book import Book
from library_api.models.borrowing import Borrowing, BorrowingStatus
from library_api.services.report_service import (
    month_key,
    iter_months,
    monthly_stats,
    category_stats,
    popular_books,
    overdue_stats,
    summary_stats,
)
from library_api.services.dashboard_service import months_back


TODAY = date(2024, 1, 10)


def book(title="Buku", category="Novel", created=datetime(2024, 1, 2, 8, 0), total=3, available=3):
    return Book(
        id=uuid.uuid4(),
        book_code=f"BK-{uuid.uuid4().hex[:6]}",
        title=title,
        author="Penulis",
        category=category,
        total_copies=total,
        available_copies=available,
        created_at=created,
    )


def borrowing(book_obj, borrow_date, due_date=None, status=BorrowingStatus.BORROWED, return_date=None):
    return Borrowing(
        id=uuid.uuid4(),
        borrower_name="Dewi",
        borrower_unit="Kelas 9C",
        book_id=book_obj.id,
        book=book_obj,
        borrow_date=borrow_date,
        due_date=due_date or borrow_date + timedelta(days=7),
        return_date=return_date,
        status=status,
    )


def test_month_helpers():
    assert month_key(date(2024, 3, 31)) == "2024-03"
    assert iter_months(date(2023, 11, 15), date(2024, 2, 1)) == [
        "2023-11", "2023-12", "2024-01", "2024-02"
    ]
    assert iter_months(date(2024, 5, 1), date(2024, 5, 31)) == ["2024-05"]
    assert months_back(date(2024, 1, 10), 6) == date(2023, 8, 1)
    assert months_back(date(2024, 7, 31), 1) == date(2024, 7, 1)


def test_monthly_stats_counts_every_month_in_range():
    b1 = book(created=datetime(2023, 12, 5))
    b2 = book(created=datetime(2024, 2, 1))
    borrowings = [
        borrowing(b1, date(2023, 12, 20), status=BorrowingStatus.RETURNED, return_date=date(2024, 1, 3)),
        borrowing(b1, date(2024, 1, 4)),
        borrowing(b2, date(2024, 1, 8)),
    ]

    rows = monthly_stats(borrowings, [b1, b2], date(2023, 11, 1), date(2024, 2, 29))

    assert rows == [
        {"month": "2023-11", "borrowed": 0, "returned": 0, "new_books": 0},
        {"month": "2023-12", "borrowed": 1, "returned": 0, "new_books": 1},
        {"month": "2024-01", "borrowed": 2, "returned": 1, "new_books": 0},
        {"month": "2024-02", "borrowed": 0, "returned": 0, "new_books": 1},
    ]


def test_monthly_stats_ignores_return_date_without_returned_status():
    b1 = book()
    stray = borrowing(b1, date(2024, 1, 2), return_date=date(2024, 1, 5))
    rows = monthly_stats([stray], [b1], date(2024, 1, 1), date(2024, 1, 31))
    assert rows[0]["returned"] == 0


def test_monthly_stats_rejects_reversed_range():
    with pytest.raises(ValueError):
        monthly_stats([], [], date(2024, 2, 1), date(2024, 1, 1))


def test_category_stats_shares_and_default_category():
    books = (
        [book(category="Novel") for _ in range(3)]
        + [book(category="Sains")]
        + [book(category=None) for _ in range(2)]
    )

    rows = category_stats(books, default_category="Lainnya")

    assert rows == [
        {"name": "Novel", "count": 3, "percentage": 50},
        {"name": "Lainnya", "count": 2, "percentage": 33},
        {"name": "Sains", "count": 1, "percentage": 17},
    ]


def test_category_stats_ties_do_not_depend_on_input_order():
    books = [book(category=name) for name in ["Sejarah", "Agama", "Novel", "Sains", "Agama", "Novel"]]
    expected = category_stats(books, limit=3)

    shuffled = list(books)
    for seed in range(5):
        random.Random(seed).shuffle(shuffled)
        assert category_stats(shuffled, limit=3) == expected

    assert [row["name"] for row in expected] == ["Agama", "Novel", "Sains"]


def test_category_stats_empty_catalog():
    assert category_stats([]) == []


def test_popular_books_ranks_and_skips_missing_books():
    a = book(title="Ayat-Ayat Cinta")
    b = book(title="Negeri 5 Menara")
    gone = book(title="Dihapus")
    borrowings = (
        [borrowing(a, date(2024, 1, 2)) for _ in range(3)]
        + [borrowing(b, date(2024, 1, 3))]
        + [borrowing(gone, date(2024, 1, 4))]
    )

    report = popular_books(borrowings, [a, b], limit=10)

    assert report["total_borrowings"] == 5
    assert [(row["title"], row["borrow_count"], row["percentage"]) for row in report["books"]] == [
        ("Ayat-Ayat Cinta", 3, 60.0),
        ("Negeri 5 Menara", 1, 20.0),
    ]


def test_popular_books_limit_and_empty():
    books = [book(title=f"Judul {i}") for i in range(4)]
    borrowings = [borrowing(b, date(2024, 1, 2)) for b in books]

    assert len(popular_books(borrowings, books, limit=2)["books"]) == 2
    assert popular_books([], books) == {"books": [], "total_borrowings": 0}


def test_overdue_stats_only_counts_outstanding_past_due():
    b1 = book()
    late = borrowing(b1, date(2023, 12, 20), due_date=date(2024, 1, 1))
    later = borrowing(b1, date(2023, 11, 20), due_date=date(2023, 12, 1))
    due_today = borrowing(b1, date(2024, 1, 3), due_date=TODAY)
    returned_late = borrowing(
        b1, date(2023, 12, 1), due_date=date(2023, 12, 8),
        status=BorrowingStatus.RETURNED, return_date=date(2024, 1, 2)
    )

    report = overdue_stats([late, due_today, returned_late, later], TODAY)

    assert report["total_overdue"] == 2
    assert [b.id for b in report["borrowings"]] == [later.id, late.id]
    assert report["by_month"] == [
        {"month": "2023-12", "count": 1},
        {"month": "2024-01", "count": 1},
    ]
    # 40 and 9 days late
    assert report["average_days_overdue"] == 24.5


def test_overdue_stats_with_nothing_overdue():
    report = overdue_stats([], TODAY)
    assert report == {"by_month": [], "total_overdue": 0, "average_days_overdue": 0.0, "borrowings": []}


def test_summary_stats():
    a = book(title="Ayat-Ayat Cinta", total=2, available=1)
    b = book(title="Bumi", total=1, available=1)
    borrowings = [
        borrowing(a, date(2024, 1, 5)),
        borrowing(a, date(2023, 12, 1), due_date=date(2023, 12, 8),
                  status=BorrowingStatus.RETURNED, return_date=date(2023, 12, 7)),
        borrowing(b, date(2023, 12, 20), due_date=date(2024, 1, 1),
                  status=BorrowingStatus.RETURNED, return_date=date(2024, 1, 2)),
        borrowing(b, date(2023, 10, 1), due_date=date(2023, 10, 8)),
    ]

    summary = summary_stats(borrowings, [a, b], TODAY)

    assert summary["total_borrowings"] == 4
    assert summary["active_borrowings"] == 2
    assert summary["returned_borrowings"] == 2
    assert summary["overdue_borrowings"] == 1
    assert summary["overdue_rate"] == 25.0
    assert summary["average_per_day"] == round(2 / 30, 1)
    assert summary["most_popular"] == {"title": "Ayat-Ayat Cinta", "count": 2}
    assert summary["total_books"] == 2
    assert summary["available_books"] == 2


def test_summary_stats_empty():
    summary = summary_stats([], [], TODAY)
    assert summary["total_borrowings"] == 0
    assert summary["overdue_rate"] == 0.0
    assert summary["most_popular"] is None


def test_summary_most_popular_keeps_same_titled_books_apart():
    first_print = book(title="Laskar Pelangi")
    reprint = book(title="Laskar Pelangi")
    other = book(title="Bumi Manusia")
    borrowings = (
        [borrowing(first_print, date(2024, 1, 2)) for _ in range(2)]
        + [borrowing(reprint, date(2024, 1, 3)) for _ in range(2)]
        + [borrowing(other, date(2024, 1, 4)) for _ in range(3)]
    )

    summary = summary_stats(borrowings, [first_print, reprint, other], TODAY)

    assert summary["most_popular"] == {"title": "Bumi Manusia", "count": 3}
