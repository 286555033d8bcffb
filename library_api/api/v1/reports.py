"""
API endpoints for library reports.
"""

from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from library_api.core.clock import Clock, get_clock
from library_api.core.database import get_db
from library_api.services.report_service import ReportService, iter_months
from library_api.schemas.report import (
    MonthlyStat,
    CategoryStat,
    PopularBooksReport,
    OverdueReport,
    SummaryStats
)
from .borrowings import to_response
from .errors import http_error

router = APIRouter()

MAX_REPORT_MONTHS = 60


@router.get("/reports/monthly", response_model=List[MonthlyStat])
async def get_monthly_report(
    start: date = Query(..., description="First day of the range"),
    end: date = Query(..., description="Last day of the range"),
    db: AsyncSession = Depends(get_db)
):
    """Borrowings, returns and new books per month."""
    if end < start:
        raise http_error(ValueError("End date cannot be before start date"))
    if len(iter_months(start, end)) > MAX_REPORT_MONTHS:
        raise http_error(ValueError(f"Range cannot exceed {MAX_REPORT_MONTHS} months"))
    return await ReportService.get_monthly_report(db, start, end)


@router.get("/reports/categories", response_model=List[CategoryStat])
async def get_category_report(
    limit: Optional[int] = Query(None, ge=1, le=50),
    db: AsyncSession = Depends(get_db)
):
    return await ReportService.get_category_report(db, limit)


@router.get("/reports/popular", response_model=PopularBooksReport)
async def get_popular_report(
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    return await ReportService.get_popular_report(db, limit)


@router.get("/reports/overdue", response_model=OverdueReport)
async def get_overdue_report(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    report = await ReportService.get_overdue_report(db, clock=clock)
    today = clock.today()
    report["borrowings"] = [to_response(b, today) for b in report["borrowings"]]
    return report


@router.get("/reports/summary", response_model=SummaryStats)
async def get_summary(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    return await ReportService.get_summary(db, clock=clock)
