"""
API endpoints for the dashboard.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from library_api.core.clock import Clock, get_clock
from library_api.core.database import get_db
from library_api.services.dashboard_service import DashboardService
from library_api.schemas.borrowing import BorrowingResponse
from library_api.schemas.report import DashboardStats, MonthlyStat, CategoryStat, PopularBooksReport
from .borrowings import to_response

router = APIRouter()


@router.get("/dashboard/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    return await DashboardService.get_stats(db, clock=clock)


@router.get("/dashboard/recent", response_model=List[BorrowingResponse])
async def get_recent_borrowings(
    limit: Optional[int] = Query(None, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    today = clock.today()
    borrowings = await DashboardService.get_recent_borrowings(db, limit)
    return [to_response(b, today) for b in borrowings]


@router.get("/dashboard/monthly", response_model=List[MonthlyStat])
async def get_monthly_stats(
    months: Optional[int] = Query(None, ge=1, le=24),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    return await DashboardService.get_monthly_stats(db, clock=clock, months=months)


@router.get("/dashboard/categories", response_model=List[CategoryStat])
async def get_category_stats(
    db: AsyncSession = Depends(get_db)
):
    return await DashboardService.get_category_stats(db)


@router.get("/dashboard/popular", response_model=PopularBooksReport)
async def get_popular_books(
    limit: Optional[int] = Query(None, ge=1, le=50),
    db: AsyncSession = Depends(get_db)
):
    return await DashboardService.get_popular_books(db, limit)
