"""Admin dashboard endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.api.auth_helpers import require_admin
from stockpilot.core.db import get_db
from stockpilot.models import User
from stockpilot.models.report_schemas import (
    PaymentMethodShare,
    SalesPoint,
    TodayDashboard,
    TopProduct,
)
from stockpilot.services import reports
from stockpilot.services import summary as summary_service
from stockpilot.utils.datetime import today_local

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


def _resolve_range(start_date: date | None, end_date: date | None) -> tuple[date, date]:
    default_start, default_end = summary_service.default_range(today_local())
    return start_date or default_start, end_date or default_end


@router.get("/today", response_model=TodayDashboard)
async def today(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Today's summary, catalog counts and low-stock items."""
    return await reports.today_dashboard(db, today_local())


@router.get("/sales", response_model=list[SalesPoint])
async def sales(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Gross sales per day (default: last seven days)."""
    return await reports.sales_by_day(db, *_resolve_range(start_date, end_date))


@router.get("/payment-methods", response_model=list[PaymentMethodShare])
async def payment_methods(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await reports.payment_breakdown(db, *_resolve_range(start_date, end_date))


@router.get("/top-products", response_model=list[TopProduct])
async def top_products(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    start, end = _resolve_range(start_date, end_date)
    return await reports.top_products(db, start, end, limit)
