"""Daily summary endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.api.auth import get_current_user
from stockpilot.api.auth_helpers import require_admin
from stockpilot.core.db import get_db
from stockpilot.core.logging import get_logger
from stockpilot.models import User
from stockpilot.models.summary_schemas import DailySummaryRead, DepositUpdate, SummaryRange
from stockpilot.services import summary as summary_service
from stockpilot.utils.datetime import today_local

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/summary", tags=["summary"])


@router.get("", response_model=DailySummaryRead | SummaryRange)
async def get_summary(
    date: date | None = Query(None, description="Single day"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    One day's summary when ``date`` is given, otherwise per-day rows and totals
    for the range (default: the last seven days).
    """
    if date is not None:
        summary = await summary_service.get_summary(db, date)
        return DailySummaryRead.model_validate(summary)

    default_start, default_end = summary_service.default_range(today_local())
    data = await summary_service.get_summary_range(
        db,
        start_date or default_start,
        end_date or default_end,
    )
    data["summaries"] = [DailySummaryRead.model_validate(s) for s in data["summaries"]]
    return SummaryRange(**data)


@router.post("/{day}/recompute", response_model=DailySummaryRead)
async def recompute_summary(
    day: date,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Rebuild one day's summary from orders and expenses."""
    logger.info("summary.recompute_requested", date=day.isoformat(), user_id=str(current_user.id))
    return await summary_service.recompute(db, day)


@router.put("/{day}/deposit", response_model=DailySummaryRead)
async def set_deposit(
    day: date,
    payload: DepositUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Record the cash deposited for a day. Kept across recomputes."""
    return await summary_service.set_deposit(db, day, payload.amount)
