"""Order history (staff transaction screen)."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.api.auth import get_current_user
from stockpilot.core.db import get_db
from stockpilot.models import User
from stockpilot.models.checkout_schemas import Transaction
from stockpilot.services import reports
from stockpilot.utils.datetime import today_local

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


@router.get("", response_model=list[Transaction])
async def list_orders(
    date: date | None = Query(None, description="Business date, defaults to today"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Transactions for a day grouped by order_id, newest first."""
    return await reports.list_transactions(db, date or today_local())
