"""Ledger maintenance endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.api.auth_helpers import require_admin
from stockpilot.core.db import get_db
from stockpilot.models import User
from stockpilot.services import ledger
from stockpilot.utils.datetime import today_local

router = APIRouter(prefix="/api/v1/ledger", tags=["ledger"])


@router.post("/repair")
async def repair_ledger(
    date: date | None = Query(None, description="Repair as of this day, defaults to today"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Reset live product and material quantities to their latest ledger endings."""
    as_of = date or today_local()
    changed = await ledger.repair_live_quantities(db, as_of)
    return {"as_of": as_of.isoformat(), **changed}
