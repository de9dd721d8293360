"""Delivery / stock-count endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.api.auth import get_current_user
from stockpilot.core.db import get_db
from stockpilot.models import User
from stockpilot.models.delivery_schemas import (
    DeliveryConfirmResult,
    DeliveryData,
    DeliveryUpdate,
    DeliveryUpdateResult,
)
from stockpilot.services import deliveries as delivery_service
from stockpilot.utils.datetime import today_local

router = APIRouter(prefix="/api/v1/deliveries", tags=["deliveries"])


@router.get("", response_model=DeliveryData)
async def get_deliveries(
    date: date | None = Query(None, description="Business date, defaults to today"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delivery rows for every product and material. The first read of a day seeds it."""
    return await delivery_service.get_delivery_data(db, date or today_local(), current_user)


@router.post("", response_model=DeliveryUpdateResult)
async def update_deliveries(
    payload: DeliveryUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Save staff counts. Each submission overwrites the previous one."""
    day = payload.date or today_local()
    rows = await delivery_service.update_deliveries(db, day, payload.items, current_user)
    return DeliveryUpdateResult(updated=rows)


@router.post("/{delivery_id}/confirm", response_model=DeliveryConfirmResult)
async def confirm_delivery(
    delivery_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Confirm a delivery. Confirming twice is a no-op that still succeeds."""
    row, already_confirmed = await delivery_service.confirm_delivery(db, delivery_id, current_user)
    return DeliveryConfirmResult(success=True, already_confirmed=already_confirmed, delivery=row)
