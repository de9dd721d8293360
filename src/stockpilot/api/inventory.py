"""Staff inventory counts and the end-of-day close webhook."""

import os
import secrets
from datetime import date

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.api.auth import get_current_user
from stockpilot.core.db import get_db
from stockpilot.core.errors import UnauthorizedError
from stockpilot.core.logging import get_logger
from stockpilot.models import InventoryMaterial, InventoryUsed, ItemKind, User
from stockpilot.models.catalog_schemas import UsageCountUpdate, UsageRow
from stockpilot.services import ledger
from stockpilot.utils.datetime import today_local

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/inventory", tags=["inventory"])


def _usage_row(material: InventoryMaterial, row: InventoryUsed | None, opening: int) -> UsageRow:
    if row is None:
        beginning, used, ending = opening, 0, opening
    else:
        beginning, used, ending = row.beginning_qty, row.used_qty, row.ending_qty
    return UsageRow(
        inventory_id=material.id,
        name=material.name,
        price=material.price,
        image_path=material.image_path,
        quantity=material.quantity,
        beginning_qty=beginning,
        used_qty=used,
        ending_qty=ending,
    )


async def _usage_rows(db: AsyncSession, day: date) -> list[UsageRow]:
    materials = await db.execute(
        select(InventoryMaterial).order_by(InventoryMaterial.name, InventoryMaterial.id)
    )
    rows = await db.execute(select(InventoryUsed).where(InventoryUsed.date == day))
    by_material = {row.inventory_id: row for row in rows.scalars()}
    openings = await ledger.previous_endings(db, ItemKind.MATERIAL, day)
    return [
        _usage_row(m, by_material.get(m.id), openings.get(m.id, m.quantity))
        for m in materials.scalars()
    ]


@router.get("/usage", response_model=list[UsageRow])
async def get_usage(
    date: date | None = Query(None, description="Business date, defaults to today"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Every material with its ledger row for the day (carried-forward stock when untouched)."""
    return await _usage_rows(db, date or today_local())


@router.post("/usage", response_model=list[UsageRow])
async def record_usage(
    payload: UsageCountUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Set the day's used quantity per material from a physical count."""
    day = payload.date or today_local()
    try:
        for item in payload.items:
            await ledger.set_usage(db, ItemKind.MATERIAL, item.inventory_id, day, item.used_qty)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "inventory.usage_recorded",
        date=day.isoformat(),
        items=len(payload.items),
        user_id=str(current_user.id),
    )
    return await _usage_rows(db, day)


def verify_webhook_token(
    x_webhook_token: str | None = Header(None),
    token: str | None = Query(None),
) -> None:
    """Shared-secret check for scheduler calls. Unset secret means always 401."""
    expected = os.getenv("INVENTORY_WEBHOOK_TOKEN")
    supplied = x_webhook_token or token

    if not expected or not supplied or not secrets.compare_digest(supplied, expected):
        logger.warning("inventory.webhook_unauthorized")
        raise UnauthorizedError("Invalid webhook token")


@router.post("/close-day", dependencies=[Depends(verify_webhook_token)])
async def close_day(
    date: date | None = Query(None, description="Business date, defaults to today"),
    db: AsyncSession = Depends(get_db),
):
    """Copy each material's ledger ending for the day into its live quantity."""
    day = date or today_local()
    changed = await ledger.close_day(db, day)
    return {"date": day.isoformat(), "materials_updated": changed}
