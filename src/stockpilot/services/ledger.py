"""
Quantity ledger: per-item, per-day beginning/used/ending stock.

Two physical ledgers share one interface, selected by ItemKind:
- product_sold     ending = beginning + delivered - sold
- inventory_used   ending = beginning - used

Rows are created lazily on first touch and never deleted. The live ``quantity``
column on products/materials is a projection of the latest ledger ending.
"""

from datetime import date
from typing import Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.core.db import insert_if_absent
from stockpilot.core.errors import (
    ConcurrencyConflictError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from stockpilot.core.logging import get_logger
from stockpilot.models import (
    Delivery,
    InventoryMaterial,
    InventoryUsed,
    ItemKind,
    Product,
    ProductSold,
)
from stockpilot.utils.datetime import now_utc

logger = get_logger(__name__)

Item = Union[Product, InventoryMaterial]
LedgerRow = Union[ProductSold, InventoryUsed]

ITEM_MODELS = {
    ItemKind.PRODUCT: Product,
    ItemKind.MATERIAL: InventoryMaterial,
}

LEDGER_MODELS = {
    ItemKind.PRODUCT: ProductSold,
    ItemKind.MATERIAL: InventoryUsed,
}

# Column on the ledger table that references the item
LEDGER_ITEM_COLUMNS = {
    ItemKind.PRODUCT: "product_id",
    ItemKind.MATERIAL: "inventory_id",
}


def _item_column(kind: ItemKind):
    return getattr(LEDGER_MODELS[kind], LEDGER_ITEM_COLUMNS[kind])


async def get_item(db: AsyncSession, kind: ItemKind, item_id: int) -> Item:
    """Load a product or material, raising NotFoundError when it does not exist."""
    item = await db.get(ITEM_MODELS[kind], item_id)
    if item is None:
        raise NotFoundError(ITEM_MODELS[kind].__name__, str(item_id))
    return item


async def lock_item(db: AsyncSession, kind: ItemKind, item_id: int) -> Item:
    """Reload an item under a row lock, overwriting any stale copy in the session."""
    model = ITEM_MODELS[kind]
    # FOR UPDATE is dropped by dialects without row locks (SQLite)
    result = await db.execute(
        select(model)
        .where(model.id == item_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise NotFoundError(model.__name__, str(item_id))
    return item


async def find_record(
    db: AsyncSession,
    kind: ItemKind,
    item_id: int,
    day: date,
    lock: bool = False,
) -> LedgerRow | None:
    model = LEDGER_MODELS[kind]
    stmt = select(model).where(_item_column(kind) == item_id, model.date == day)
    if lock:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _latest_endings(
    db: AsyncSession,
    model,
    item_col,
    *criteria,
) -> dict[int, tuple[date, int]]:
    """(date, ending_qty) of each item's most recent row matching ``criteria``."""
    latest = (
        select(item_col.label("item_id"), func.max(model.date).label("last_date"))
        .where(*criteria)
        .group_by(item_col)
        .subquery()
    )
    stmt = (
        select(item_col, model.date, model.ending_qty)
        .join(latest, (item_col == latest.c.item_id) & (model.date == latest.c.last_date))
        .where(*criteria)
    )
    result = await db.execute(stmt)
    return {item_id: (row_date, ending) for item_id, row_date, ending in result.all()}


async def previous_endings(
    db: AsyncSession,
    kind: ItemKind,
    day: date,
    prefer_deliveries: bool = False,
) -> dict[int, int]:
    """
    Latest closing quantity before ``day``, keyed by item id.

    Each item carries forward from its most recent ledger row, however many days
    back it is. With ``prefer_deliveries`` the item's most recent delivery record
    before ``day`` wins when it is at least as recent as that ledger row, which is
    the order the delivery screen seeds from. Items with no history are absent.
    """
    model = LEDGER_MODELS[kind]
    latest = await _latest_endings(db, model, _item_column(kind), model.date < day)

    if prefer_deliveries:
        delivered = await _latest_endings(
            db,
            Delivery,
            Delivery.item_id,
            Delivery.date < day,
            Delivery.kind == kind.value,
        )
        for item_id, (delivery_date, ending) in delivered.items():
            ledger_entry = latest.get(item_id)
            if ledger_entry is None or delivery_date >= ledger_entry[0]:
                latest[item_id] = (delivery_date, ending)

    return {item_id: ending for item_id, (_, ending) in latest.items()}


async def opening_quantity(db: AsyncSession, kind: ItemKind, item: Item, day: date) -> int:
    """The item's last ledger ending before ``day``, or its live quantity for a new item."""
    endings = await previous_endings(db, kind, day)
    return endings.get(item.id, item.quantity)


async def get_or_init(
    db: AsyncSession,
    kind: ItemKind,
    item_id: int,
    day: date,
    lock: bool = False,
) -> LedgerRow:
    """
    Return the ledger row for (item, day), creating it when absent.

    A new row starts with beginning = ending = the last ending before ``day`` (or
    the live quantity) and no movement. Concurrent callers cannot create
    duplicates: the insert is skipped on the (item, date) unique key and the
    winning row is read. With ``lock`` the row is read under a row lock and
    refreshed from the database, so read-modify-write callers see committed
    movements from other sessions.
    """
    row = await find_record(db, kind, item_id, day, lock=lock)
    if row is not None:
        return row

    item = await get_item(db, kind, item_id)
    beginning = await opening_quantity(db, kind, item, day)

    values = {
        LEDGER_ITEM_COLUMNS[kind]: item_id,
        "date": day,
        "beginning_qty": beginning,
        "ending_qty": beginning,
        "updated_at": now_utc(),
    }
    if kind == ItemKind.PRODUCT:
        values.update(sold_qty=0, delivered_qty=0)
    else:
        values.update(used_qty=0)

    try:
        inserted = await insert_if_absent(
            db,
            LEDGER_MODELS[kind],
            [values],
            conflict_columns=[LEDGER_ITEM_COLUMNS[kind], "date"],
        )
    except ConcurrencyConflictError:
        inserted = 0

    if not inserted:
        logger.info(
            "ledger.init_race",
            kind=kind.value,
            item_id=item_id,
            date=day.isoformat(),
        )

    row = await find_record(db, kind, item_id, day, lock=lock)
    if row is None:
        raise ConcurrencyConflictError(
            "Ledger row vanished after insert",
            details={"kind": kind.value, "item_id": item_id, "date": day.isoformat()},
        )
    return row


def _ensure_non_negative(row: LedgerRow, item_name: str, requested: int) -> None:
    if row.ending_qty < 0:
        available = row.ending_qty + requested
        raise InsufficientStockError(
            item_name=item_name,
            item_id=row.item_id,
            available=max(available, 0),
            requested=requested,
        )


async def apply_usage(
    db: AsyncSession,
    kind: ItemKind,
    item_id: int,
    day: date,
    delta_used: int,
) -> LedgerRow:
    """
    Add ``delta_used`` to the day's sold/used quantity and recompute the ending.

    Raises InsufficientStockError when the ending would drop below zero.
    """
    if delta_used < 0:
        raise ValidationError(
            "Usage cannot be negative",
            details={"field": "delta_used", "value": delta_used},
        )

    item = await get_item(db, kind, item_id)
    row = await get_or_init(db, kind, item_id, day, lock=True)
    if kind == ItemKind.PRODUCT:
        row.sold_qty += delta_used
    else:
        row.used_qty += delta_used
    row.recompute_ending()

    _ensure_non_negative(row, item.name, delta_used)
    return row


async def apply_delivery(
    db: AsyncSession,
    kind: ItemKind,
    item_id: int,
    day: date,
    delivered_qty: int,
) -> LedgerRow:
    """
    Write a confirmed delivery movement into the ledger.

    Products receive stock (delivered_qty increases the ending). Materials are
    drawn from stock (used_qty increases, ending decreases).
    """
    if kind == ItemKind.MATERIAL:
        return await apply_usage(db, kind, item_id, day, delivered_qty)

    row = await get_or_init(db, kind, item_id, day, lock=True)
    row.delivered_qty += delivered_qty
    row.recompute_ending()
    return row


async def set_usage(
    db: AsyncSession,
    kind: ItemKind,
    item_id: int,
    day: date,
    used_qty: int,
) -> LedgerRow:
    """Overwrite the day's used quantity with a physical count."""
    item = await get_item(db, kind, item_id)
    row = await get_or_init(db, kind, item_id, day, lock=True)
    previous = row.used_qty
    row.used_qty = used_qty
    row.recompute_ending()

    if row.ending_qty < 0:
        raise InsufficientStockError(
            item_name=item.name,
            item_id=item_id,
            available=row.beginning_qty,
            requested=used_qty,
        )

    logger.info(
        "ledger.usage_counted",
        kind=kind.value,
        item_id=item_id,
        date=day.isoformat(),
        previous_used=previous,
        used=used_qty,
    )
    return row


async def apply_correction(
    db: AsyncSession,
    kind: ItemKind,
    item: Item,
    day: date,
    new_quantity: int,
) -> LedgerRow:
    """
    Record a manual stock correction to ``new_quantity``.

    The day's row is initialised from the pre-correction state, then its
    beginning is shifted by the difference so the ending matches the new count.
    """
    row = await get_or_init(db, kind, item.id, day, lock=True)
    delta = new_quantity - row.ending_qty
    if row.beginning_qty + delta < 0:
        raise ValidationError(
            "Correction would make the day's beginning quantity negative",
            details={"beginning_qty": row.beginning_qty, "delta": delta},
        )
    row.beginning_qty += delta
    row.recompute_ending()

    logger.info(
        "ledger.corrected",
        kind=kind.value,
        item_id=item.id,
        date=day.isoformat(),
        delta=delta,
        ending=row.ending_qty,
    )
    return row


async def has_later_records(db: AsyncSession, kind: ItemKind, item_id: int, day: date) -> bool:
    model = LEDGER_MODELS[kind]
    count = await db.scalar(
        select(func.count())
        .select_from(model)
        .where(_item_column(kind) == item_id, model.date > day)
    )
    return bool(count)


async def sync_live_quantity(db: AsyncSession, kind: ItemKind, item: Item, row: LedgerRow) -> bool:
    """
    Project a ledger ending onto the item's live quantity.

    Skipped when a later day already has a ledger row, so backfilling an old date
    never rewinds current stock. Returns True when the live quantity was written.
    """
    if await has_later_records(db, kind, item.id, row.date):
        return False
    item.quantity = row.ending_qty
    return True


async def project_live_quantities(db: AsyncSession, kind: ItemKind, as_of: date) -> int:
    """
    Set every item's live quantity to its latest ledger ending on or before ``as_of``.

    Items without any ledger row keep their live quantity. Returns the number of
    items whose quantity changed. Idempotent; the caller commits.
    """
    model = LEDGER_MODELS[kind]
    latest = await _latest_endings(db, model, _item_column(kind), model.date <= as_of)
    endings = {item_id: ending for item_id, (_, ending) in latest.items()}
    if not endings:
        return 0

    item_model = ITEM_MODELS[kind]
    items = await db.execute(select(item_model).where(item_model.id.in_(endings.keys())))

    changed = 0
    for item in items.scalars():
        ending = endings[item.id]
        if item.quantity != ending:
            logger.info(
                "ledger.live_quantity_drift",
                kind=kind.value,
                item_id=item.id,
                live=item.quantity,
                ledger=ending,
            )
            item.quantity = ending
            changed += 1
    return changed


async def repair_live_quantities(db: AsyncSession, as_of: date) -> dict[str, int]:
    """Recompute live product and material quantities from the ledger, then commit."""
    try:
        products = await project_live_quantities(db, ItemKind.PRODUCT, as_of)
        materials = await project_live_quantities(db, ItemKind.MATERIAL, as_of)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "ledger.repaired",
        as_of=as_of.isoformat(),
        products_changed=products,
        materials_changed=materials,
    )
    return {"products": products, "materials": materials}


async def close_day(db: AsyncSession, day: date) -> int:
    """End-of-day projection of material ledger endings onto live quantities."""
    try:
        changed = await project_live_quantities(db, ItemKind.MATERIAL, day)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("inventory.day_closed", date=day.isoformat(), materials_changed=changed)
    return changed
