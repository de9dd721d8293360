"""
Delivery reconciler: the staff stock-count screen for one business day.

Each (date, kind, item) has at most one Delivery record. Records are seeded on
the first read of a day, edited any number of times while pending, and written
back into the quantity ledger exactly once on confirmation.
"""

from datetime import date

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.core.db import insert_if_absent
from stockpilot.core.errors import (
    ConcurrencyConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from stockpilot.core.logging import get_logger
from stockpilot.models import (
    Delivery,
    DeliveryStatus,
    InventoryMaterial,
    ItemKind,
    Product,
    User,
)
from stockpilot.models.delivery_schemas import DeliveryData, DeliveryEdit, DeliveryRow
from stockpilot.services import ledger
from stockpilot.utils.datetime import now_utc

logger = get_logger(__name__)

ROW_PREFIXES = {
    ItemKind.PRODUCT: "p",
    ItemKind.MATERIAL: "i",
}

CONFLICT_COLUMNS = ["date", "kind", "item_id"]


def row_key(kind: ItemKind, item_id: int) -> str:
    return f"{ROW_PREFIXES[kind]}_{item_id}"


def build_row(kind: ItemKind, item: ledger.Item, record: Delivery | None) -> DeliveryRow:
    """Screen row for an item, from its record or, without one, its live stock."""
    category_name = None
    if kind == ItemKind.PRODUCT and item.category is not None:
        category_name = item.category.name

    if record is None:
        beginning, movement, ending = item.quantity, 0, item.quantity
    else:
        beginning, movement, ending = (
            record.beginning_qty,
            record.delivered_qty,
            record.ending_qty,
        )

    return DeliveryRow(
        id=row_key(kind, item.id),
        delivery_id=record.id if record else None,
        kind=kind,
        item_id=item.id,
        name=item.name,
        image=item.image_path,
        category_name=category_name,
        beginning_qty=beginning,
        used_qty=movement,
        ending_qty=ending,
        status=record.status if record else None,
        confirmed_at=record.confirmed_at if record else None,
    )


def resolve_quantities(
    kind: ItemKind,
    beginning: int,
    movement: int | None,
    ending: int | None,
) -> tuple[int, int]:
    """
    Fill in the missing one of movement/ending and check the pair is consistent.

    Products are replenished (ending = beginning + movement); materials are drawn
    down (ending = beginning - movement). Returns (movement, ending).
    """
    sign = 1 if kind == ItemKind.PRODUCT else -1

    if movement is None:
        movement = (ending - beginning) * sign
        if movement < 0:
            raise ValidationError(
                "Ending quantity is inconsistent with the beginning quantity",
                details={"kind": kind.value, "beginning_qty": beginning, "ending_qty": ending},
            )
    expected = beginning + sign * movement

    if expected < 0:
        raise ValidationError(
            "Used quantity exceeds the beginning quantity",
            details={"beginning_qty": beginning, "used_qty": movement},
        )
    if ending is not None and ending != expected:
        raise ValidationError(
            "Beginning, used and ending quantities do not add up",
            details={
                "kind": kind.value,
                "beginning_qty": beginning,
                "used_qty": movement,
                "ending_qty": ending,
                "expected_ending_qty": expected,
            },
        )
    return movement, expected


async def has_records(db: AsyncSession, day: date) -> bool:
    count = await db.scalar(select(func.count()).select_from(Delivery).where(Delivery.date == day))
    return bool(count)


async def find_record(db: AsyncSession, day: date, kind: ItemKind, item_id: int) -> Delivery | None:
    result = await db.execute(
        select(Delivery).where(
            Delivery.date == day,
            Delivery.kind == kind.value,
            Delivery.item_id == item_id,
        )
    )
    return result.scalar_one_or_none()


def _seed_values(kind: ItemKind, item_id: int, day: date, beginning: int, user: User | None) -> dict:
    now = now_utc()
    return {
        "date": day,
        "kind": kind.value,
        "item_id": item_id,
        "beginning_qty": beginning,
        "delivered_qty": 0,
        "ending_qty": beginning,
        "status": DeliveryStatus.PENDING.value,
        "user_id": user.id if user else None,
        "created_at": now,
        "updated_at": now,
    }


async def initialize_for_date(db: AsyncSession, day: date, user: User | None = None) -> int:
    """
    Seed one pending record per stocked item for ``day``.

    Beginning quantities carry forward from the item's most recent delivery
    record or ledger ending before ``day``; items with no history start from
    their live quantity. Items whose beginning is zero are skipped. The whole
    seed commits or rolls back as one transaction; a failure is logged and
    leaves the day unseeded so the next read retries.

    Returns the number of records created.
    """
    try:
        existing = await db.execute(
            select(Delivery.kind, Delivery.item_id).where(Delivery.date == day)
        )
        seen = {(kind, item_id) for kind, item_id in existing.all()}

        rows = []
        for kind, model in ledger.ITEM_MODELS.items():
            endings = await ledger.previous_endings(db, kind, day, prefer_deliveries=True)
            items = await db.execute(select(model.id, model.quantity).order_by(model.id))
            for item_id, quantity in items.all():
                if (kind.value, item_id) in seen:
                    continue
                beginning = endings.get(item_id, quantity)
                if beginning <= 0:
                    continue
                rows.append(_seed_values(kind, item_id, day, beginning, user))

        try:
            created = await insert_if_absent(db, Delivery, rows, CONFLICT_COLUMNS)
        except ConcurrencyConflictError:
            # Another terminal seeded the same day first
            await db.rollback()
            logger.info("delivery.seed_race", date=day.isoformat())
            return 0

        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "delivery.seed_failed",
            date=day.isoformat(),
            error=str(e),
            exc_info=True,
        )
        return 0

    logger.info("delivery.seeded", date=day.isoformat(), created=created, candidates=len(rows))
    return created


async def get_delivery_data(db: AsyncSession, day: date, user: User | None = None) -> DeliveryData:
    """Delivery screen for ``day``, seeding it first when the day has no records."""
    if not await has_records(db, day):
        await initialize_for_date(db, day, user)

    result = await db.execute(select(Delivery).where(Delivery.date == day))
    records = {(record.kind, record.item_id): record for record in result.scalars()}

    products = await db.execute(select(Product).order_by(Product.name, Product.id))
    materials = await db.execute(
        select(InventoryMaterial).order_by(InventoryMaterial.name, InventoryMaterial.id)
    )

    return DeliveryData(
        date=day,
        products=[
            build_row(ItemKind.PRODUCT, item, records.get((ItemKind.PRODUCT.value, item.id)))
            for item in products.scalars()
        ],
        inventory=[
            build_row(ItemKind.MATERIAL, item, records.get((ItemKind.MATERIAL.value, item.id)))
            for item in materials.scalars()
        ],
    )


async def _find_or_create(
    db: AsyncSession,
    day: date,
    kind: ItemKind,
    item: ledger.Item,
    user: User,
) -> Delivery:
    record = await find_record(db, day, kind, item.id)
    if record is not None:
        return record

    endings = await ledger.previous_endings(db, kind, day, prefer_deliveries=True)
    beginning = endings.get(item.id, item.quantity)
    try:
        await insert_if_absent(
            db,
            Delivery,
            [_seed_values(kind, item.id, day, beginning, user)],
            CONFLICT_COLUMNS,
        )
    except ConcurrencyConflictError:
        logger.info("delivery.create_race", kind=kind.value, item_id=item.id)

    record = await find_record(db, day, kind, item.id)
    if record is None:
        raise ConcurrencyConflictError(
            "Delivery record vanished after insert",
            details={"kind": kind.value, "item_id": item.id, "date": day.isoformat()},
        )
    return record


async def update_deliveries(
    db: AsyncSession,
    day: date,
    edits: list[DeliveryEdit],
    user: User,
) -> list[DeliveryRow]:
    """
    Overwrite the counts of pending records for ``day`` (last write wins).

    Items without a record yet get one. A confirmed record rejects the whole
    batch with InvalidStateError.
    """
    touched: list[tuple[ItemKind, ledger.Item, Delivery]] = []
    try:
        for edit in edits:
            item = await ledger.get_item(db, edit.kind, edit.item_id)
            record = await _find_or_create(db, day, edit.kind, item, user)

            beginning = (
                edit.beginning_qty if edit.beginning_qty is not None else record.beginning_qty
            )
            movement, ending = resolve_quantities(
                edit.kind, beginning, edit.used_qty, edit.ending_qty
            )

            result = await db.execute(
                update(Delivery)
                .where(
                    Delivery.id == record.id,
                    Delivery.status == DeliveryStatus.PENDING.value,
                )
                .values(
                    beginning_qty=beginning,
                    delivered_qty=movement,
                    ending_qty=ending,
                    user_id=user.id,
                    updated_at=now_utc(),
                )
            )
            if result.rowcount != 1:
                raise InvalidStateError(
                    "Delivery is already confirmed and cannot be edited",
                    details={
                        "delivery_id": record.id,
                        "kind": edit.kind.value,
                        "item_id": edit.item_id,
                    },
                )
            touched.append((edit.kind, item, record))

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "delivery.updated",
        date=day.isoformat(),
        user_id=str(user.id),
        items=len(touched),
    )

    rows = {}
    for kind, item, record in touched:
        await db.refresh(record)
        rows[row_key(kind, item.id)] = build_row(kind, item, record)
    return list(rows.values())


async def confirm_delivery(
    db: AsyncSession,
    delivery_id: int,
    user: User,
) -> tuple[DeliveryRow, bool]:
    """
    Confirm a record and write its movement into the ledger.

    The pending -> confirmed transition is a conditional UPDATE, so when two
    requests race only one of them applies the movement. The item and its ledger
    row are then re-read under row locks, so a checkout committed in between is
    never overwritten. Confirming an already confirmed record is a successful
    no-op.

    Returns (row, already_confirmed).
    """
    record = await db.get(Delivery, delivery_id)
    if record is None:
        raise NotFoundError("Delivery", str(delivery_id))

    kind = ItemKind(record.kind)
    item = await ledger.get_item(db, kind, record.item_id)

    try:
        result = await db.execute(
            update(Delivery)
            .where(
                Delivery.id == delivery_id,
                Delivery.status == DeliveryStatus.PENDING.value,
            )
            .values(
                status=DeliveryStatus.CONFIRMED.value,
                confirmed_at=now_utc(),
                confirmed_by=user.id,
                updated_at=now_utc(),
            )
        )

        if result.rowcount != 1:
            await db.refresh(record)
            logger.info(
                "delivery.confirm_noop",
                delivery_id=delivery_id,
                user_id=str(user.id),
            )
            return build_row(kind, item, record), True

        # Movement as last saved by an edit
        await db.refresh(record)
        # Same lock order as checkout: item, then its ledger row
        item = await ledger.lock_item(db, kind, record.item_id)
        row = await ledger.apply_delivery(
            db, kind, record.item_id, record.date, record.delivered_qty
        )
        await ledger.sync_live_quantity(db, kind, item, row)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(record)
    logger.info(
        "delivery.confirmed",
        delivery_id=delivery_id,
        kind=kind.value,
        item_id=record.item_id,
        date=record.date.isoformat(),
        delivered_qty=record.delivered_qty,
        ledger_ending=row.ending_qty,
        user_id=str(user.id),
    )
    return build_row(kind, item, record), False
