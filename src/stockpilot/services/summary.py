"""
Daily summary aggregator.

Summary rows are a cache over orders and expenses. Contributing mutations mark
their date dirty after committing; reads recompute dirty or missing rows first.
``recompute`` is always the authoritative path.
"""

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.core.db import insert_if_absent
from stockpilot.core.errors import ConcurrencyConflictError, ValidationError
from stockpilot.core.logging import get_logger
from stockpilot.models import Expense, Order, PaymentMethod, Summary
from stockpilot.models.summary import MONEY_FIELDS
from stockpilot.utils.datetime import now_utc

logger = get_logger(__name__)

ZERO = Decimal("0.00")

MAX_RANGE_DAYS = 366

PAYMENT_FIELDS = {
    PaymentMethod.CASH.value: "total_cash",
    PaymentMethod.GCASH.value: "total_gcash",
    PaymentMethod.GRABFOOD.value: "total_grabfood",
    PaymentMethod.FOODPANDA.value: "total_foodpanda",
}


def _blank_values(day: date) -> dict:
    values = {field: ZERO for field in MONEY_FIELDS}
    values.update(
        date=day,
        order_count=0,
        is_dirty=True,
        updated_at=now_utc(),
    )
    return values


async def find_summary(db: AsyncSession, day: date) -> Summary | None:
    result = await db.execute(select(Summary).where(Summary.date == day))
    return result.scalar_one_or_none()


async def _get_or_create(db: AsyncSession, day: date) -> Summary:
    summary = await find_summary(db, day)
    if summary is not None:
        return summary

    try:
        await insert_if_absent(db, Summary, [_blank_values(day)], ["date"])
    except ConcurrencyConflictError:
        logger.info("summary.create_race", date=day.isoformat())
    return await find_summary(db, day)


async def recompute(db: AsyncSession, day: date) -> Summary:
    """
    Rebuild the summary for ``day`` from orders and expenses, then commit.

    Overwrites every derived column and clears the dirty flag. ``total_deposited``
    is entered by staff and kept as is.
    """
    try:
        result = await db.execute(
            select(
                Order.payment_method,
                func.coalesce(func.sum(Order.total), 0),
            )
            .where(Order.order_date == day)
            .group_by(Order.payment_method)
        )
        by_method = {method: Decimal(total) for method, total in result.all()}

        order_count = await db.scalar(
            select(func.count(func.distinct(Order.order_id))).where(Order.order_date == day)
        )
        expenses = await db.scalar(
            select(func.coalesce(func.sum(Expense.amount), 0)).where(Expense.date == day)
        )

        gross = sum(by_method.values(), ZERO)
        expenses = Decimal(expenses or 0)

        summary = await _get_or_create(db, day)
        summary.total_gross_sales = gross
        summary.total_expenses = expenses
        summary.total_net_sales = gross - expenses
        for method, field in PAYMENT_FIELDS.items():
            setattr(summary, field, by_method.get(method, ZERO))
        summary.order_count = order_count or 0
        summary.is_dirty = False
        summary.recomputed_at = now_utc()

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(summary)
    logger.info(
        "summary.recomputed",
        date=day.isoformat(),
        gross=str(summary.total_gross_sales),
        expenses=str(summary.total_expenses),
        net=str(summary.total_net_sales),
        orders=summary.order_count,
    )
    return summary


async def mark_dirty(db: AsyncSession, day: date) -> bool:
    """
    Flag ``day`` for recomputation. Best effort: failures are logged, not raised,
    so the mutation that already committed is never reported as failed.
    """
    try:
        await insert_if_absent(db, Summary, [_blank_values(day)], ["date"])
        await db.execute(
            update(Summary)
            .where(Summary.date == day)
            .values(is_dirty=True, updated_at=now_utc())
        )
        await db.commit()
    except (SQLAlchemyError, ConcurrencyConflictError) as e:
        await db.rollback()
        logger.error(
            "summary.mark_dirty_failed",
            date=day.isoformat(),
            error=str(e),
        )
        return False
    return True


async def apply_expense_delta(db: AsyncSession, day: date, amount: Decimal) -> bool:
    """
    Adjust ``total_expenses``/``total_net_sales`` by ``amount`` (negative on delete)
    and mark the date dirty. Best effort, like ``mark_dirty``.
    """
    try:
        summary = await _get_or_create(db, day)
        summary.total_expenses = summary.total_expenses + amount
        summary.total_net_sales = summary.total_gross_sales - summary.total_expenses
        summary.is_dirty = True
        await db.commit()
    except (SQLAlchemyError, ConcurrencyConflictError) as e:
        await db.rollback()
        logger.error(
            "summary.mark_dirty_failed",
            date=day.isoformat(),
            error=str(e),
            expense_delta=str(amount),
        )
        return False
    return True


async def get_summary(db: AsyncSession, day: date) -> Summary:
    """Summary for one day, recomputed first when dirty or missing."""
    summary = await find_summary(db, day)
    if summary is None or summary.is_dirty:
        summary = await recompute(db, day)
    return summary


def validate_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationError(
            "start_date must be on or before end_date",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )
    if (end - start).days + 1 > MAX_RANGE_DAYS:
        raise ValidationError(
            f"Date range cannot exceed {MAX_RANGE_DAYS} days",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )


def default_range(today: date) -> tuple[date, date]:
    """The last seven days, ending today."""
    return today - timedelta(days=6), today


async def _stale_dates(db: AsyncSession, start: date, end: date) -> set[date]:
    """Dates in range with a dirty row, or with activity but no row at all."""
    dirty = await db.execute(
        select(Summary.date).where(Summary.date.between(start, end), Summary.is_dirty.is_(True))
    )
    stale = set(dirty.scalars())

    existing = await db.execute(select(Summary.date).where(Summary.date.between(start, end)))
    known = set(existing.scalars())

    orders = await db.execute(
        select(Order.order_date).where(Order.order_date.between(start, end)).distinct()
    )
    expenses = await db.execute(
        select(Expense.date).where(Expense.date.between(start, end)).distinct()
    )
    active = set(orders.scalars()) | set(expenses.scalars())

    return stale | (active - known)


async def get_summary_range(db: AsyncSession, start: date, end: date) -> dict:
    """
    Per-day rows for [start, end], newest first, plus range totals.

    Days with no activity and no row are left out rather than materialised.
    """
    validate_range(start, end)

    for day in sorted(await _stale_dates(db, start, end)):
        await recompute(db, day)

    result = await db.execute(
        select(Summary).where(Summary.date.between(start, end)).order_by(Summary.date.desc())
    )
    summaries = list(result.scalars())

    totals = {field: sum((getattr(s, field) for s in summaries), ZERO) for field in MONEY_FIELDS}
    totals["order_count"] = sum(s.order_count for s in summaries)

    return {
        "start_date": start,
        "end_date": end,
        **totals,
        "summaries": summaries,
    }


async def set_deposit(db: AsyncSession, day: date, amount: Decimal) -> Summary:
    """Record the cash deposited for ``day``."""
    summary = await get_summary(db, day)
    previous = summary.total_deposited
    summary.total_deposited = amount
    await db.commit()
    await db.refresh(summary)

    logger.info(
        "summary.deposit_recorded",
        date=day.isoformat(),
        previous=str(previous),
        amount=str(amount),
    )
    return summary
