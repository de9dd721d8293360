"""Expense endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.api.auth import get_current_user
from stockpilot.core.db import get_db
from stockpilot.core.errors import ForbiddenError, NotFoundError
from stockpilot.core.logging import get_logger
from stockpilot.models import Expense, User
from stockpilot.models.expense_schemas import ExpenseCreate, ExpenseRead
from stockpilot.services import summary as summary_service
from stockpilot.utils.datetime import today_local

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/expenses", tags=["expenses"])


@router.get("", response_model=list[ExpenseRead])
async def list_expenses(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admins see every expense, staff only their own. Newest first."""
    stmt = select(Expense)

    if not current_user.is_admin:
        stmt = stmt.where(Expense.user_id == current_user.id)
    if start_date:
        stmt = stmt.where(Expense.date >= start_date)
    if end_date:
        stmt = stmt.where(Expense.date <= end_date)

    result = await db.execute(stmt.order_by(Expense.date.desc(), Expense.id.desc()))
    return result.scalars().all()


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_in: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record an expense and update the day's summary."""
    expense = Expense(
        user_id=current_user.id,
        title=expense_in.title,
        description=expense_in.description,
        amount=expense_in.amount,
        date=expense_in.date or today_local(),
    )
    db.add(expense)
    await db.commit()
    await db.refresh(expense)

    logger.info(
        "expense.created",
        expense_id=expense.id,
        date=expense.date.isoformat(),
        amount=str(expense.amount),
        user_id=str(current_user.id),
    )

    await summary_service.apply_expense_delta(db, expense.date, expense.amount)
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete an expense. Staff may only delete their own."""
    expense = await db.get(Expense, expense_id)
    if expense is None:
        raise NotFoundError("Expense", str(expense_id))

    if not current_user.is_admin and expense.user_id != current_user.id:
        raise ForbiddenError("You can only delete your own expenses")

    day, amount = expense.date, expense.amount
    await db.delete(expense)
    await db.commit()

    logger.info(
        "expense.deleted",
        expense_id=expense_id,
        date=day.isoformat(),
        amount=str(amount),
        user_id=str(current_user.id),
    )

    await summary_service.apply_expense_delta(db, day, -amount)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
