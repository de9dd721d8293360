# File: src/stockpilot/models/expense.py
"""Expense model."""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from stockpilot.core.db import Base
from stockpilot.utils.datetime import now_utc, today_local

class Expense(Base):
    """Cash paid out of the register on a business day."""

    __tablename__ = "expenses"
    __table_args__ = (CheckConstraint("amount >= 0", name="expense_amount_non_negative"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    date: Mapped[date_type] = mapped_column(nullable=False, default=today_local, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    @validates("amount")
    def validate_amount(self, key: str, value: Decimal) -> Decimal:
        """Validate that amount is non-negative."""
        if value < 0:
            raise ValueError("Expense amount cannot be negative")
        return value

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, date={self.date}, amount={self.amount}, title={self.title[:20]})>"
