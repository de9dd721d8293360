# File: src/stockpilot/models/summary.py
"""Daily financial summary model."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Numeric
from sqlalchemy.orm import Mapped, mapped_column

from stockpilot.core.db import Base
from stockpilot.utils.datetime import now_utc

MONEY_FIELDS = (
    "total_gross_sales",
    "total_expenses",
    "total_net_sales",
    "total_cash",
    "total_gcash",
    "total_grabfood",
    "total_foodpanda",
    "total_deposited",
)


def _money_column() -> Mapped[Decimal]:
    return mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))


class Summary(Base):
    """
    Derived per-day totals. Never the source of truth: every column except
    ``total_deposited`` can be rebuilt from orders and expenses.

    ``is_dirty`` marks a row whose inputs changed since the last recompute.
    """

    __tablename__ = "summaries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    date: Mapped[date_type] = mapped_column(nullable=False, unique=True, index=True)

    total_gross_sales: Mapped[Decimal] = _money_column()
    total_expenses: Mapped[Decimal] = _money_column()
    total_net_sales: Mapped[Decimal] = _money_column()
    total_cash: Mapped[Decimal] = _money_column()
    total_gcash: Mapped[Decimal] = _money_column()
    total_grabfood: Mapped[Decimal] = _money_column()
    total_foodpanda: Mapped[Decimal] = _money_column()

    # Entered by staff; not derivable
    total_deposited: Mapped[Decimal] = _money_column()

    order_count: Mapped[int] = mapped_column(nullable=False, default=0)

    is_dirty: Mapped[bool] = mapped_column(nullable=False, default=True, index=True)

    recomputed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    def __repr__(self) -> str:
        return (
            f"<Summary(date={self.date}, gross={self.total_gross_sales}, "
            f"expenses={self.total_expenses}, net={self.total_net_sales}, dirty={self.is_dirty})>"
        )
