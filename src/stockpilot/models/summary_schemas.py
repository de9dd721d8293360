"""Pydantic schemas for daily summaries."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockpilot.core.validators import validate_currency


class DailySummaryRead(BaseModel):
    """One day's derived totals."""

    date: date_type
    total_gross_sales: Decimal
    total_expenses: Decimal
    total_net_sales: Decimal
    total_cash: Decimal
    total_gcash: Decimal
    total_grabfood: Decimal
    total_foodpanda: Decimal
    total_deposited: Decimal
    order_count: int
    recomputed_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class SummaryRange(BaseModel):
    """Totals across a date range plus the per-day rows (newest first)."""

    start_date: date_type
    end_date: date_type
    total_gross_sales: Decimal = Decimal("0.00")
    total_expenses: Decimal = Decimal("0.00")
    total_net_sales: Decimal = Decimal("0.00")
    total_cash: Decimal = Decimal("0.00")
    total_gcash: Decimal = Decimal("0.00")
    total_grabfood: Decimal = Decimal("0.00")
    total_foodpanda: Decimal = Decimal("0.00")
    total_deposited: Decimal = Decimal("0.00")
    order_count: int = 0
    summaries: list[DailySummaryRead] = Field(default_factory=list)


class DepositUpdate(BaseModel):
    """Cash deposited to the bank for a day."""

    amount: Decimal = Field(..., ge=0)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return validate_currency(v)
