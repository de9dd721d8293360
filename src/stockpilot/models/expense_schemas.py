"""Pydantic schemas for Expense API."""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockpilot.core.validators import (
    sanitize_html,
    validate_currency,
    validate_name,
    validate_no_future_date,
)


class ExpenseCreate(BaseModel):
    """Schema for recording an expense."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    amount: Decimal = Field(..., ge=0)
    date: date_type | None = Field(None, description="Business date, defaults to today")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return validate_name(v, "Title")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return sanitize_html(v)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return validate_currency(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: date_type | None) -> date_type | None:
        if v is None:
            return None
        return validate_no_future_date(v, "Expense date")


class ExpenseRead(BaseModel):
    """Schema for reading an expense."""

    id: int
    user_id: uuid.UUID | None
    title: str
    description: str | None
    amount: Decimal
    date: date_type
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
