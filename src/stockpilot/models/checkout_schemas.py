"""Pydantic schemas for POS checkout and order history."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockpilot.core.validators import normalize_payment_method, validate_currency


class LineItem(BaseModel):
    """One product line in a cart, with its money already computed by the terminal."""

    product_id: int
    quantity: int = Field(..., ge=1)
    subtotal: Decimal = Field(..., ge=0)
    tax: Decimal = Field(Decimal("0.00"), ge=0)
    discount: Decimal = Field(Decimal("0.00"), ge=0)
    total: Decimal = Field(..., ge=0)
    payment: Decimal = Field(Decimal("0.00"), ge=0)
    change: Decimal = Field(Decimal("0.00"), ge=0)
    payment_method: str = "cash"

    @field_validator("subtotal", "tax", "discount", "total", "payment", "change")
    @classmethod
    def validate_money(cls, v: Decimal) -> Decimal:
        return validate_currency(v)

    @field_validator("payment_method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        return normalize_payment_method(v)


class CheckoutRequest(BaseModel):
    """A cart submitted by a POS terminal."""

    items: list[LineItem] = Field(..., min_length=1)
    date: date_type | None = Field(None, description="Business date, defaults to today")


class OrderLineRead(BaseModel):
    """Persisted order line."""

    id: int
    order_id: int
    product_id: int
    quantity: int
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    payment: Decimal
    change: Decimal
    status: str
    payment_method: str
    order_date: date_type
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CheckoutResult(BaseModel):
    """Finalized order handed to the receipt printer."""

    order_id: int
    order_date: date_type
    lines: list[OrderLineRead]
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    payment: Decimal
    change: Decimal


class TransactionProduct(BaseModel):
    """Product line inside a grouped transaction."""

    product_id: int
    product_name: str
    product_price: Decimal
    product_image: str | None
    quantity: int
    amount: Decimal


class Transaction(BaseModel):
    """Order lines grouped by order_id."""

    order_id: int
    order_date: date_type
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    payment: Decimal
    change: Decimal
    payment_method: str
    created_at: datetime
    products: list[TransactionProduct]
