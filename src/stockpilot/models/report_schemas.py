"""Pydantic schemas for dashboard reports."""

from datetime import date as date_type
from decimal import Decimal

from pydantic import BaseModel, Field

from stockpilot.models.summary_schemas import DailySummaryRead


class LowStockItem(BaseModel):
    """Item at or below the low-stock threshold."""

    kind: str
    item_id: int
    name: str
    quantity: int


class TodayDashboard(BaseModel):
    """Admin landing page numbers."""

    date: date_type
    summary: DailySummaryRead
    total_products: int
    total_materials: int
    low_stock: list[LowStockItem] = Field(default_factory=list)


class SalesPoint(BaseModel):
    """Gross sales for one day."""

    date: date_type
    sales: Decimal
    order_count: int


class PaymentMethodShare(BaseModel):
    """Sales amount and share for one payment method."""

    payment_method: str
    amount: Decimal
    percentage: Decimal = Field(..., description="Share of gross sales, 0-100")


class TopProduct(BaseModel):
    """Product ranked by quantity sold."""

    product_id: int
    product_name: str
    quantity: int
    revenue: Decimal
