# File: src/stockpilot/models/product_sold.py
"""Daily product ledger rows."""

from datetime import date as date_type
from datetime import datetime
from sqlalchemy import CheckConstraint, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stockpilot.core.db import Base
from stockpilot.utils.datetime import now_utc

class ProductSold(Base):
    """
    One row per product per business day.

    ending_qty = beginning_qty + delivered_qty - sold_qty, and never below zero.
    Rows are created on first touch and kept as history.
    """

    __tablename__ = "product_sold"
    __table_args__ = (
        UniqueConstraint("product_id", "date", name="uq_product_sold_product_date"),
        CheckConstraint("ending_qty >= 0", name="product_sold_ending_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    date: Mapped[date_type] = mapped_column(nullable=False, index=True)

    beginning_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    sold_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    delivered_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    ending_qty: Mapped[int] = mapped_column(nullable=False, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    @property
    def item_id(self) -> int:
        return self.product_id

    def recompute_ending(self) -> int:
        self.ending_qty = self.beginning_qty + self.delivered_qty - self.sold_qty
        return self.ending_qty

    def __repr__(self) -> str:
        return (
            f"<ProductSold(product_id={self.product_id}, date={self.date}, "
            f"beg={self.beginning_qty}, sold={self.sold_qty}, "
            f"delivered={self.delivered_qty}, end={self.ending_qty})>"
        )
