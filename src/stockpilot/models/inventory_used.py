# File: src/stockpilot/models/inventory_used.py
"""Daily inventory material ledger rows."""

from datetime import date as date_type
from datetime import datetime
from sqlalchemy import CheckConstraint, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stockpilot.core.db import Base
from stockpilot.utils.datetime import now_utc

class InventoryUsed(Base):
    """
    One row per material per business day.

    ending_qty = beginning_qty - used_qty, and never below zero.
    """

    __tablename__ = "inventory_used"
    __table_args__ = (
        UniqueConstraint("inventory_id", "date", name="uq_inventory_used_inventory_date"),
        CheckConstraint("ending_qty >= 0", name="inventory_used_ending_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    inventory_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_materials.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    date: Mapped[date_type] = mapped_column(nullable=False, index=True)

    beginning_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    used_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    ending_qty: Mapped[int] = mapped_column(nullable=False, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    @property
    def item_id(self) -> int:
        return self.inventory_id

    def recompute_ending(self) -> int:
        self.ending_qty = self.beginning_qty - self.used_qty
        return self.ending_qty

    def __repr__(self) -> str:
        return (
            f"<InventoryUsed(inventory_id={self.inventory_id}, date={self.date}, "
            f"beg={self.beginning_qty}, used={self.used_qty}, end={self.ending_qty})>"
        )
