# File: src/stockpilot/models/delivery.py
"""Per-day delivery / stock-count records."""

import uuid
from datetime import date as date_type
from datetime import datetime
from sqlalchemy import CheckConstraint, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from stockpilot.core.db import Base
from stockpilot.models.enums import DeliveryStatus, ItemKind
from stockpilot.utils.datetime import now_utc

class Delivery(Base):
    """
    One record per (date, kind, item).

    ``kind`` + ``item_id`` form a tagged reference: ``product`` rows point at
    products.id, ``material`` rows at inventory_materials.id.

    ``delivered_qty`` is the movement applied on confirmation. For products it is
    stock received (ending = beginning + delivered); for materials it is stock
    drawn by the kitchen (ending = beginning - delivered).
    """

    __tablename__ = "deliveries"
    __table_args__ = (
        UniqueConstraint("date", "kind", "item_id", name="uq_delivery_date_kind_item"),
        CheckConstraint("beginning_qty >= 0", name="delivery_beginning_non_negative"),
        CheckConstraint("delivered_qty >= 0", name="delivery_qty_non_negative"),
        CheckConstraint("ending_qty >= 0", name="delivery_ending_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    date: Mapped[date_type] = mapped_column(nullable=False, index=True)

    kind: Mapped[str] = mapped_column(String(20), nullable=False)

    item_id: Mapped[int] = mapped_column(nullable=False, index=True)

    beginning_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    delivered_qty: Mapped[int] = mapped_column(nullable=False, default=0)
    ending_qty: Mapped[int] = mapped_column(nullable=False, default=0)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DeliveryStatus.PENDING.value,
        index=True,
    )

    # Staff member who owns the day's count
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    confirmed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    confirmed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    @property
    def is_replenishment(self) -> bool:
        return self.kind == ItemKind.PRODUCT

    def expected_ending(self) -> int:
        """Ending implied by beginning and movement for this record's kind."""
        if self.is_replenishment:
            return self.beginning_qty + self.delivered_qty
        return self.beginning_qty - self.delivered_qty

    def __repr__(self) -> str:
        return (
            f"<Delivery(id={self.id}, date={self.date}, kind={self.kind}, "
            f"item_id={self.item_id}, status={self.status})>"
        )
