# File: src/stockpilot/models/product.py
"""Sellable product model."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockpilot.core.db import Base
from stockpilot.models.enums import ItemKind
from stockpilot.utils.datetime import now_utc

if TYPE_CHECKING:
    from stockpilot.models.category import Category


class Product(Base):
    """
    A menu item sold at the POS.

    ``quantity`` is the live on-hand count. It is a cached projection of the
    product ledger and is only written by checkout, delivery confirmation, catalog
    corrections and the ledger repair job.
    """

    __tablename__ = "products"
    __table_args__ = (CheckConstraint("quantity >= 0", name="product_quantity_non_negative"),)

    kind = ItemKind.PRODUCT

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    category: Mapped["Category | None"] = relationship(
        "Category",
        back_populates="products",
        lazy="selectin",
    )

    image_path: Mapped[str | None] = mapped_column(String(500), nullable=True)

    quantity: Mapped[int] = mapped_column(nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name}, quantity={self.quantity})>"
