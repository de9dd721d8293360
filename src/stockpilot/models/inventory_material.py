"""Raw inventory material model (ingredients, packaging)."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from stockpilot.core.db import Base
from stockpilot.models.enums import ItemKind
from stockpilot.utils.datetime import now_utc


class InventoryMaterial(Base):
    """Material consumed by the kitchen. Counted daily, never sold directly."""

    __tablename__ = "inventory_materials"
    __table_args__ = (CheckConstraint("quantity >= 0", name="material_quantity_non_negative"),)

    kind = ItemKind.MATERIAL

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

    image_path: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Live on-hand count, projected from the inventory ledger
    quantity: Mapped[int] = mapped_column(nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    def __repr__(self) -> str:
        return f"<InventoryMaterial(id={self.id}, name={self.name}, quantity={self.quantity})>"
