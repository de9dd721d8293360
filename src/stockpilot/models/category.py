"""Product category model."""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockpilot.core.db import Base

if TYPE_CHECKING:
    from stockpilot.models.product import Product


class Category(Base):
    """Menu category (chicken, drinks, sides, ...) with a display color."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    color: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="#000000",
    )

    products: Mapped[list["Product"]] = relationship(
        "Product",
        back_populates="category",
    )

    def __repr__(self) -> str:
        return self.name
