# File: src/stockpilot/models/delivery_schemas.py
"""Pydantic schemas for the delivery / stock-count screen."""

from datetime import date as date_type
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from stockpilot.models.enums import ItemKind


class DeliveryRow(BaseModel):
    """One item on the delivery screen for a day."""

    id: str = Field(..., description="Stable row key: p_<id> for products, i_<id> for materials")
    delivery_id: int | None
    kind: ItemKind
    item_id: int
    name: str
    image: str | None = None
    category_name: str | None = None
    beginning_qty: int
    used_qty: int = Field(..., description="Movement: received for products, drawn for materials")
    ending_qty: int
    status: str | None = None
    confirmed_at: datetime | None = None


class DeliveryData(BaseModel):
    """Full delivery screen payload for a date."""

    date: date_type
    products: list[DeliveryRow]
    inventory: list[DeliveryRow]


class DeliveryEdit(BaseModel):
    """
    Staff edit for one item. Any two of beginning/used/ending determine the third;
    when used_qty is omitted it is derived from beginning and ending.
    """

    kind: ItemKind
    item_id: int
    beginning_qty: int | None = Field(None, ge=0)
    used_qty: int | None = Field(None, ge=0)
    ending_qty: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def require_two_quantities(self) -> "DeliveryEdit":
        if self.used_qty is None and self.ending_qty is None:
            raise ValueError("Either used_qty or ending_qty is required")
        return self


class DeliveryUpdate(BaseModel):
    """Batch of staff edits for one day."""

    date: date_type | None = None
    items: list[DeliveryEdit] = Field(..., min_length=1)


class DeliveryUpdateResult(BaseModel):
    """Rows as stored after an edit batch."""

    updated: list[DeliveryRow]


class DeliveryConfirmResult(BaseModel):
    """Outcome of a confirmation request."""

    success: bool
    already_confirmed: bool
    delivery: DeliveryRow
