# File: src/stockpilot/models/catalog_schemas.py
"""Pydantic schemas for categories, products and inventory materials."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockpilot.core.validators import validate_currency, validate_name


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field("#000000", pattern=r"^#[0-9a-fA-F]{6}$")

    @field_validator("name")
    @classmethod
    def validate_category_name(cls, v: str) -> str:
        return validate_name(v, "Category name", max_length=100)


class CategoryRead(BaseModel):
    """Schema for reading a category."""

    id: int
    name: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """Schema for creating a product."""

    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0)
    category_id: int | None = None
    image_path: str | None = Field(None, max_length=500)
    quantity: int = Field(0, ge=0)

    @field_validator("name")
    @classmethod
    def validate_product_name(cls, v: str) -> str:
        return validate_name(v, "Product name")

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal) -> Decimal:
        return validate_currency(v)


class ProductUpdate(BaseModel):
    """Schema for updating a product (partial)."""

    name: str | None = Field(None, min_length=1, max_length=255)
    price: Decimal | None = Field(None, ge=0)
    category_id: int | None = None
    image_path: str | None = Field(None, max_length=500)
    quantity: int | None = Field(None, ge=0, description="Counted on-hand quantity")

    @field_validator("name")
    @classmethod
    def validate_product_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return validate_name(v, "Product name")

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)


class ProductRead(BaseModel):
    """Schema for reading a product."""

    id: int
    name: str
    price: Decimal
    category_id: int | None
    category_name: str | None = None
    image_path: str | None
    quantity: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MaterialCreate(BaseModel):
    """Schema for creating an inventory material."""

    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0)
    image_path: str | None = Field(None, max_length=500)
    quantity: int = Field(0, ge=0)

    @field_validator("name")
    @classmethod
    def validate_material_name(cls, v: str) -> str:
        return validate_name(v, "Material name")

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal) -> Decimal:
        return validate_currency(v)


class MaterialRead(BaseModel):
    """Schema for reading an inventory material."""

    id: int
    name: str
    price: Decimal
    image_path: str | None
    quantity: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UsageCountItem(BaseModel):
    """Counted usage for one material."""

    inventory_id: int
    used_qty: int = Field(..., ge=0)


class UsageCountUpdate(BaseModel):
    """Staff inventory count submission."""

    date: date_type | None = Field(None, description="Business date, defaults to today")
    items: list[UsageCountItem] = Field(..., min_length=1)


class UsageRow(BaseModel):
    """Material with its ledger row for one day."""

    inventory_id: int
    name: str
    price: Decimal
    image_path: str | None
    quantity: int
    beginning_qty: int
    used_qty: int
    ending_qty: int


class MaterialUpdate(BaseModel):
    """Schema for updating an inventory material (partial)."""

    name: str | None = Field(None, min_length=1, max_length=255)
    price: Decimal | None = Field(None, ge=0)
    image_path: str | None = Field(None, max_length=500)
    quantity: int | None = Field(None, ge=0, description="Counted on-hand quantity")

    @field_validator("name")
    @classmethod
    def validate_material_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return validate_name(v, "Material name")

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)
