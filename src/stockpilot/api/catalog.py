"""Category, product and inventory material endpoints. Admins write, staff read."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.api.auth import get_current_user
from stockpilot.api.auth_helpers import require_admin
from stockpilot.core.db import get_db
from stockpilot.models import User
from stockpilot.models.catalog_schemas import (
    CategoryCreate,
    CategoryRead,
    MaterialCreate,
    MaterialRead,
    MaterialUpdate,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from stockpilot.services import catalog
from stockpilot.utils.datetime import today_local

router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.get("/categories", response_model=list[CategoryRead])
async def list_categories(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.list_categories(db)


@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_in: CategoryCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a category. Names are unique."""
    return await catalog.create_category(db, category_in)


@router.get("/products", response_model=list[ProductRead])
async def list_products(
    category_id: int | None = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.list_products(db, category_id)


@router.post("/products", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_in: ProductCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.create_product(db, product_in)


@router.put("/products/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: int,
    product_in: ProductUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update a product. Changing ``quantity`` records a stock correction for today."""
    return await catalog.update_product(db, product_id, product_in, today_local())


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a product. Products with orders are kept (409)."""
    await catalog.delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/inventory", response_model=list[MaterialRead])
async def list_materials(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.list_materials(db)


@router.post("/inventory", response_model=MaterialRead, status_code=status.HTTP_201_CREATED)
async def create_material(
    material_in: MaterialCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.create_material(db, material_in)


@router.put("/inventory/{material_id}", response_model=MaterialRead)
async def update_material(
    material_id: int,
    material_in: MaterialUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update a material. Changing ``quantity`` records a stock correction for today."""
    return await catalog.update_material(db, material_id, material_in, today_local())


@router.delete("/inventory/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_material(
    material_id: int,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await catalog.delete_material(db, material_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
