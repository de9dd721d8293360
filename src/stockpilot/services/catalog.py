"""Category, product and inventory material maintenance."""

from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.core.errors import ConflictError, NotFoundError
from stockpilot.core.logging import get_logger
from stockpilot.models import (
    Category,
    Delivery,
    DeliveryStatus,
    InventoryMaterial,
    ItemKind,
    Order,
    Product,
)
from stockpilot.models.catalog_schemas import (
    CategoryCreate,
    MaterialCreate,
    MaterialUpdate,
    ProductCreate,
    ProductUpdate,
)
from stockpilot.services import ledger

logger = get_logger(__name__)


async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars())


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    existing = await db.scalar(select(Category.id).where(Category.name == data.name))
    if existing is not None:
        raise ConflictError(f"Category '{data.name}' already exists", details={"name": data.name})

    category = Category(name=data.name, color=data.color)
    db.add(category)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Category '{data.name}' already exists", details={"name": data.name})

    await db.refresh(category)
    logger.info("catalog.category_created", category_id=category.id, name=category.name)
    return category


async def _require_category(db: AsyncSession, category_id: int | None) -> None:
    if category_id is not None and await db.get(Category, category_id) is None:
        raise NotFoundError("Category", str(category_id))


async def list_products(db: AsyncSession, category_id: int | None = None) -> list[Product]:
    stmt = select(Product).order_by(Product.name, Product.id)
    if category_id is not None:
        stmt = stmt.where(Product.category_id == category_id)
    result = await db.execute(stmt)
    return list(result.scalars())


async def get_product(db: AsyncSession, product_id: int) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", str(product_id))
    return product


async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
    """Create a product. Its initial quantity seeds the ledger on first touch."""
    await _require_category(db, data.category_id)

    product = Product(**data.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    await db.refresh(product, ["category"])

    logger.info(
        "catalog.product_created",
        product_id=product.id,
        name=product.name,
        quantity=product.quantity,
    )
    return product


async def _correct_quantity(
    db: AsyncSession,
    kind: ItemKind,
    item: ledger.Item,
    new_quantity: int,
    day: date,
) -> None:
    """Stock correction: shift the day's ledger, then the live quantity."""
    if new_quantity == item.quantity:
        return
    row = await ledger.apply_correction(db, kind, item, day, new_quantity)
    item.quantity = row.ending_qty


async def update_product(
    db: AsyncSession,
    product_id: int,
    data: ProductUpdate,
    day: date,
) -> Product:
    """
    Update product fields. A quantity change is a stock correction recorded in
    the ledger for ``day``.
    """
    product = await get_product(db, product_id)
    changes = data.model_dump(exclude_unset=True)

    if "category_id" in changes:
        await _require_category(db, changes["category_id"])

    try:
        quantity = changes.pop("quantity", None)
        if quantity is not None:
            await _correct_quantity(db, ItemKind.PRODUCT, product, quantity, day)

        for field, value in changes.items():
            setattr(product, field, value)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(product)
    await db.refresh(product, ["category"])
    logger.info(
        "catalog.product_updated",
        product_id=product.id,
        fields=sorted(data.model_dump(exclude_unset=True).keys()),
    )
    return product


async def _ensure_no_ledger_history(db: AsyncSession, kind: ItemKind, item_id: int) -> None:
    """Ledger rows are permanent history; an item that has any cannot be deleted."""
    model = ledger.LEDGER_MODELS[kind]
    count = await db.scalar(
        select(func.count())
        .select_from(model)
        .where(getattr(model, ledger.LEDGER_ITEM_COLUMNS[kind]) == item_id)
    )
    if count:
        raise ConflictError(
            "Item has stock ledger history and cannot be deleted",
            details={"kind": kind.value, "item_id": item_id, "ledger_rows": count},
        )


async def _delete_pending_deliveries(db: AsyncSession, kind: ItemKind, item_id: int) -> None:
    await db.execute(
        delete(Delivery).where(
            Delivery.kind == kind.value,
            Delivery.item_id == item_id,
            Delivery.status == DeliveryStatus.PENDING.value,
        )
    )


async def delete_product(db: AsyncSession, product_id: int) -> None:
    """Delete a product that was never sold or counted, with its pending deliveries."""
    product = await get_product(db, product_id)

    order_count = await db.scalar(
        select(func.count()).select_from(Order).where(Order.product_id == product_id)
    )
    if order_count:
        raise ConflictError(
            "Product has order history and cannot be deleted",
            details={"product_id": product_id, "orders": order_count},
        )
    await _ensure_no_ledger_history(db, ItemKind.PRODUCT, product_id)

    await _delete_pending_deliveries(db, ItemKind.PRODUCT, product_id)
    await db.delete(product)
    await db.commit()

    logger.info("catalog.product_deleted", product_id=product_id)


async def list_materials(db: AsyncSession) -> list[InventoryMaterial]:
    result = await db.execute(
        select(InventoryMaterial).order_by(InventoryMaterial.name, InventoryMaterial.id)
    )
    return list(result.scalars())


async def get_material(db: AsyncSession, material_id: int) -> InventoryMaterial:
    material = await db.get(InventoryMaterial, material_id)
    if material is None:
        raise NotFoundError("InventoryMaterial", str(material_id))
    return material


async def create_material(db: AsyncSession, data: MaterialCreate) -> InventoryMaterial:
    material = InventoryMaterial(**data.model_dump())
    db.add(material)
    await db.commit()
    await db.refresh(material)

    logger.info(
        "catalog.material_created",
        material_id=material.id,
        name=material.name,
        quantity=material.quantity,
    )
    return material


async def update_material(
    db: AsyncSession,
    material_id: int,
    data: MaterialUpdate,
    day: date,
) -> InventoryMaterial:
    material = await get_material(db, material_id)
    changes = data.model_dump(exclude_unset=True)

    try:
        quantity = changes.pop("quantity", None)
        if quantity is not None:
            await _correct_quantity(db, ItemKind.MATERIAL, material, quantity, day)

        for field, value in changes.items():
            setattr(material, field, value)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(material)
    logger.info(
        "catalog.material_updated",
        material_id=material.id,
        fields=sorted(data.model_dump(exclude_unset=True).keys()),
    )
    return material


async def delete_material(db: AsyncSession, material_id: int) -> None:
    material = await get_material(db, material_id)
    await _ensure_no_ledger_history(db, ItemKind.MATERIAL, material_id)

    await _delete_pending_deliveries(db, ItemKind.MATERIAL, material_id)
    await db.delete(material)
    await db.commit()

    logger.info("catalog.material_deleted", material_id=material_id)
