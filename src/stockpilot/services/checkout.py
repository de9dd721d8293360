"""Sale consumption: turn a POS cart into order lines and stock decrements atomically."""

from collections import OrderedDict
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.core.errors import InsufficientStockError, NotFoundError
from stockpilot.core.logging import get_logger
from stockpilot.models import ItemKind, Order, OrderStatus, Product, User
from stockpilot.models.checkout_schemas import CheckoutResult, LineItem, OrderLineRead
from stockpilot.services import ledger

logger = get_logger(__name__)

MONEY_TOTALS = ("subtotal", "tax", "discount", "total", "payment", "change")


def aggregate_quantities(items: list[LineItem]) -> "OrderedDict[int, int]":
    """Total requested quantity per product, in ascending product id order."""
    totals: dict[int, int] = {}
    for line in items:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    return OrderedDict(sorted(totals.items()))


async def next_order_id(db: AsyncSession) -> int:
    current = await db.scalar(select(func.max(Order.order_id)))
    return (current or 0) + 1


async def _lock_products(db: AsyncSession, product_ids: list[int]) -> dict[int, Product]:
    # FOR UPDATE is dropped by dialects without row locks (SQLite)
    result = await db.execute(
        select(Product)
        .where(Product.id.in_(product_ids))
        .order_by(Product.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {product.id: product for product in result.scalars()}


async def _decrement_stock(db: AsyncSession, product: Product, quantity: int) -> None:
    """Conditional decrement; fails instead of letting quantity go negative."""
    result = await db.execute(
        update(Product)
        .where(Product.id == product.id, Product.quantity >= quantity)
        .values(quantity=Product.quantity - quantity)
    )
    if result.rowcount != 1:
        available = await db.scalar(select(Product.quantity).where(Product.id == product.id))
        raise InsufficientStockError(
            item_name=product.name,
            item_id=product.id,
            available=available or 0,
            requested=quantity,
        )


async def checkout(
    db: AsyncSession,
    items: list[LineItem],
    day: date,
    user: User | None = None,
) -> CheckoutResult:
    """
    Place one cart as a single transaction.

    Every product is checked for stock before anything is written; any failure
    rolls the whole cart back. On success all lines share one ``order_id``, each
    product's live quantity drops by the ordered amount and the day's product
    ledger row records the sale.
    """
    requested = aggregate_quantities(items)
    product_ids = list(requested.keys())

    try:
        products = await _lock_products(db, product_ids)

        missing = [pid for pid in product_ids if pid not in products]
        if missing:
            raise NotFoundError("Product", str(missing[0]))

        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.quantity < quantity:
                raise InsufficientStockError(
                    item_name=product.name,
                    item_id=product.id,
                    available=product.quantity,
                    requested=quantity,
                )

        # Seed ledger rows from pre-sale stock before the live quantity moves
        for product_id in product_ids:
            await ledger.get_or_init(db, ItemKind.PRODUCT, product_id, day)

        for product_id, quantity in requested.items():
            await _decrement_stock(db, products[product_id], quantity)

        order_id = await next_order_id(db)
        orders = []
        for line in items:
            order = Order(
                order_id=order_id,
                product_id=line.product_id,
                quantity=line.quantity,
                subtotal=line.subtotal,
                tax=line.tax,
                discount=line.discount,
                total=line.total,
                payment=line.payment,
                change=line.change,
                status=OrderStatus.COMPLETED.value,
                payment_method=line.payment_method,
                order_date=day,
                user_id=user.id if user else None,
            )
            db.add(order)
            orders.append(order)

        for product_id, quantity in requested.items():
            await ledger.apply_usage(db, ItemKind.PRODUCT, product_id, day, quantity)

        await db.flush()
        await db.commit()
    except InsufficientStockError as e:
        await db.rollback()
        logger.warning(
            "checkout.insufficient_stock",
            product_id=e.item_id,
            available=e.available,
            requested=e.requested,
        )
        raise
    except Exception:
        await db.rollback()
        raise

    for order in orders:
        await db.refresh(order)

    totals = {
        field: sum((getattr(line, field) for line in items), Decimal("0.00"))
        for field in MONEY_TOTALS
    }

    logger.info(
        "checkout.completed",
        order_id=order_id,
        order_date=day.isoformat(),
        lines=len(orders),
        total=str(totals["total"]),
        user_id=str(user.id) if user else None,
    )

    return CheckoutResult(
        order_id=order_id,
        order_date=day,
        lines=[OrderLineRead.model_validate(order) for order in orders],
        **totals,
    )
