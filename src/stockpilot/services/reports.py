"""Dashboard and order-history aggregations."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.models import InventoryMaterial, ItemKind, Order, Product
from stockpilot.models.checkout_schemas import Transaction, TransactionProduct
from stockpilot.models.report_schemas import (
    LowStockItem,
    PaymentMethodShare,
    SalesPoint,
    TodayDashboard,
    TopProduct,
)
from stockpilot.models.summary_schemas import DailySummaryRead
from stockpilot.services import summary as summary_service
from stockpilot.utils.datetime import date_range

LOW_STOCK_THRESHOLD = 10

ZERO = Decimal("0.00")


async def low_stock_items(db: AsyncSession, threshold: int = LOW_STOCK_THRESHOLD) -> list[LowStockItem]:
    items = []
    for kind, model in ((ItemKind.PRODUCT, Product), (ItemKind.MATERIAL, InventoryMaterial)):
        result = await db.execute(
            select(model.id, model.name, model.quantity)
            .where(model.quantity <= threshold)
            .order_by(model.quantity, model.name)
        )
        items.extend(
            LowStockItem(kind=kind.value, item_id=item_id, name=name, quantity=quantity)
            for item_id, name, quantity in result.all()
        )
    return items


async def today_dashboard(db: AsyncSession, day: date) -> TodayDashboard:
    summary = await summary_service.get_summary(db, day)
    total_products = await db.scalar(select(func.count()).select_from(Product))
    total_materials = await db.scalar(select(func.count()).select_from(InventoryMaterial))

    return TodayDashboard(
        date=day,
        summary=DailySummaryRead.model_validate(summary),
        total_products=total_products or 0,
        total_materials=total_materials or 0,
        low_stock=await low_stock_items(db),
    )


async def sales_by_day(db: AsyncSession, start: date, end: date) -> list[SalesPoint]:
    """Gross sales per day, with zero points for days without orders."""
    summary_service.validate_range(start, end)

    result = await db.execute(
        select(
            Order.order_date,
            func.coalesce(func.sum(Order.total), 0),
            func.count(func.distinct(Order.order_id)),
        )
        .where(Order.order_date.between(start, end))
        .group_by(Order.order_date)
    )
    by_day = {day: (Decimal(total), count) for day, total, count in result.all()}

    return [
        SalesPoint(
            date=day,
            sales=by_day.get(day, (ZERO, 0))[0],
            order_count=by_day.get(day, (ZERO, 0))[1],
        )
        for day in date_range(start, end)
    ]


async def payment_breakdown(db: AsyncSession, start: date, end: date) -> list[PaymentMethodShare]:
    summary_service.validate_range(start, end)

    result = await db.execute(
        select(Order.payment_method, func.coalesce(func.sum(Order.total), 0))
        .where(Order.order_date.between(start, end))
        .group_by(Order.payment_method)
    )
    amounts = {method: Decimal(total) for method, total in result.all()}
    gross = sum(amounts.values(), ZERO)

    shares = []
    for method in summary_service.PAYMENT_FIELDS:
        amount = amounts.get(method, ZERO)
        percentage = (amount / gross * 100) if gross else ZERO
        shares.append(
            PaymentMethodShare(
                payment_method=method,
                amount=amount,
                percentage=percentage.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            )
        )
    return shares


async def top_products(
    db: AsyncSession,
    start: date,
    end: date,
    limit: int = 10,
) -> list[TopProduct]:
    summary_service.validate_range(start, end)

    quantity = func.sum(Order.quantity).label("quantity")
    result = await db.execute(
        select(
            Product.id,
            Product.name,
            quantity,
            func.coalesce(func.sum(Order.total), 0),
        )
        .join(Order, Order.product_id == Product.id)
        .where(Order.order_date.between(start, end))
        .group_by(Product.id, Product.name)
        .order_by(quantity.desc(), Product.name)
        .limit(limit)
    )
    return [
        TopProduct(
            product_id=product_id,
            product_name=name,
            quantity=qty,
            revenue=Decimal(revenue),
        )
        for product_id, name, qty, revenue in result.all()
    ]


async def list_transactions(db: AsyncSession, day: date) -> list[Transaction]:
    """Order lines for ``day`` grouped by order_id, newest order first."""
    result = await db.execute(
        select(Order, Product)
        .join(Product, Order.product_id == Product.id)
        .where(Order.order_date == day)
        .order_by(Order.order_id.desc(), Order.id)
    )

    grouped: dict[int, list[tuple[Order, Product]]] = {}
    for order, product in result.all():
        grouped.setdefault(order.order_id, []).append((order, product))

    transactions = []
    for order_id, lines in grouped.items():
        first = lines[0][0]
        transactions.append(
            Transaction(
                order_id=order_id,
                order_date=first.order_date,
                subtotal=sum((line.subtotal for line, _ in lines), ZERO),
                tax=sum((line.tax for line, _ in lines), ZERO),
                discount=sum((line.discount for line, _ in lines), ZERO),
                total=sum((line.total for line, _ in lines), ZERO),
                payment=sum((line.payment for line, _ in lines), ZERO),
                change=sum((line.change for line, _ in lines), ZERO),
                payment_method=first.payment_method,
                created_at=first.created_at,
                products=[
                    TransactionProduct(
                        product_id=line.product_id,
                        product_name=product.name,
                        product_price=product.price,
                        product_image=product.image_path,
                        quantity=line.quantity,
                        amount=line.total,
                    )
                    for line, product in lines
                ],
            )
        )
    return transactions
