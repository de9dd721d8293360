"""Tests for POS checkout."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from stockpilot.core.errors import InsufficientStockError, NotFoundError
from stockpilot.models import ItemKind, Order, Product, ProductSold, Summary
from stockpilot.models.checkout_schemas import LineItem
from stockpilot.services import checkout as checkout_service
from stockpilot.services import ledger
from tests.factories import OrderFactory, ProductFactory

DAY = date(2026, 3, 10)


def _line(product_id: int, quantity: int, total: str = "100.00", method: str = "cash") -> LineItem:
    return LineItem(
        product_id=product_id,
        quantity=quantity,
        subtotal=Decimal(total),
        total=Decimal(total),
        payment=Decimal(total),
        payment_method=method,
    )


def _payload_line(product_id: int, quantity: int, total: str = "100.00", method: str = "cash"):
    return {
        "product_id": product_id,
        "quantity": quantity,
        "subtotal": total,
        "total": total,
        "payment": total,
        "payment_method": method,
    }


class TestAggregateQuantities:
    def test_repeated_lines_are_summed_in_id_order(self):
        items = [_line(5, 1), _line(2, 3), _line(5, 2)]

        totals = checkout_service.aggregate_quantities(items)

        assert list(totals.items()) == [(2, 3), (5, 3)]


class TestCheckoutService:
    """Atomic cart placement."""

    async def test_successful_checkout(self, db_session, test_user):
        chicken = await ProductFactory.create(db_session, name="Chicken", quantity=10)
        rice = await ProductFactory.create(db_session, name="Rice", quantity=4)

        result = await checkout_service.checkout(
            db_session,
            [_line(chicken.id, 3, "267.00"), _line(rice.id, 1, "25.00")],
            DAY,
            test_user,
        )

        assert result.order_id == 1
        assert len(result.lines) == 2
        assert {line.order_id for line in result.lines} == {1}
        assert result.total == Decimal("292.00")

        await db_session.refresh(chicken)
        await db_session.refresh(rice)
        assert chicken.quantity == 7
        assert rice.quantity == 3

    async def test_sale_is_recorded_in_product_ledger(self, db_session):
        product = await ProductFactory.create(db_session, quantity=10)

        await checkout_service.checkout(db_session, [_line(product.id, 3)], DAY)

        row = await ledger.find_record(db_session, ItemKind.PRODUCT, product.id, DAY)
        assert row.beginning_qty == 10
        assert row.sold_qty == 3
        assert row.ending_qty == 7

    async def test_order_ids_increment_per_cart(self, db_session):
        product = await ProductFactory.create(db_session, quantity=10)

        first = await checkout_service.checkout(db_session, [_line(product.id, 1)], DAY)
        second = await checkout_service.checkout(db_session, [_line(product.id, 1)], DAY)

        assert second.order_id == first.order_id + 1

    async def test_insufficient_stock_rejects_whole_cart(self, db_session):
        plenty = await ProductFactory.create(db_session, name="Plenty", quantity=10)
        scarce = await ProductFactory.create(db_session, name="Scarce", quantity=1)
        scarce_id = scarce.id

        with pytest.raises(InsufficientStockError) as exc_info:
            await checkout_service.checkout(
                db_session,
                [_line(plenty.id, 2), _line(scarce_id, 2)],
                DAY,
            )

        assert exc_info.value.item_id == scarce_id
        assert exc_info.value.available == 1
        assert exc_info.value.requested == 2

        await db_session.refresh(plenty)
        await db_session.refresh(scarce)
        assert plenty.quantity == 10
        assert scarce.quantity == 1
        assert await db_session.scalar(select(func.count()).select_from(Order)) == 0
        assert await db_session.scalar(select(func.count()).select_from(ProductSold)) == 0

    async def test_repeated_lines_checked_against_combined_quantity(self, db_session):
        product = await ProductFactory.create(db_session, quantity=3)

        with pytest.raises(InsufficientStockError) as exc_info:
            await checkout_service.checkout(
                db_session,
                [_line(product.id, 2), _line(product.id, 2)],
                DAY,
            )

        assert exc_info.value.requested == 4

    async def test_unknown_product(self, db_session):
        with pytest.raises(NotFoundError):
            await checkout_service.checkout(db_session, [_line(999, 1)], DAY)

    async def test_stale_terminal_cannot_oversell(self, db_session, session_factory):
        """Two terminals sell the last units; the one with a stale view is refused."""
        product = await ProductFactory.create(db_session, quantity=3)

        async with session_factory() as first, session_factory() as second:
            # Second terminal loaded the product while 3 were still in stock
            stale = await second.get(Product, product.id)
            assert stale.quantity == 3

            await checkout_service.checkout(first, [_line(product.id, 2)], DAY)

            with pytest.raises(InsufficientStockError) as exc_info:
                await checkout_service.checkout(second, [_line(product.id, 2)], DAY)

        assert exc_info.value.available == 1

        await db_session.refresh(product)
        assert product.quantity == 1
        row = await ledger.find_record(db_session, ItemKind.PRODUCT, product.id, DAY)
        assert row.sold_qty == 2
        assert row.ending_qty == 1
        assert await db_session.scalar(select(func.count()).select_from(Order)) == 1


class TestCheckoutAPI:
    """POST /api/v1/checkout"""

    async def test_checkout_returns_receipt(self, client):
        product = await ProductFactory.create(client.db_session, quantity=10)

        response = await client.post(
            "/api/v1/checkout",
            json={
                "date": DAY.isoformat(),
                "items": [_payload_line(product.id, 2, "178.00", "grabf")],
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["order_id"] == 1
        assert data["order_date"] == DAY.isoformat()
        assert Decimal(data["total"]) == Decimal("178.00")
        assert data["lines"][0]["payment_method"] == "grabfood"
        assert data["lines"][0]["quantity"] == 2

    async def test_checkout_marks_summary_dirty(self, client):
        product = await ProductFactory.create(client.db_session, quantity=10)

        response = await client.post(
            "/api/v1/checkout",
            json={"date": DAY.isoformat(), "items": [_payload_line(product.id, 1)]},
        )
        assert response.status_code == 201

        summary = await client.db_session.scalar(select(Summary).where(Summary.date == DAY))
        assert summary is not None
        assert summary.is_dirty is True

    async def test_order_id_continues_after_existing_orders(self, client):
        product = await ProductFactory.create(client.db_session, quantity=10)
        await OrderFactory.create(client.db_session, product, order_id=41, order_date=DAY)

        response = await client.post(
            "/api/v1/checkout",
            json={"date": DAY.isoformat(), "items": [_payload_line(product.id, 1)]},
        )

        assert response.json()["order_id"] == 42

    async def test_insufficient_stock_returns_409(self, client):
        product = await ProductFactory.create(client.db_session, name="Halo-Halo", quantity=1)
        product_id = product.id

        response = await client.post(
            "/api/v1/checkout",
            json={"date": DAY.isoformat(), "items": [_payload_line(product_id, 5)]},
        )

        assert response.status_code == 409
        data = response.json()
        assert data["code"] == "INSUFFICIENT_STOCK"
        assert data["details"] == {
            "product": "Halo-Halo",
            "item_id": product_id,
            "available": 1,
            "requested": 5,
        }

    async def test_empty_cart_rejected(self, client):
        response = await client.post("/api/v1/checkout", json={"items": []})
        assert response.status_code == 422

    async def test_unknown_payment_method_rejected(self, client):
        product = await ProductFactory.create(client.db_session)

        response = await client.post(
            "/api/v1/checkout",
            json={"items": [_payload_line(product.id, 1, method="bitcoin")]},
        )

        assert response.status_code == 422

    async def test_unknown_product_returns_404(self, client):
        response = await client.post(
            "/api/v1/checkout",
            json={"items": [_payload_line(4242, 1)]},
        )

        assert response.status_code == 404

    async def test_orders_listed_grouped_by_order(self, client):
        product = await ProductFactory.create(client.db_session, name="Spaghetti", quantity=10)
        for _ in range(2):
            await client.post(
                "/api/v1/checkout",
                json={
                    "date": DAY.isoformat(),
                    "items": [_payload_line(product.id, 1), _payload_line(product.id, 2)],
                },
            )

        response = await client.get("/api/v1/orders", params={"date": DAY.isoformat()})

        assert response.status_code == 200
        data = response.json()
        assert [t["order_id"] for t in data] == [2, 1]
        assert len(data[0]["products"]) == 2
        assert data[0]["products"][0]["product_name"] == "Spaghetti"
        assert Decimal(data[0]["total"]) == Decimal("200.00")
