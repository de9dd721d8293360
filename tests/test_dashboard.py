"""Tests for admin dashboard reports."""

from datetime import timedelta
from decimal import Decimal

from stockpilot.services import reports
from stockpilot.utils.datetime import today_local
from tests.factories import MaterialFactory, OrderFactory, ProductFactory


class TestReports:
    async def test_sales_by_day_fills_gaps(self, db_session):
        today = today_local()
        product = await ProductFactory.create(db_session)
        await OrderFactory.create(db_session, product, order_id=1, total=Decimal("40.00"), order_date=today)
        await OrderFactory.create(db_session, product, order_id=1, total=Decimal("60.00"), order_date=today)
        await OrderFactory.create(
            db_session, product, order_id=2, total=Decimal("25.00"), order_date=today - timedelta(days=2)
        )

        points = await reports.sales_by_day(db_session, today - timedelta(days=2), today)

        assert [p.sales for p in points] == [Decimal("25.00"), Decimal("0.00"), Decimal("100.00")]
        assert [p.order_count for p in points] == [1, 0, 1]

    async def test_payment_breakdown_lists_every_method(self, db_session):
        today = today_local()
        product = await ProductFactory.create(db_session)
        await OrderFactory.create(db_session, product, order_id=1, total=Decimal("75.00"), order_date=today)
        await OrderFactory.create(
            db_session,
            product,
            order_id=2,
            total=Decimal("25.00"),
            payment_method="foodpanda",
            order_date=today,
        )

        shares = {s.payment_method: s for s in await reports.payment_breakdown(db_session, today, today)}

        assert set(shares) == {"cash", "gcash", "grabfood", "foodpanda"}
        assert shares["cash"].percentage == Decimal("75.00")
        assert shares["foodpanda"].percentage == Decimal("25.00")
        assert shares["gcash"].amount == Decimal("0.00")

    async def test_payment_breakdown_without_sales(self, db_session):
        today = today_local()

        shares = await reports.payment_breakdown(db_session, today, today)

        assert all(s.percentage == Decimal("0.00") for s in shares)

    async def test_top_products_ranked_by_quantity(self, db_session):
        today = today_local()
        burger = await ProductFactory.create(db_session, name="Burger")
        fries = await ProductFactory.create(db_session, name="Fries")
        await OrderFactory.create(db_session, burger, order_id=1, quantity=2, order_date=today)
        await OrderFactory.create(db_session, fries, order_id=1, quantity=5, order_date=today)
        await OrderFactory.create(db_session, burger, order_id=2, quantity=1, order_date=today)

        top = await reports.top_products(db_session, today, today, limit=5)

        assert [(t.product_name, t.quantity) for t in top] == [("Fries", 5), ("Burger", 3)]

    async def test_low_stock_items(self, db_session):
        await ProductFactory.create(db_session, name="Sundae", quantity=2)
        await ProductFactory.create(db_session, name="Burger", quantity=40)
        await MaterialFactory.create(db_session, name="Cups", quantity=10)

        low = await reports.low_stock_items(db_session)

        assert [(i.kind, i.name) for i in low] == [("product", "Sundae"), ("material", "Cups")]


class TestDashboardAPI:
    async def test_today(self, admin_client):
        product = await ProductFactory.create(admin_client.db_session, quantity=3)
        await OrderFactory.create(admin_client.db_session, product, total=Decimal("89.00"))

        response = await admin_client.get("/api/v1/dashboard/today")

        assert response.status_code == 200
        data = response.json()
        assert data["date"] == today_local().isoformat()
        assert Decimal(data["summary"]["total_gross_sales"]) == Decimal("89.00")
        assert data["total_products"] == 1
        assert data["low_stock"][0]["item_id"] == product.id

    async def test_sales_defaults_to_last_seven_days(self, admin_client):
        response = await admin_client.get("/api/v1/dashboard/sales")

        assert response.status_code == 200
        points = response.json()
        assert len(points) == 7
        assert points[-1]["date"] == today_local().isoformat()

    async def test_top_products_limit_validated(self, admin_client):
        response = await admin_client.get("/api/v1/dashboard/top-products", params={"limit": 0})
        assert response.status_code == 422

    async def test_payment_methods_endpoint(self, admin_client):
        response = await admin_client.get("/api/v1/dashboard/payment-methods")

        assert response.status_code == 200
        assert len(response.json()) == 4
