"""Tests for category, product and material maintenance."""

from decimal import Decimal

from sqlalchemy import func, select

from stockpilot.models import Delivery, InventoryUsed, ItemKind, ProductSold
from stockpilot.services import ledger
from stockpilot.utils.datetime import today_local
from tests.factories import (
    CategoryFactory,
    DeliveryFactory,
    MaterialFactory,
    OrderFactory,
    ProductFactory,
)


class TestCategories:
    async def test_admin_creates_category(self, admin_client):
        response = await admin_client.post("/api/v1/categories", json={"name": "Drinks", "color": "#22c55e"})

        assert response.status_code == 201
        assert response.json()["name"] == "Drinks"

    async def test_duplicate_name_conflicts(self, admin_client):
        await CategoryFactory.create(admin_client.db_session, name="Drinks")

        response = await admin_client.post("/api/v1/categories", json={"name": "Drinks"})

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    async def test_staff_cannot_create(self, client):
        response = await client.post("/api/v1/categories", json={"name": "Desserts"})
        assert response.status_code == 403

    async def test_staff_can_list(self, client):
        await CategoryFactory.create(client.db_session, name="Rice Meals")
        await CategoryFactory.create(client.db_session, name="Desserts")

        response = await client.get("/api/v1/categories")

        assert [c["name"] for c in response.json()] == ["Desserts", "Rice Meals"]


class TestProducts:
    async def test_create_product_with_category(self, admin_client):
        category = await CategoryFactory.create(admin_client.db_session, name="Chicken")

        response = await admin_client.post(
            "/api/v1/products",
            json={"name": "2pc Chicken", "price": "159.00", "category_id": category.id, "quantity": 20},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["category_name"] == "Chicken"
        assert data["quantity"] == 20

    async def test_unknown_category_returns_404(self, admin_client):
        response = await admin_client.post(
            "/api/v1/products",
            json={"name": "Mystery", "price": "10.00", "category_id": 999},
        )
        assert response.status_code == 404

    async def test_filter_by_category(self, client):
        drinks = await CategoryFactory.create(client.db_session, name="Drinks")
        await ProductFactory.create(client.db_session, name="Iced Tea", category_id=drinks.id)
        await ProductFactory.create(client.db_session, name="Burger")

        response = await client.get("/api/v1/products", params={"category_id": drinks.id})

        assert [p["name"] for p in response.json()] == ["Iced Tea"]

    async def test_quantity_edit_is_a_ledger_correction(self, admin_client):
        product = await ProductFactory.create(admin_client.db_session, quantity=10)

        response = await admin_client.put(f"/api/v1/products/{product.id}", json={"quantity": 15})

        assert response.status_code == 200
        assert response.json()["quantity"] == 15
        row = await ledger.find_record(admin_client.db_session, ItemKind.PRODUCT, product.id, today_local())
        assert row.beginning_qty == 15
        assert row.sold_qty == 0
        assert row.ending_qty == 15

    async def test_correction_keeps_days_sales(self, admin_client):
        product = await ProductFactory.create(admin_client.db_session, quantity=10)
        session = admin_client.db_session
        await ledger.apply_usage(session, ItemKind.PRODUCT, product.id, today_local(), 4)
        product.quantity = 6
        await session.commit()

        await admin_client.put(f"/api/v1/products/{product.id}", json={"quantity": 3})

        row = await ledger.find_record(session, ItemKind.PRODUCT, product.id, today_local())
        assert row.sold_qty == 4
        assert row.beginning_qty == 7
        assert row.ending_qty == 3

    async def test_price_edit_leaves_ledger_alone(self, admin_client):
        product = await ProductFactory.create(admin_client.db_session)

        response = await admin_client.put(f"/api/v1/products/{product.id}", json={"price": "99.50"})

        assert Decimal(response.json()["price"]) == Decimal("99.50")
        row = await ledger.find_record(admin_client.db_session, ItemKind.PRODUCT, product.id, today_local())
        assert row is None

    async def test_delete_product_with_orders_conflicts(self, admin_client):
        product = await ProductFactory.create(admin_client.db_session)
        await OrderFactory.create(admin_client.db_session, product)

        response = await admin_client.delete(f"/api/v1/products/{product.id}")

        assert response.status_code == 409

    async def test_delete_unsold_product(self, admin_client):
        product = await ProductFactory.create(admin_client.db_session)

        response = await admin_client.delete(f"/api/v1/products/{product.id}")

        assert response.status_code == 204
        assert (await admin_client.get("/api/v1/products")).json() == []

    async def test_delete_product_with_ledger_history_conflicts(self, admin_client):
        product = await ProductFactory.create(admin_client.db_session, quantity=10)
        product_id = product.id
        corrected = await admin_client.put(f"/api/v1/products/{product_id}", json={"quantity": 7})
        assert corrected.status_code == 200

        response = await admin_client.delete(f"/api/v1/products/{product_id}")

        assert response.status_code == 409
        assert response.json()["details"] == {
            "kind": "product",
            "item_id": product_id,
            "ledger_rows": 1,
        }
        remaining = await admin_client.db_session.scalar(
            select(func.count()).select_from(ProductSold).where(ProductSold.product_id == product_id)
        )
        assert remaining == 1


class TestMaterials:
    async def test_create_and_list(self, admin_client):
        response = await admin_client.post(
            "/api/v1/inventory",
            json={"name": "Cooking Oil", "price": "120.00", "quantity": 8},
        )
        assert response.status_code == 201

        listed = await admin_client.get("/api/v1/inventory")
        assert [m["name"] for m in listed.json()] == ["Cooking Oil"]

    async def test_quantity_correction_after_usage(self, admin_client):
        material = await MaterialFactory.create(admin_client.db_session, quantity=50)
        session = admin_client.db_session
        await ledger.set_usage(session, ItemKind.MATERIAL, material.id, today_local(), 10)
        await session.commit()

        response = await admin_client.put(f"/api/v1/inventory/{material.id}", json={"quantity": 45})

        assert response.json()["quantity"] == 45
        row = await ledger.find_record(session, ItemKind.MATERIAL, material.id, today_local())
        assert row.used_qty == 10
        assert row.ending_qty == 45

    async def test_staff_cannot_delete(self, client):
        material = await MaterialFactory.create(client.db_session)

        response = await client.delete(f"/api/v1/inventory/{material.id}")

        assert response.status_code == 403

    async def test_delete_missing_returns_404(self, admin_client):
        response = await admin_client.delete("/api/v1/inventory/31337")
        assert response.status_code == 404

    async def test_delete_material_with_ledger_history_conflicts(self, admin_client):
        session = admin_client.db_session
        material = await MaterialFactory.create(session, quantity=20)
        material_id = material.id
        await ledger.set_usage(session, ItemKind.MATERIAL, material_id, today_local(), 4)
        await session.commit()

        response = await admin_client.delete(f"/api/v1/inventory/{material_id}")

        assert response.status_code == 409
        assert response.json()["details"]["ledger_rows"] == 1
        remaining = await session.scalar(
            select(func.count()).select_from(InventoryUsed).where(InventoryUsed.inventory_id == material_id)
        )
        assert remaining == 1
        assert [m["id"] for m in (await admin_client.get("/api/v1/inventory")).json()] == [material_id]

    async def test_delete_unused_material_drops_pending_deliveries(self, admin_client):
        session = admin_client.db_session
        material = await MaterialFactory.create(session, quantity=20)
        material_id = material.id
        await DeliveryFactory.create(session, item_id=material_id, beginning_qty=20)

        response = await admin_client.delete(f"/api/v1/inventory/{material_id}")

        assert response.status_code == 204
        assert await session.scalar(select(func.count()).select_from(Delivery)) == 0
