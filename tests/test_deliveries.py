"""Tests for delivery seeding, editing and confirmation."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from stockpilot.core.errors import (
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from stockpilot.models import (
    Delivery,
    DeliveryStatus,
    InventoryUsed,
    ItemKind,
    Product,
    ProductSold,
)
from stockpilot.models.checkout_schemas import LineItem
from stockpilot.models.delivery_schemas import DeliveryEdit
from stockpilot.services import checkout as checkout_service
from stockpilot.services import deliveries, ledger
from tests.factories import DeliveryFactory, MaterialFactory, ProductFactory

DAY = date(2026, 3, 10)
YESTERDAY = DAY - timedelta(days=1)


def _sale(product_id: int, quantity: int) -> LineItem:
    return LineItem(
        product_id=product_id,
        quantity=quantity,
        subtotal=Decimal("50.00"),
        total=Decimal("50.00"),
        payment=Decimal("50.00"),
    )


async def _count_deliveries(db_session, day=DAY) -> int:
    return await db_session.scalar(
        select(func.count()).select_from(Delivery).where(Delivery.date == day)
    )


class TestSeeding:
    """First read of a day seeds one record per stocked item."""

    async def test_seed_creates_rows_from_live_quantity(self, db_session, test_user):
        material = await MaterialFactory.create(db_session, quantity=50)
        product = await ProductFactory.create(db_session, quantity=12)

        created = await deliveries.initialize_for_date(db_session, DAY, test_user)

        assert created == 2
        record = await deliveries.find_record(db_session, DAY, ItemKind.MATERIAL, material.id)
        assert record.beginning_qty == 50
        assert record.delivered_qty == 0
        assert record.ending_qty == 50
        assert record.status == DeliveryStatus.PENDING.value
        assert record.user_id == test_user.id
        assert await deliveries.find_record(db_session, DAY, ItemKind.PRODUCT, product.id)

    async def test_zero_stock_items_are_skipped(self, db_session):
        await MaterialFactory.create(db_session, name="Empty Oil Drum", quantity=0)
        stocked = await MaterialFactory.create(db_session, name="Rice", quantity=5)

        created = await deliveries.initialize_for_date(db_session, DAY)

        assert created == 1
        result = await db_session.execute(select(Delivery.item_id).where(Delivery.date == DAY))
        assert list(result.scalars()) == [stocked.id]

    async def test_seed_prefers_yesterdays_delivery_over_ledger(self, db_session):
        material = await MaterialFactory.create(db_session, quantity=50)
        db_session.add(
            InventoryUsed(
                inventory_id=material.id,
                date=YESTERDAY,
                beginning_qty=50,
                used_qty=5,
                ending_qty=45,
            )
        )
        await db_session.commit()
        await DeliveryFactory.create(
            db_session,
            item_id=material.id,
            delivery_date=YESTERDAY,
            beginning_qty=50,
            delivered_qty=8,
        )

        await deliveries.initialize_for_date(db_session, DAY)

        record = await deliveries.find_record(db_session, DAY, ItemKind.MATERIAL, material.id)
        assert record.beginning_qty == 42

    async def test_seed_falls_back_to_yesterdays_ledger(self, db_session):
        material = await MaterialFactory.create(db_session, quantity=50)
        db_session.add(
            InventoryUsed(
                inventory_id=material.id,
                date=YESTERDAY,
                beginning_qty=50,
                used_qty=5,
                ending_qty=45,
            )
        )
        await db_session.commit()

        await deliveries.initialize_for_date(db_session, DAY)

        record = await deliveries.find_record(db_session, DAY, ItemKind.MATERIAL, material.id)
        assert record.beginning_qty == 45

    async def test_seed_after_a_skipped_day_uses_last_ledger_ending(self, db_session):
        material = await MaterialFactory.create(db_session, quantity=50)
        material_id = material.id
        await ledger.set_usage(db_session, ItemKind.MATERIAL, material_id, YESTERDAY, 10)
        await db_session.commit()
        later = DAY + timedelta(days=1)

        await deliveries.initialize_for_date(db_session, later)

        record = await deliveries.find_record(db_session, later, ItemKind.MATERIAL, material_id)
        assert record.beginning_qty == 40

    async def test_newer_ledger_row_beats_older_delivery(self, db_session):
        material = await MaterialFactory.create(db_session, quantity=50)
        await DeliveryFactory.create(
            db_session,
            item_id=material.id,
            delivery_date=DAY - timedelta(days=3),
            beginning_qty=50,
            delivered_qty=8,
        )
        db_session.add(
            InventoryUsed(
                inventory_id=material.id,
                date=YESTERDAY,
                beginning_qty=42,
                used_qty=12,
                ending_qty=30,
            )
        )
        await db_session.commit()

        await deliveries.initialize_for_date(db_session, DAY)

        record = await deliveries.find_record(db_session, DAY, ItemKind.MATERIAL, material.id)
        assert record.beginning_qty == 30

    async def test_seeding_twice_creates_one_record_per_item(self, db_session):
        await MaterialFactory.create(db_session, name="Rice", quantity=10)
        await MaterialFactory.create(db_session, name="Oil", quantity=3)
        await ProductFactory.create(db_session, quantity=7)

        first = await deliveries.initialize_for_date(db_session, DAY)
        second = await deliveries.initialize_for_date(db_session, DAY)

        assert first == 3
        assert second == 0
        assert await _count_deliveries(db_session) == 3

    async def test_two_sessions_seeding_same_day(self, db_session, session_factory):
        """Two terminals open the delivery page at the same time."""
        await MaterialFactory.create(db_session, name="Rice", quantity=10)
        await ProductFactory.create(db_session, quantity=7)

        async with session_factory() as first, session_factory() as second:
            await deliveries.initialize_for_date(first, DAY)
            await deliveries.initialize_for_date(second, DAY)

        assert await _count_deliveries(db_session) == 2

    async def test_get_delivery_data_seeds_and_lists_all_items(self, db_session, test_user):
        await MaterialFactory.create(db_session, name="Rice", quantity=10)
        await MaterialFactory.create(db_session, name="Cups", quantity=0)
        await ProductFactory.create(db_session, name="Iced Tea", quantity=4)

        data = await deliveries.get_delivery_data(db_session, DAY, test_user)

        assert data.date == DAY
        assert [row.name for row in data.inventory] == ["Cups", "Rice"]
        cups, rice = data.inventory
        assert cups.delivery_id is None
        assert cups.id == f"i_{cups.item_id}"
        assert rice.delivery_id is not None
        assert rice.status == "pending"
        assert data.products[0].id == f"p_{data.products[0].item_id}"


class TestResolveQuantities:
    """Movement/ending derivation per item kind."""

    def test_material_used_derived_from_ending(self):
        assert deliveries.resolve_quantities(ItemKind.MATERIAL, 50, None, 40) == (10, 40)

    def test_product_received_derived_from_ending(self):
        assert deliveries.resolve_quantities(ItemKind.PRODUCT, 5, None, 25) == (20, 25)

    def test_ending_derived_from_movement(self):
        assert deliveries.resolve_quantities(ItemKind.MATERIAL, 50, 12, None) == (12, 38)

    def test_inconsistent_triple_rejected(self):
        with pytest.raises(ValidationError):
            deliveries.resolve_quantities(ItemKind.MATERIAL, 50, 10, 35)

    def test_material_ending_above_beginning_rejected(self):
        with pytest.raises(ValidationError):
            deliveries.resolve_quantities(ItemKind.MATERIAL, 10, None, 15)

    def test_usage_above_beginning_rejected(self):
        with pytest.raises(ValidationError):
            deliveries.resolve_quantities(ItemKind.MATERIAL, 10, 11, None)


class TestReconciliationScenario:
    """Seed 50, count 40, confirm, confirm again."""

    async def test_confirm_writes_back_once(self, db_session, test_user):
        material = await MaterialFactory.create(db_session, quantity=50)
        await deliveries.initialize_for_date(db_session, DAY, test_user)

        rows = await deliveries.update_deliveries(
            db_session,
            DAY,
            [DeliveryEdit(kind=ItemKind.MATERIAL, item_id=material.id, ending_qty=40)],
            test_user,
        )
        assert rows[0].used_qty == 10
        assert rows[0].ending_qty == 40

        record = await deliveries.find_record(db_session, DAY, ItemKind.MATERIAL, material.id)
        row, already = await deliveries.confirm_delivery(db_session, record.id, test_user)

        assert already is False
        assert row.status == "confirmed"
        usage = await ledger.find_record(db_session, ItemKind.MATERIAL, material.id, DAY)
        assert usage.used_qty == 10
        assert usage.ending_qty == 40
        await db_session.refresh(material)
        assert material.quantity == 40

        row, already = await deliveries.confirm_delivery(db_session, record.id, test_user)

        assert already is True
        await db_session.refresh(usage)
        assert usage.used_qty == 10
        assert usage.ending_qty == 40
        await db_session.refresh(material)
        assert material.quantity == 40

    async def test_product_confirmation_replenishes_stock(self, db_session, test_user):
        product = await ProductFactory.create(db_session, quantity=5)

        await deliveries.update_deliveries(
            db_session,
            DAY,
            [DeliveryEdit(kind=ItemKind.PRODUCT, item_id=product.id, used_qty=20)],
            test_user,
        )
        record = await deliveries.find_record(db_session, DAY, ItemKind.PRODUCT, product.id)
        assert record.beginning_qty == 5
        assert record.ending_qty == 25

        await deliveries.confirm_delivery(db_session, record.id, test_user)

        sold = await ledger.find_record(db_session, ItemKind.PRODUCT, product.id, DAY)
        assert sold.delivered_qty == 20
        assert sold.sold_qty == 0
        assert sold.ending_qty == 25
        await db_session.refresh(product)
        assert product.quantity == 25

    async def test_conservation_after_confirming_every_record(self, db_session, test_user):
        rice = await MaterialFactory.create(db_session, name="Rice", quantity=30)
        oil = await MaterialFactory.create(db_session, name="Oil", quantity=12)
        tea = await ProductFactory.create(db_session, name="Iced Tea", quantity=6)
        await deliveries.initialize_for_date(db_session, DAY, test_user)

        await deliveries.update_deliveries(
            db_session,
            DAY,
            [
                DeliveryEdit(kind=ItemKind.MATERIAL, item_id=rice.id, used_qty=7),
                DeliveryEdit(kind=ItemKind.MATERIAL, item_id=oil.id, ending_qty=2),
                DeliveryEdit(kind=ItemKind.PRODUCT, item_id=tea.id, ending_qty=18),
            ],
            test_user,
        )
        result = await db_session.execute(select(Delivery.id).where(Delivery.date == DAY))
        for delivery_id in result.scalars().all():
            await deliveries.confirm_delivery(db_session, delivery_id, test_user)

        result = await db_session.execute(select(InventoryUsed).where(InventoryUsed.date == DAY))
        for row in result.scalars():
            assert row.ending_qty == row.beginning_qty - row.used_qty
        result = await db_session.execute(select(ProductSold).where(ProductSold.date == DAY))
        for row in result.scalars():
            assert row.ending_qty == row.beginning_qty + row.delivered_qty - row.sold_qty

        result = await db_session.execute(select(Delivery).where(Delivery.date == DAY))
        for record in result.scalars():
            assert record.status == DeliveryStatus.CONFIRMED.value
            assert record.ending_qty == record.expected_ending()

    async def test_racing_confirmations_apply_once(self, db_session, session_factory, test_user):
        material = await MaterialFactory.create(db_session, quantity=50)
        record = await DeliveryFactory.create(
            db_session,
            item_id=material.id,
            delivery_date=DAY,
            beginning_qty=50,
            delivered_qty=10,
        )

        async with session_factory() as first, session_factory() as second:
            # Both terminals loaded the pending record before either confirmed
            assert (await first.get(Delivery, record.id)).status == "pending"
            assert (await second.get(Delivery, record.id)).status == "pending"

            _, first_already = await deliveries.confirm_delivery(first, record.id, test_user)
            _, second_already = await deliveries.confirm_delivery(second, record.id, test_user)

        assert (first_already, second_already) == (False, True)
        usage = await ledger.find_record(db_session, ItemKind.MATERIAL, material.id, DAY)
        assert usage.used_qty == 10
        assert usage.ending_qty == 40

    async def test_confirm_keeps_sale_committed_by_another_terminal(
        self, db_session, session_factory, test_user
    ):
        """The kitchen loaded stock before the till sold; confirming must not undo the sale."""
        product = await ProductFactory.create(db_session, quantity=10)
        product_id = product.id
        await deliveries.update_deliveries(
            db_session,
            DAY,
            [DeliveryEdit(kind=ItemKind.PRODUCT, item_id=product_id, used_qty=5)],
            test_user,
        )
        record = await deliveries.find_record(db_session, DAY, ItemKind.PRODUCT, product_id)
        await checkout_service.checkout(db_session, [_sale(product_id, 1)], DAY)

        async with session_factory() as till, session_factory() as kitchen:
            stale_product = await kitchen.get(Product, product_id)
            stale_row = await ledger.find_record(kitchen, ItemKind.PRODUCT, product_id, DAY)
            assert (stale_product.quantity, stale_row.sold_qty) == (9, 1)

            await checkout_service.checkout(till, [_sale(product_id, 3)], DAY)
            await deliveries.confirm_delivery(kitchen, record.id, test_user)

        sold = await db_session.scalar(
            select(ProductSold)
            .where(ProductSold.product_id == product_id, ProductSold.date == DAY)
            .execution_options(populate_existing=True)
        )
        assert sold.sold_qty == 4
        assert sold.delivered_qty == 5
        assert sold.ending_qty == 11
        quantity = await db_session.scalar(select(Product.quantity).where(Product.id == product_id))
        assert quantity == 11


class TestEditRules:
    """Edits overwrite pending records and never touch confirmed ones."""

    async def test_last_write_wins(self, db_session, test_user):
        material = await MaterialFactory.create(db_session, quantity=50)

        for ending in (45, 30, 41):
            await deliveries.update_deliveries(
                db_session,
                DAY,
                [DeliveryEdit(kind=ItemKind.MATERIAL, item_id=material.id, ending_qty=ending)],
                test_user,
            )

        record = await deliveries.find_record(db_session, DAY, ItemKind.MATERIAL, material.id)
        assert record.delivered_qty == 9
        assert record.ending_qty == 41
        assert await _count_deliveries(db_session) == 1

    async def test_editing_confirmed_record_rejected(self, db_session, test_user):
        material = await MaterialFactory.create(db_session, quantity=50)
        await DeliveryFactory.create(
            db_session,
            item_id=material.id,
            delivery_date=DAY,
            beginning_qty=50,
            delivered_qty=5,
            status=DeliveryStatus.CONFIRMED.value,
        )

        with pytest.raises(InvalidStateError):
            await deliveries.update_deliveries(
                db_session,
                DAY,
                [DeliveryEdit(kind=ItemKind.MATERIAL, item_id=material.id, ending_qty=30)],
                test_user,
            )

    async def test_unknown_item_rejected(self, db_session, test_user):
        with pytest.raises(NotFoundError):
            await deliveries.update_deliveries(
                db_session,
                DAY,
                [DeliveryEdit(kind=ItemKind.PRODUCT, item_id=404, ending_qty=1)],
                test_user,
            )

    async def test_confirm_unknown_delivery_not_found(self, db_session, test_user):
        with pytest.raises(NotFoundError):
            await deliveries.confirm_delivery(db_session, 12345, test_user)

    async def test_overdrawn_material_confirmation_rolls_back(self, db_session, test_user):
        material = await MaterialFactory.create(db_session, quantity=5)
        material_id = material.id
        record = await DeliveryFactory.create(
            db_session,
            item_id=material_id,
            delivery_date=DAY,
            beginning_qty=20,
            delivered_qty=8,
        )
        record_id = record.id

        with pytest.raises(InsufficientStockError) as exc_info:
            await deliveries.confirm_delivery(db_session, record_id, test_user)
        assert exc_info.value.available == 5

        status = await db_session.scalar(select(Delivery.status).where(Delivery.id == record_id))
        assert status == DeliveryStatus.PENDING.value
        assert await ledger.find_record(db_session, ItemKind.MATERIAL, material_id, DAY) is None


class TestDeliveryAPI:
    """HTTP surface of the delivery screen."""

    async def test_get_deliveries_for_date(self, client):
        await MaterialFactory.create(client.db_session, quantity=9)

        response = await client.get("/api/v1/deliveries", params={"date": DAY.isoformat()})

        assert response.status_code == 200
        data = response.json()
        assert data["date"] == DAY.isoformat()
        assert data["inventory"][0]["beginning_qty"] == 9
        assert data["products"] == []

    async def test_update_and_confirm_roundtrip(self, client):
        material = await MaterialFactory.create(client.db_session, quantity=50)

        response = await client.post(
            "/api/v1/deliveries",
            json={
                "date": DAY.isoformat(),
                "items": [{"kind": "material", "item_id": material.id, "ending_qty": 40}],
            },
        )
        assert response.status_code == 200
        updated = response.json()["updated"]
        assert updated[0]["used_qty"] == 10

        delivery_id = updated[0]["delivery_id"]
        first = await client.post(f"/api/v1/deliveries/{delivery_id}/confirm")
        second = await client.post(f"/api/v1/deliveries/{delivery_id}/confirm")

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["already_confirmed"] is False
        assert second.status_code == 200
        assert second.json()["already_confirmed"] is True
        assert second.json()["delivery"]["ending_qty"] == 40

    async def test_editing_confirmed_returns_400(self, client):
        material = await MaterialFactory.create(client.db_session, quantity=50)
        await DeliveryFactory.create(
            client.db_session,
            item_id=material.id,
            delivery_date=DAY,
            beginning_qty=50,
            status=DeliveryStatus.CONFIRMED.value,
        )

        response = await client.post(
            "/api/v1/deliveries",
            json={
                "date": DAY.isoformat(),
                "items": [{"kind": "material", "item_id": material.id, "ending_qty": 10}],
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATE"

    async def test_edit_without_quantities_rejected(self, client):
        material = await MaterialFactory.create(client.db_session)

        response = await client.post(
            "/api/v1/deliveries",
            json={"items": [{"kind": "material", "item_id": material.id, "beginning_qty": 3}]},
        )

        assert response.status_code == 422

    async def test_unknown_item_returns_404(self, client):
        response = await client.post(
            "/api/v1/deliveries",
            json={"items": [{"kind": "product", "item_id": 777, "ending_qty": 1}]},
        )

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_requires_authentication(self, unauthenticated_client):
        response = await unauthenticated_client.get("/api/v1/deliveries")
        assert response.status_code == 401
