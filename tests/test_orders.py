"""Tests for order creation, listing, detail and the status lifecycle."""

from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.models import (
    Batch,
    Customer,
    Farm,
    Order,
    OrderItem,
    OrderStatusHistory,
    User,
)
from poultry_api.services.order import calculate_totals, line_total


def _order_body(customer_id: int, **overrides) -> dict:
    body = {
        "customer_id": customer_id,
        "order_date": "2026-10-01",
        "items": [
            {"product_type": "eggs", "product_name": "Eggs grade 0", "quantity": 2, "unit_price": "10.50"},
            {"product_type": "eggs", "product_name": "Eggs grade 1", "quantity": 3, "unit_price": "5.25"},
        ],
        "discount_amount": "1.00",
        "tax_amount": "0.50",
    }
    body.update(overrides)
    return body


@pytest.fixture
def orders_url(farm: Farm) -> str:
    return f"/api/farms/{farm.id}/orders"


async def _count(session: AsyncSession, model) -> int:
    return (await session.execute(select(func.count(model.id)))).scalar()


@pytest.mark.unit
class TestOrderTotals:
    def test_totals_are_decimal_exact(self):
        total, net = calculate_totals(
            [(Decimal("2"), Decimal("10.50")), (Decimal("3"), Decimal("5.25"))],
            Decimal("1.00"),
            Decimal("0.50"),
        )

        assert total == Decimal("36.75")
        assert net == Decimal("36.25")

    def test_line_total_rounds_half_up(self):
        assert line_total(Decimal("3"), Decimal("0.335")) == Decimal("1.01")
        assert line_total(Decimal("0.1"), Decimal("0.3")) == Decimal("0.03")

    def test_no_discount_or_tax(self):
        total, net = calculate_totals([(Decimal("1"), Decimal("0.10"))] * 3)

        assert total == net == Decimal("0.30")


@pytest.mark.api
@pytest.mark.asyncio
class TestCreateOrder:
    async def test_create_order_with_items(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        orders_url: str,
        customer: Customer,
        owner: User,
        auth_headers: dict,
    ):
        response = await client.post(
            orders_url, headers=auth_headers, json=_order_body(customer.id, order_number="ORD-1")
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["order_number"] == "ORD-1"
        assert Decimal(str(data["total_amount"])) == Decimal("36.75")
        assert Decimal(str(data["net_amount"])) == Decimal("36.25")
        assert data["status"] == "pending"
        assert data["payment_status"] == "unpaid"
        assert data["created_by"] == owner.id
        assert data["customer_name"] == "Golden Wok"
        assert [Decimal(str(i["total_price"])) for i in data["items"]] == [
            Decimal("21.00"),
            Decimal("15.75"),
        ]

        history = (await db_session.execute(select(OrderStatusHistory))).scalars().all()
        assert [(h.status, h.note) for h in history] == [("pending", "Order created")]

    async def test_generated_order_number(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        response = await client.post(orders_url, headers=auth_headers, json=_order_body(customer.id))

        assert response.status_code == 201
        assert response.json()["data"]["order_number"].startswith("ORD-")

    async def test_duplicate_order_number(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        body = _order_body(customer.id, order_number="ORD-DUP")
        await client.post(orders_url, headers=auth_headers, json=body)
        response = await client.post(orders_url, headers=auth_headers, json=body)

        assert response.status_code == 400
        assert response.json()["error_code"] == "DUPLICATE_ORDER_NUMBER"

    async def test_empty_items_rejected(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        response = await client.post(
            orders_url, headers=auth_headers, json=_order_body(customer.id, items=[])
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "items"

    async def test_non_positive_quantity_rejected(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        items = [{"product_type": "eggs", "product_name": "Eggs", "quantity": 0, "unit_price": "1"}]
        response = await client.post(
            orders_url, headers=auth_headers, json=_order_body(customer.id, items=items)
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "items.0.quantity"

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"items": [{"product_type": "eggs", "product_name": "Eggs", "quantity": "0.333", "unit_price": "3.00"}]},
             "items.0.quantity"),
            ({"items": [{"product_type": "eggs", "product_name": "Eggs", "quantity": 1, "unit_price": "0.004"}]},
             "items.0.unit_price"),
            ({"discount_amount": "0.004"}, "discount_amount"),
            ({"tax_amount": "1.005"}, "tax_amount"),
        ],
    )
    async def test_sub_cent_amounts_rejected(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        orders_url: str,
        customer: Customer,
        auth_headers: dict,
        overrides: dict,
        field: str,
    ):
        response = await client.post(
            orders_url, headers=auth_headers, json=_order_body(customer.id, **overrides)
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == field
        assert await _count(db_session, Order) == 0

    async def test_fully_discounted_order_starts_paid(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        response = await client.post(
            orders_url,
            headers=auth_headers,
            json=_order_body(customer.id, discount_amount="36.75", tax_amount="0"),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert Decimal(str(data["net_amount"])) == Decimal("0")
        assert data["payment_status"] == "paid"

    async def test_unknown_customer(
        self, client: AsyncClient, orders_url: str, farm: Farm, auth_headers: dict
    ):
        response = await client.post(orders_url, headers=auth_headers, json=_order_body(9999))

        assert response.status_code == 404

    async def test_inactive_customer(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        orders_url: str,
        customer: Customer,
        auth_headers: dict,
    ):
        customer.is_active = False
        await db_session.commit()

        response = await client.post(orders_url, headers=auth_headers, json=_order_body(customer.id))

        assert response.status_code == 404

    async def test_item_batch_traceability(
        self,
        client: AsyncClient,
        orders_url: str,
        customer: Customer,
        batch: Batch,
        auth_headers: dict,
    ):
        items = [{
            "product_type": "live_bird",
            "product_name": "Live broiler",
            "quantity": 100,
            "unit": "kg",
            "unit_price": "42.00",
            "batch_id": batch.id,
        }]
        response = await client.post(
            orders_url, headers=auth_headers, json=_order_body(customer.id, items=items)
        )

        assert response.status_code == 201
        item = response.json()["data"]["items"][0]
        assert item["batch_code"] == batch.batch_code
        assert item["bird_type"] == "broiler"

    async def test_item_batch_from_other_farm(
        self,
        client: AsyncClient,
        orders_url: str,
        customer: Customer,
        auth_headers: dict,
    ):
        items = [{
            "product_type": "live_bird",
            "product_name": "Live broiler",
            "quantity": 1,
            "unit_price": "1.00",
            "batch_id": 9999,
        }]
        response = await client.post(
            orders_url, headers=auth_headers, json=_order_body(customer.id, items=items)
        )

        assert response.status_code == 404


@pytest.mark.api
@pytest.mark.asyncio
class TestOrderAtomicity:
    async def test_failure_mid_items_leaves_no_partial_order(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        monkeypatch,
        orders_url: str,
        customer: Customer,
        auth_headers: dict,
    ):
        original_flush = AsyncSession.flush
        calls = {"n": 0}

        async def failing_flush(self, *args, **kwargs):
            calls["n"] += 1
            # 1: header, 2: first item, 3: second item
            if calls["n"] == 3:
                raise SQLAlchemyError("connection lost")
            return await original_flush(self, *args, **kwargs)

        monkeypatch.setattr(AsyncSession, "flush", failing_flush)

        response = await client.post(
            orders_url, headers=auth_headers, json=_order_body(customer.id, order_number="ORD-X")
        )
        monkeypatch.undo()

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Failed to create order"
        assert body["error_code"] == "ORDER_CREATION_FAILED"

        assert await _count(db_session, Order) == 0
        assert await _count(db_session, OrderItem) == 0
        assert await _count(db_session, OrderStatusHistory) == 0

        listed = await client.get(orders_url, headers=auth_headers)
        assert listed.json()["data"]["items"] == []


@pytest.mark.api
@pytest.mark.asyncio
class TestOrderQueries:
    async def test_list_orders_with_filters(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        await client.post(
            orders_url,
            headers=auth_headers,
            json=_order_body(customer.id, order_number="ORD-A", order_date="2026-09-01"),
        )
        await client.post(
            orders_url,
            headers=auth_headers,
            json=_order_body(customer.id, order_number="ORD-B", order_date="2026-10-01"),
        )

        everything = await client.get(orders_url, headers=auth_headers)
        october = await client.get(
            orders_url, headers=auth_headers, params={"date_from": "2026-10-01"}
        )
        paid = await client.get(orders_url, headers=auth_headers, params={"payment_status": "paid"})

        items = everything.json()["data"]["items"]
        assert [o["order_number"] for o in items] == ["ORD-B", "ORD-A"]
        assert items[0]["item_count"] == 2
        assert items[0]["customer_code"] == customer.customer_code
        assert [o["order_number"] for o in october.json()["data"]["items"]] == ["ORD-B"]
        assert paid.json()["data"]["items"] == []

    async def test_invalid_status_filter(self, client: AsyncClient, orders_url: str, auth_headers: dict):
        response = await client.get(orders_url, headers=auth_headers, params={"status": "lost"})

        assert response.status_code == 400

    async def test_order_detail(
        self, client: AsyncClient, orders_url: str, farm: Farm, customer: Customer, auth_headers: dict
    ):
        created = await client.post(orders_url, headers=auth_headers, json=_order_body(customer.id))
        order_id = created.json()["data"]["id"]

        response = await client.get(f"{orders_url}/{order_id}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["farm_name"] == farm.name
        assert data["customer_phone"] == customer.phone
        assert data["created_by_name"] == "Olive"
        assert Decimal(str(data["total_paid"])) == Decimal("0")
        assert data["payments"] == []
        assert len(data["items"]) == 2
        assert [h["status"] for h in data["status_history"]] == ["pending"]

    async def test_order_in_other_farm_is_not_found(
        self, client: AsyncClient, orders_url: str, auth_headers: dict
    ):
        response = await client.get(f"{orders_url}/9999", headers=auth_headers)

        assert response.status_code == 404


@pytest.mark.api
@pytest.mark.asyncio
class TestOrderStatus:
    async def _create(self, client, orders_url, customer_id, headers) -> int:
        created = await client.post(orders_url, headers=headers, json=_order_body(customer_id))
        return created.json()["data"]["id"]

    async def test_status_change_appends_history(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        order_id = await self._create(client, orders_url, customer.id, auth_headers)
        url = f"{orders_url}/{order_id}/status"

        await client.put(url, headers=auth_headers, json={"status": "confirmed"})
        response = await client.put(
            url, headers=auth_headers, json={"status": "preparing", "note": "packing eggs"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "preparing"
        assert [(h["status"], h["note"]) for h in data["status_history"]] == [
            ("pending", "Order created"),
            ("confirmed", None),
            ("preparing", "packing eggs"),
        ]

    async def test_unknown_status_rejected(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        order_id = await self._create(client, orders_url, customer.id, auth_headers)

        response = await client.put(
            f"{orders_url}/{order_id}/status", headers=auth_headers, json={"status": "shipped"}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "status"

    @pytest.mark.parametrize("closed", ["delivered", "cancelled"])
    async def test_closed_order_is_final(
        self,
        client: AsyncClient,
        orders_url: str,
        customer: Customer,
        auth_headers: dict,
        closed: str,
    ):
        order_id = await self._create(client, orders_url, customer.id, auth_headers)
        url = f"{orders_url}/{order_id}/status"

        await client.put(url, headers=auth_headers, json={"status": closed})
        response = await client.put(url, headers=auth_headers, json={"status": "pending"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_STATE"
