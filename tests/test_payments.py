"""Tests for recording payments and the derived order payment status."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from poultry_api.models import Customer, Farm
from poultry_api.services.order import derive_payment_status


@pytest.mark.unit
class TestDerivePaymentStatus:
    @pytest.mark.parametrize(
        "paid,expected",
        [
            ("0", "unpaid"),
            ("0.01", "partial"),
            ("99.99", "partial"),
            ("100.00", "paid"),
            ("120.00", "paid"),
        ],
    )
    def test_status_from_running_total(self, paid: str, expected: str):
        assert derive_payment_status(Decimal(paid), Decimal("100.00")) == expected


@pytest.mark.api
@pytest.mark.asyncio
class TestRecordPayment:
    @pytest.fixture
    def orders_url(self, farm: Farm) -> str:
        return f"/api/farms/{farm.id}/orders"

    async def _order_for_100(self, client, orders_url, customer_id, headers) -> int:
        response = await client.post(
            orders_url,
            headers=headers,
            json={
                "customer_id": customer_id,
                "order_date": "2026-10-01",
                "items": [
                    {"product_type": "eggs", "product_name": "Tray of 30", "quantity": 4, "unit_price": "25.00"},
                ],
            },
        )
        assert response.status_code == 201
        return response.json()["data"]["id"]

    async def _pay(self, client, url, headers, amount: str, **extra):
        return await client.post(
            url,
            headers=headers,
            json={
                "payment_date": "2026-10-02",
                "amount": amount,
                "payment_method": "cash",
                **extra,
            },
        )

    async def test_partial_then_paid(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        order_id = await self._order_for_100(client, orders_url, customer.id, auth_headers)
        payments_url = f"{orders_url}/{order_id}/payments"
        order_url = f"{orders_url}/{order_id}"

        first = await self._pay(client, payments_url, auth_headers, "40.00")
        assert first.status_code == 201
        assert first.json()["data"]["payment_number"].startswith("PAY-")
        assert first.json()["data"]["customer_id"] == customer.id

        await self._pay(client, payments_url, auth_headers, "30.00")
        detail = (await client.get(order_url, headers=auth_headers)).json()["data"]
        assert detail["payment_status"] == "partial"
        assert Decimal(str(detail["total_paid"])) == Decimal("70.00")

        await self._pay(client, payments_url, auth_headers, "30.00")
        detail = (await client.get(order_url, headers=auth_headers)).json()["data"]
        assert detail["payment_status"] == "paid"
        assert Decimal(str(detail["total_paid"])) == Decimal("100.00")
        assert len(detail["payments"]) == 3

        paid = await client.get(orders_url, headers=auth_headers, params={"payment_status": "paid"})
        assert [o["id"] for o in paid.json()["data"]["items"]] == [order_id]

    async def test_overpayment_is_paid(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        order_id = await self._order_for_100(client, orders_url, customer.id, auth_headers)

        await self._pay(client, f"{orders_url}/{order_id}/payments", auth_headers, "150.00")
        detail = (await client.get(f"{orders_url}/{order_id}", headers=auth_headers)).json()["data"]

        assert detail["payment_status"] == "paid"

    async def test_duplicate_payment_number(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        order_id = await self._order_for_100(client, orders_url, customer.id, auth_headers)
        url = f"{orders_url}/{order_id}/payments"

        await self._pay(client, url, auth_headers, "10.00", payment_number="PAY-1")
        response = await self._pay(client, url, auth_headers, "10.00", payment_number="PAY-1")

        assert response.status_code == 400
        assert response.json()["error_code"] == "DUPLICATE_PAYMENT_NUMBER"

    async def test_amount_must_be_positive(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        order_id = await self._order_for_100(client, orders_url, customer.id, auth_headers)

        response = await self._pay(client, f"{orders_url}/{order_id}/payments", auth_headers, "0")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "amount"

    async def test_unknown_payment_method(
        self, client: AsyncClient, orders_url: str, customer: Customer, auth_headers: dict
    ):
        order_id = await self._order_for_100(client, orders_url, customer.id, auth_headers)

        response = await self._pay(
            client, f"{orders_url}/{order_id}/payments", auth_headers, "5.00", payment_method="barter"
        )

        assert response.status_code == 400

    async def test_payment_on_unknown_order(
        self, client: AsyncClient, orders_url: str, farm: Farm, auth_headers: dict
    ):
        response = await self._pay(client, f"{orders_url}/9999/payments", auth_headers, "5.00")

        assert response.status_code == 404

    @pytest.mark.parametrize("amount", ["0.004", "10.005"])
    async def test_sub_cent_amount_rejected(
        self,
        client: AsyncClient,
        orders_url: str,
        customer: Customer,
        auth_headers: dict,
        amount: str,
    ):
        order_id = await self._order_for_100(client, orders_url, customer.id, auth_headers)

        response = await self._pay(client, f"{orders_url}/{order_id}/payments", auth_headers, amount)
        detail = (await client.get(f"{orders_url}/{order_id}", headers=auth_headers)).json()["data"]

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "amount"
        assert detail["payments"] == []
        assert detail["payment_status"] == "unpaid"
