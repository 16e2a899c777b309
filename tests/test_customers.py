"""Tests for customer endpoints and customer statistics."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from poultry_api.models import Customer, Farm


def _order(customer_id: int, unit_price: str = "50.00", **extra) -> dict:
    return {
        "customer_id": customer_id,
        "order_date": "2026-10-01",
        "items": [{"product_type": "eggs", "product_name": "Eggs", "quantity": 2, "unit_price": unit_price}],
        **extra,
    }


@pytest.fixture
def customers_url(farm: Farm) -> str:
    return f"/api/farms/{farm.id}/customers"


@pytest.mark.api
@pytest.mark.asyncio
class TestCustomerCrud:
    async def test_create_customer_generates_code(
        self, client: AsyncClient, customers_url: str, farm: Farm, auth_headers: dict
    ):
        response = await client.post(
            customers_url,
            headers=auth_headers,
            json={
                "customer_type": "individual",
                "first_name": "Somchai",
                "last_name": "Jaidee",
                "preferred_products": ["eggs", "live_bird"],
            },
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["customer_code"].startswith("CUST-")
        assert data["farm_id"] == farm.id
        assert data["display_name"] == "Somchai Jaidee"
        assert data["preferred_products"] == ["eggs", "live_bird"]
        assert data["is_active"] is True

    async def test_duplicate_customer_code(
        self, client: AsyncClient, customers_url: str, customer: Customer, auth_headers: dict
    ):
        response = await client.post(
            customers_url,
            headers=auth_headers,
            json={"customer_code": customer.customer_code, "company_name": "Copycat"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "DUPLICATE_CUSTOMER_CODE"

    async def test_invalid_customer_type(
        self, client: AsyncClient, customers_url: str, auth_headers: dict
    ):
        response = await client.post(
            customers_url, headers=auth_headers, json={"customer_type": "wholesaler"}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "customer_type"

    async def test_list_customers_active_filter(
        self,
        client: AsyncClient,
        db_session,
        customers_url: str,
        farm: Farm,
        customer: Customer,
        auth_headers: dict,
    ):
        db_session.add(Customer(
            farm_id=farm.id, customer_code="CUST-OLD", company_name="Closed Shop", is_active=False
        ))
        await db_session.commit()

        active = await client.get(customers_url, headers=auth_headers)
        inactive = await client.get(customers_url, headers=auth_headers, params={"is_active": "false"})
        everyone = await client.get(customers_url, headers=auth_headers, params={"is_active": "all"})
        bogus = await client.get(customers_url, headers=auth_headers, params={"is_active": "maybe"})

        assert [c["customer_code"] for c in active.json()["data"]["items"]] == ["CUST-001"]
        assert [c["customer_code"] for c in inactive.json()["data"]["items"]] == ["CUST-OLD"]
        assert everyone.json()["data"]["pagination"]["total"] == 2
        assert bogus.status_code == 400

    async def test_list_customers_search_and_totals(
        self, client: AsyncClient, farm: Farm, customers_url: str, customer: Customer, auth_headers: dict
    ):
        await client.post(
            f"/api/farms/{farm.id}/orders", headers=auth_headers, json=_order(customer.id)
        )

        response = await client.get(customers_url, headers=auth_headers, params={"search": "golden"})

        items = response.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["total_orders"] == 1
        assert Decimal(str(items[0]["total_spent"])) == Decimal("100.00")
        assert items[0]["last_order_date"] == "2026-10-01"

    async def test_customer_detail(
        self, client: AsyncClient, farm: Farm, customers_url: str, customer: Customer, auth_headers: dict
    ):
        await client.post(
            f"/api/farms/{farm.id}/orders", headers=auth_headers, json=_order(customer.id)
        )

        response = await client.get(f"{customers_url}/{customer.id}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["farm_name"] == farm.name
        assert data["total_orders"] == 1
        assert data["pending_orders"] == 1
        assert Decimal(str(data["outstanding_amount"])) == Decimal("100.00")
        assert len(data["recent_orders"]) == 1

    async def test_update_customer(
        self, client: AsyncClient, customers_url: str, customer: Customer, auth_headers: dict
    ):
        response = await client.put(
            f"{customers_url}/{customer.id}",
            headers=auth_headers,
            json={"payment_terms_days": 30, "credit_limit": "5000"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["payment_terms_days"] == 30
        assert Decimal(str(data["credit_limit"])) == Decimal("5000")
        assert data["company_name"] == "Golden Wok"

    @pytest.mark.parametrize(
        "field", ["customer_type", "credit_limit", "payment_terms_days", "preferred_products"]
    )
    async def test_update_customer_rejects_null_required_field(
        self, client: AsyncClient, customers_url: str, customer: Customer, auth_headers: dict, field: str
    ):
        response = await client.put(
            f"{customers_url}/{customer.id}", headers=auth_headers, json={field: None}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert response.json()["errors"][0]["field"] == field

    async def test_sub_cent_credit_limit_rejected(
        self, client: AsyncClient, customers_url: str, customer: Customer, auth_headers: dict
    ):
        response = await client.put(
            f"{customers_url}/{customer.id}", headers=auth_headers, json={"credit_limit": "100.005"}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "credit_limit"

    async def test_unknown_customer(self, client: AsyncClient, customers_url: str, auth_headers: dict):
        response = await client.get(f"{customers_url}/9999", headers=auth_headers)

        assert response.status_code == 404


@pytest.mark.api
@pytest.mark.asyncio
class TestCustomerDelete:
    async def test_delete_blocked_by_open_order(
        self, client: AsyncClient, farm: Farm, customers_url: str, customer: Customer, auth_headers: dict
    ):
        await client.post(
            f"/api/farms/{farm.id}/orders", headers=auth_headers, json=_order(customer.id)
        )

        response = await client.delete(f"{customers_url}/{customer.id}", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "CUSTOMER_HAS_OPEN_ORDERS"

    async def test_delete_allowed_once_orders_closed(
        self,
        client: AsyncClient,
        db_session,
        farm: Farm,
        customers_url: str,
        customer: Customer,
        auth_headers: dict,
    ):
        orders_url = f"/api/farms/{farm.id}/orders"
        delivered = await client.post(orders_url, headers=auth_headers, json=_order(customer.id))
        cancelled = await client.post(orders_url, headers=auth_headers, json=_order(customer.id))
        for created, status in ((delivered, "delivered"), (cancelled, "cancelled")):
            await client.put(
                f"{orders_url}/{created.json()['data']['id']}/status",
                headers=auth_headers,
                json={"status": status},
            )

        response = await client.delete(f"{customers_url}/{customer.id}", headers=auth_headers)

        assert response.status_code == 200
        await db_session.refresh(customer)
        assert customer.is_active is False

        # Soft-deleted customers can no longer be ordered for
        rejected = await client.post(orders_url, headers=auth_headers, json=_order(customer.id))
        assert rejected.status_code == 404

    async def test_deleted_customer_frees_its_code(
        self, client: AsyncClient, customers_url: str, customer: Customer, auth_headers: dict
    ):
        await client.delete(f"{customers_url}/{customer.id}", headers=auth_headers)

        response = await client.post(
            customers_url,
            headers=auth_headers,
            json={"customer_code": customer.customer_code, "company_name": "New Owner"},
        )

        assert response.status_code == 201


@pytest.mark.api
@pytest.mark.asyncio
class TestCustomerOrdersAndStats:
    async def test_customer_orders(
        self,
        client: AsyncClient,
        db_session,
        farm: Farm,
        customers_url: str,
        customer: Customer,
        auth_headers: dict,
    ):
        other = Customer(farm_id=farm.id, customer_code="CUST-002", first_name="Niran")
        db_session.add(other)
        await db_session.commit()

        orders_url = f"/api/farms/{farm.id}/orders"
        await client.post(orders_url, headers=auth_headers, json=_order(customer.id, order_number="ORD-GW"))
        await client.post(orders_url, headers=auth_headers, json=_order(other.id, order_number="ORD-NR"))

        response = await client.get(f"{customers_url}/{customer.id}/orders", headers=auth_headers)
        filtered = await client.get(
            f"{customers_url}/{customer.id}/orders",
            headers=auth_headers,
            params={"status": "delivered"},
        )

        assert response.status_code == 200
        assert [o["order_number"] for o in response.json()["data"]["items"]] == ["ORD-GW"]
        assert filtered.json()["data"]["items"] == []

    async def test_orders_of_unknown_customer(
        self, client: AsyncClient, customers_url: str, auth_headers: dict
    ):
        response = await client.get(f"{customers_url}/9999/orders", headers=auth_headers)

        assert response.status_code == 404

    async def test_customer_stats(
        self,
        client: AsyncClient,
        db_session,
        farm: Farm,
        customers_url: str,
        customer: Customer,
        auth_headers: dict,
    ):
        other = Customer(farm_id=farm.id, customer_code="CUST-002", customer_type="retail",
                         company_name="Corner Mart")
        db_session.add(other)
        await db_session.commit()

        orders_url = f"/api/farms/{farm.id}/orders"
        await client.post(orders_url, headers=auth_headers, json=_order(customer.id, "50.00"))
        await client.post(orders_url, headers=auth_headers, json=_order(customer.id, "25.00"))
        await client.post(orders_url, headers=auth_headers, json=_order(other.id, "10.00"))

        response = await client.get(f"{customers_url}/stats", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["customer_stats"]["total_customers"] == 2
        assert data["customer_stats"]["restaurant_customers"] == 1
        assert data["customer_stats"]["retail_customers"] == 1
        assert data["order_stats"]["total_orders"] == 3
        assert Decimal(str(data["order_stats"]["total_revenue"])) == Decimal("170.00")
        assert Decimal(str(data["order_stats"]["average_order_value"])) == Decimal("56.67")
        assert data["order_stats"]["customers_with_orders"] == 2
        top = data["top_customers"]
        assert [t["customer_code"] for t in top] == ["CUST-001", "CUST-002"]
        assert top[0]["order_count"] == 2
        assert Decimal(str(top[0]["total_spent"])) == Decimal("150.00")
