"""Tests for farm endpoints and the farm dashboard."""

from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from poultry_api.models import Batch, DailyRecord, Farm, House, User


@pytest.mark.api
@pytest.mark.asyncio
class TestFarmCrud:
    async def test_create_farm_sets_caller_as_owner(
        self, client: AsyncClient, owner: User, auth_headers: dict
    ):
        response = await client.post(
            "/api/farms",
            headers=auth_headers,
            json={"name": "Hilltop Layers", "farm_type": "layer", "province": "Lampang"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["owner_id"] == owner.id
        assert data["farm_type"] == "layer"
        assert data["is_active"] is True

    async def test_create_farm_rejects_unknown_type(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/farms", headers=auth_headers, json={"name": "X", "farm_type": "duck"}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "farm_type"

    async def test_list_farms_only_returns_own_farms(
        self,
        client: AsyncClient,
        db_session,
        farm: Farm,
        house: House,
        other_owner: User,
        auth_headers: dict,
    ):
        db_session.add(Farm(owner_id=other_owner.id, name="Someone Else's Farm"))
        await db_session.commit()

        response = await client.get("/api/farms", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [f["id"] for f in data["items"]] == [farm.id]
        assert data["items"][0]["house_count"] == 1
        assert data["items"][0]["active_batch_count"] == 0
        assert data["pagination"] == {
            "page": 1,
            "limit": 10,
            "total": 1,
            "total_pages": 1,
            "has_next": False,
            "has_prev": False,
        }

    async def test_list_farms_search(
        self, client: AsyncClient, farm: Farm, auth_headers: dict
    ):
        hit = await client.get("/api/farms", headers=auth_headers, params={"search": "sunrise"})
        miss = await client.get("/api/farms", headers=auth_headers, params={"search": "nomatch"})

        assert hit.json()["data"]["pagination"]["total"] == 1
        assert miss.json()["data"]["items"] == []

    async def test_pagination_limit_is_bounded(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/farms", headers=auth_headers, params={"limit": 101})

        assert response.status_code == 400

    async def test_get_farm_detail(
        self, client: AsyncClient, farm: Farm, batch: Batch, auth_headers: dict
    ):
        response = await client.get(f"/api/farms/{farm.id}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Sunrise Poultry"
        assert data["owner_name"] == "Olive Tester"
        assert data["house_count"] == 1
        assert data["batch_count"] == 1
        assert data["active_batch_count"] == 1

    async def test_update_farm_partial(self, client: AsyncClient, farm: Farm, auth_headers: dict):
        response = await client.put(
            f"/api/farms/{farm.id}",
            headers=auth_headers,
            json={"manager_name": "Manee"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["manager_name"] == "Manee"
        assert data["name"] == "Sunrise Poultry"

    @pytest.mark.parametrize("field", ["name", "farm_type"])
    async def test_update_farm_rejects_null_required_field(
        self, client: AsyncClient, farm: Farm, auth_headers: dict, field: str
    ):
        response = await client.put(f"/api/farms/{farm.id}", headers=auth_headers, json={field: None})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert response.json()["errors"][0]["field"] == field

    async def test_delete_farm_blocked_by_active_batch(
        self, client: AsyncClient, farm: Farm, batch: Batch, auth_headers: dict
    ):
        response = await client.delete(f"/api/farms/{farm.id}", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "FARM_HAS_ACTIVE_BATCHES"

    async def test_delete_farm_soft_deletes(
        self, client: AsyncClient, db_session, farm: Farm, auth_headers: dict
    ):
        response = await client.delete(f"/api/farms/{farm.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Farm deleted"}

        await db_session.refresh(farm)
        assert farm.is_active is False

        listed = await client.get("/api/farms", headers=auth_headers)
        assert listed.json()["data"]["items"] == []


@pytest.mark.api
@pytest.mark.asyncio
class TestFarmDashboard:
    async def test_dashboard_aggregates(
        self,
        client: AsyncClient,
        db_session,
        farm: Farm,
        house: House,
        batch: Batch,
        auth_headers: dict,
    ):
        db_session.add(House(farm_id=farm.id, house_code="H-02", capacity=500, area_sqm=100.0))
        today = date.today()
        db_session.add_all([
            DailyRecord(batch_id=batch.id, record_date=today - timedelta(days=1),
                        bird_count=900, feed_consumed_kg=100.0),
            DailyRecord(batch_id=batch.id, record_date=today,
                        bird_count=900, feed_consumed_kg=110.0),
            # Outside the 30-day window
            DailyRecord(batch_id=batch.id, record_date=today - timedelta(days=45),
                        bird_count=900, feed_consumed_kg=999.0),
        ])
        await db_session.commit()

        response = await client.get(f"/api/farms/{farm.id}/dashboard", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["house_stats"] == {
            "total_houses": 2,
            "total_capacity": 1500,
            "total_area": 500.0,
        }
        assert data["batch_stats"] == {
            "active_batches": 1,
            "completed_batches": 0,
            "total_birds": 900,
        }
        assert data["feed_stats"] == {"total_feed_30d": 210.0, "avg_feed_per_day": 105.0}
        assert data["production_stats"]["total_eggs_30d"] == 0

        houses = {h["house_code"]: h for h in data["active_houses"]}
        assert houses["H-01"]["batch_code"] == "B-2026-01"
        assert houses["H-01"]["breed_name"] == "Ross 308"
        assert houses["H-02"]["batch_id"] is None
