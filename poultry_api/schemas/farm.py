"""Pydantic schemas for farms and the farm dashboard."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from poultry_api.schemas.validators import reject_null

FarmType = Literal["broiler", "layer", "mixed"]


class FarmCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str | None = None
    province: str | None = None
    district: str | None = None
    subdistrict: str | None = None
    postal_code: str | None = Field(None, max_length=10)
    manager_name: str | None = None
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    farm_type: FarmType = "mixed"
    license_number: str | None = None


class FarmUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    address: str | None = None
    province: str | None = None
    district: str | None = None
    subdistrict: str | None = None
    postal_code: str | None = Field(None, max_length=10)
    manager_name: str | None = None
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    farm_type: FarmType | None = None
    license_number: str | None = None

    _not_null = reject_null("name", "farm_type")


class FarmOut(BaseModel):
    id: int
    owner_id: int
    name: str
    address: str | None
    province: str | None
    district: str | None
    subdistrict: str | None
    postal_code: str | None
    manager_name: str | None
    phone: str | None
    email: str | None
    farm_type: str
    license_number: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FarmSummary(FarmOut):
    house_count: int = 0
    active_batch_count: int = 0


class FarmDetail(FarmOut):
    owner_name: str | None = None
    house_count: int = 0
    batch_count: int = 0
    active_batch_count: int = 0


# ── Dashboard ────────────────────────────────────────────────

class HouseStats(BaseModel):
    total_houses: int = 0
    total_capacity: int = 0
    total_area: float = 0.0


class BatchStats(BaseModel):
    active_batches: int = 0
    completed_batches: int = 0
    total_birds: int = 0


class ProductionStats(BaseModel):
    """Egg output over the trailing 30 days."""
    total_eggs_30d: int = 0
    avg_eggs_per_day: float = 0.0


class FeedStats(BaseModel):
    """Feed use over the trailing 30 days."""
    total_feed_30d: float = 0.0
    avg_feed_per_day: float = 0.0


class ActiveHouse(BaseModel):
    id: int
    house_code: str
    name: str | None
    capacity: int
    batch_id: int | None = None
    batch_code: str | None = None
    current_count: int | None = None
    placement_date: date | None = None
    breed_name: str | None = None
    bird_type: str | None = None


class FarmDashboard(BaseModel):
    house_stats: HouseStats
    batch_stats: BatchStats
    production_stats: ProductionStats
    feed_stats: FeedStats
    active_houses: list[ActiveHouse]
