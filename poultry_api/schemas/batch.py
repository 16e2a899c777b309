"""Pydantic schemas for batches, daily records and egg production."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from poultry_api.schemas.validators import reject_null

BirdType = Literal["broiler", "layer"]


# ── Batch ────────────────────────────────────────────────────

class BatchCreate(BaseModel):
    house_id: int = Field(..., gt=0)
    batch_code: str = Field(..., min_length=1, max_length=50)
    breed_id: int = Field(..., gt=0)
    bird_type: BirdType
    initial_count: int = Field(..., gt=0)
    placement_date: date
    expected_harvest_date: date | None = None
    placement_age_days: int = Field(0, ge=0)
    source_farm: str | None = Field(None, max_length=255)
    cost_per_bird: Decimal | None = Field(None, gt=0, decimal_places=2)
    notes: str | None = None


class BatchUpdate(BaseModel):
    batch_code: str | None = Field(None, min_length=1, max_length=50)
    breed_id: int | None = Field(None, gt=0)
    source_farm: str | None = Field(None, max_length=255)
    cost_per_bird: Decimal | None = Field(None, gt=0, decimal_places=2)
    notes: str | None = None

    _not_null = reject_null("batch_code", "breed_id")


class BatchComplete(BaseModel):
    actual_harvest_date: date
    final_count: int | None = Field(None, ge=0)
    notes: str | None = None


class BatchOut(BaseModel):
    id: int
    farm_id: int
    house_id: int
    breed_id: int
    batch_code: str
    bird_type: str
    initial_count: int
    current_count: int
    placement_date: date
    expected_harvest_date: date | None
    actual_harvest_date: date | None
    placement_age_days: int
    source_farm: str | None
    cost_per_bird: Decimal | None
    status: str
    notes: str | None
    completion_notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BatchSummary(BatchOut):
    house_code: str | None = None
    house_name: str | None = None
    breed_name: str | None = None
    breed_type: str | None = None
    mortality_count: int = 0
    days_in_production: int = 0


class FeedStatistics(BaseModel):
    total_feed_kg: float = 0.0
    avg_daily_feed: float = 0.0
    recorded_days: int = 0


class EggStatistics(BaseModel):
    total_eggs: int = 0
    avg_daily_eggs: float = 0.0
    production_days: int = 0


class BatchPerformance(BaseModel):
    fcr: float | None = None
    feed_efficiency: float | None = None
    survival_rate: float = 0.0
    hen_day_production: float | None = None


class BatchDetail(BatchSummary):
    farm_name: str | None = None
    house_capacity: int | None = None
    fcr_standard: float | None = None
    current_age_days: int = 0
    feed_statistics: FeedStatistics = Field(default_factory=FeedStatistics)
    egg_statistics: EggStatistics | None = None
    performance: BatchPerformance = Field(default_factory=BatchPerformance)


# ── Daily records ────────────────────────────────────────────

class DailyRecordCreate(BaseModel):
    record_date: date
    bird_count: int = Field(..., ge=0)
    mortality_count: int = Field(0, ge=0)
    culled_count: int = Field(0, ge=0)
    feed_consumed_kg: float | None = Field(None, gt=0)
    water_consumed_liters: float | None = Field(None, gt=0)
    avg_weight_grams: float | None = Field(None, gt=0)
    temperature_celsius: float | None = None
    humidity_percent: float | None = Field(None, ge=0, le=100)
    notes: str | None = None


class DailyRecordOut(BaseModel):
    id: int
    batch_id: int
    record_date: date
    bird_count: int
    mortality_count: int
    culled_count: int
    feed_consumed_kg: float | None
    water_consumed_liters: float | None
    avg_weight_grams: float | None
    temperature_celsius: float | None
    humidity_percent: float | None
    notes: str | None
    recorded_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Egg production ───────────────────────────────────────────

class EggProductionCreate(BaseModel):
    production_date: date
    total_eggs: int = Field(0, ge=0)
    grade_0_count: int = Field(0, ge=0)
    grade_1_count: int = Field(0, ge=0)
    grade_2_count: int = Field(0, ge=0)
    grade_3_count: int = Field(0, ge=0)
    broken_eggs: int = Field(0, ge=0)
    double_yolk_eggs: int = Field(0, ge=0)
    avg_egg_weight_grams: float | None = Field(None, gt=0)
    notes: str | None = None


class EggProductionOut(BaseModel):
    id: int
    batch_id: int
    production_date: date
    total_eggs: int
    grade_0_count: int
    grade_1_count: int
    grade_2_count: int
    grade_3_count: int
    broken_eggs: int
    double_yolk_eggs: int
    avg_egg_weight_grams: float | None
    notes: str | None
    recorded_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}
