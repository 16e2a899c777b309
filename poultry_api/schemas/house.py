"""Pydantic schemas for houses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from poultry_api.schemas.validators import reject_null

HouseType = Literal["open", "closed", "semi_closed"]


class HouseCreate(BaseModel):
    house_code: str = Field(..., min_length=1, max_length=50)
    name: str | None = Field(None, max_length=255)
    house_type: HouseType = "open"
    capacity: int = Field(..., gt=0)
    area_sqm: float | None = Field(None, gt=0)
    width_meters: float | None = Field(None, gt=0)
    length_meters: float | None = Field(None, gt=0)
    height_meters: float | None = Field(None, gt=0)
    ventilation_type: str | None = None


class HouseUpdate(BaseModel):
    house_code: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, max_length=255)
    house_type: HouseType | None = None
    capacity: int | None = Field(None, gt=0)
    area_sqm: float | None = Field(None, gt=0)
    width_meters: float | None = Field(None, gt=0)
    length_meters: float | None = Field(None, gt=0)
    height_meters: float | None = Field(None, gt=0)
    ventilation_type: str | None = None

    _not_null = reject_null("house_code", "house_type", "capacity")


class HouseOut(BaseModel):
    id: int
    farm_id: int
    house_code: str
    name: str | None
    house_type: str
    capacity: int
    area_sqm: float | None
    width_meters: float | None
    length_meters: float | None
    height_meters: float | None
    ventilation_type: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CurrentBatch(BaseModel):
    """The active batch occupying a house, if any."""
    id: int
    batch_code: str
    bird_type: str
    current_count: int
    breed_name: str | None = None


class HouseSummary(HouseOut):
    current_batch: CurrentBatch | None = None


class HouseDetail(HouseOut):
    farm_name: str | None = None
    total_batches: int = 0
    active_batches: int = 0
    completed_batches: int = 0
    current_batch: CurrentBatch | None = None
