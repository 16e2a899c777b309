from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class BreedCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    breed_type: Literal["broiler", "layer"]
    fcr_standard: float | None = Field(None, gt=0)
    description: str | None = None


class BreedOut(BaseModel):
    id: int
    name: str
    breed_type: str
    fcr_standard: float | None
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
