"""Breed reference data.

Endpoints:
    GET  /api/breeds     List breeds (any authenticated user)
    POST /api/breeds     Create breed (admin only)
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.auth.deps import require_role
from poultry_api.auth.permissions import roles_for
from poultry_api.database import get_db
from poultry_api.middleware.exceptions import ConflictError
from poultry_api.models.breed import Breed
from poultry_api.models.user import User
from poultry_api.schemas.breed import BreedCreate, BreedOut
from poultry_api.schemas.common import ApiResponse

router = APIRouter()


@router.get("", response_model=ApiResponse[list[BreedOut]])
async def list_breeds(
    breed_type: str | None = Query(None, pattern="^(broiler|layer)$"),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_role(*roles_for("breeds.read"))),
):
    query = select(Breed)
    if breed_type:
        query = query.where(Breed.breed_type == breed_type)
    result = await db.execute(query.order_by(Breed.name))
    return ApiResponse(
        message="Breeds retrieved",
        data=[BreedOut.model_validate(b) for b in result.scalars().all()],
    )


@router.post("", response_model=ApiResponse[BreedOut], status_code=status.HTTP_201_CREATED)
async def create_breed(
    body: BreedCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_role(*roles_for("breeds.write"))),
):
    existing = await db.execute(select(Breed.id).where(Breed.name == body.name))
    if existing.first():
        raise ConflictError(f"Breed already exists: {body.name}", error_code="DUPLICATE_BREED")

    breed = Breed(**body.model_dump())
    db.add(breed)
    await db.flush()
    await db.refresh(breed)
    return ApiResponse(message="Breed created", data=BreedOut.model_validate(breed))
