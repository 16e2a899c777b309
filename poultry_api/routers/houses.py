"""House router (nested under a farm).

Endpoints:
    POST   /api/farms/{farm_id}/houses                     Create house
    GET    /api/farms/{farm_id}/houses                     List houses
    GET    /api/farms/{farm_id}/houses/{house_id}          House detail
    PUT    /api/farms/{farm_id}/houses/{house_id}          Update house
    DELETE /api/farms/{farm_id}/houses/{house_id}          Soft-delete house
    GET    /api/farms/{farm_id}/houses/{house_id}/batches  Batch history
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.auth.deps import require_farm_access
from poultry_api.database import get_db
from poultry_api.models.user import User
from poultry_api.schemas.batch import BatchSummary
from poultry_api.schemas.common import (
    ApiResponse,
    MessageResponse,
    Page,
    PageParams,
    build_pagination,
)
from poultry_api.schemas.house import (
    HouseCreate,
    HouseDetail,
    HouseOut,
    HouseSummary,
    HouseUpdate,
)
from poultry_api.services import house as house_service

router = APIRouter()


@router.post("", response_model=ApiResponse[HouseOut], status_code=status.HTTP_201_CREATED)
async def create_house(
    farm_id: int,
    body: HouseCreate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    house = await house_service.create_house(farm_id, body, db)
    return ApiResponse(message="House created", data=HouseOut.model_validate(house))


@router.get("", response_model=ApiResponse[Page[HouseSummary]])
async def list_houses(
    farm_id: int,
    house_type: str | None = Query(None, pattern="^(open|closed|semi_closed)$"),
    search: str | None = None,
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    items, total = await house_service.list_houses(
        db,
        farm_id,
        house_type=house_type,
        search=search,
        limit=paging.limit,
        offset=paging.offset,
    )
    return ApiResponse(
        message="Houses retrieved",
        data=Page(items=items, pagination=build_pagination(paging.page, paging.limit, total)),
    )


@router.get("/{house_id}", response_model=ApiResponse[HouseDetail])
async def get_house(
    farm_id: int,
    house_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    detail = await house_service.get_house_detail(db, farm_id, house_id)
    return ApiResponse(message="House retrieved", data=detail)


@router.put("/{house_id}", response_model=ApiResponse[HouseOut])
async def update_house(
    farm_id: int,
    house_id: int,
    body: HouseUpdate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    house = await house_service.update_house(farm_id, house_id, body, db)
    return ApiResponse(message="House updated", data=HouseOut.model_validate(house))


@router.delete("/{house_id}", response_model=MessageResponse)
async def delete_house(
    farm_id: int,
    house_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    await house_service.delete_house(farm_id, house_id, db)
    return MessageResponse(message="House deleted")


@router.get("/{house_id}/batches", response_model=ApiResponse[Page[BatchSummary]])
async def list_house_batches(
    farm_id: int,
    house_id: int,
    batch_status: str | None = Query(None, alias="status", pattern="^(active|completed)$"),
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    items, total = await house_service.list_house_batches(
        db,
        farm_id,
        house_id,
        status=batch_status,
        limit=paging.limit,
        offset=paging.offset,
    )
    return ApiResponse(
        message="House batches retrieved",
        data=Page(items=items, pagination=build_pagination(paging.page, paging.limit, total)),
    )
