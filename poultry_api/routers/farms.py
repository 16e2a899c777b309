"""Farm router.

Endpoints:
    POST   /api/farms                      Create farm (caller becomes owner)
    GET    /api/farms                      List caller's farms
    GET    /api/farms/{farm_id}            Farm detail
    PUT    /api/farms/{farm_id}            Update farm
    DELETE /api/farms/{farm_id}            Soft-delete farm
    GET    /api/farms/{farm_id}/dashboard  Farm dashboard
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.auth.deps import get_current_user, require_farm_access
from poultry_api.database import get_db
from poultry_api.models.user import User
from poultry_api.schemas.common import (
    ApiResponse,
    MessageResponse,
    Page,
    PageParams,
    build_pagination,
)
from poultry_api.schemas.farm import (
    FarmCreate,
    FarmDashboard,
    FarmDetail,
    FarmOut,
    FarmSummary,
    FarmUpdate,
)
from poultry_api.services import farm as farm_service

router = APIRouter()


@router.post("", response_model=ApiResponse[FarmOut], status_code=status.HTTP_201_CREATED)
async def create_farm(
    body: FarmCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    farm = await farm_service.create_farm(body, user.id, db)
    return ApiResponse(message="Farm created", data=FarmOut.model_validate(farm))


@router.get("", response_model=ApiResponse[Page[FarmSummary]])
async def list_farms(
    farm_type: str | None = Query(None, pattern="^(broiler|layer|mixed)$"),
    search: str | None = None,
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items, total = await farm_service.list_farms(
        db,
        user.id,
        farm_type=farm_type,
        search=search,
        limit=paging.limit,
        offset=paging.offset,
    )
    return ApiResponse(
        message="Farms retrieved",
        data=Page(items=items, pagination=build_pagination(paging.page, paging.limit, total)),
    )


@router.get("/{farm_id}", response_model=ApiResponse[FarmDetail])
async def get_farm(
    farm_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    detail = await farm_service.get_farm_detail(db, farm_id)
    return ApiResponse(message="Farm retrieved", data=detail)


@router.put("/{farm_id}", response_model=ApiResponse[FarmOut])
async def update_farm(
    farm_id: int,
    body: FarmUpdate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    farm = await farm_service.update_farm(farm_id, body, db)
    return ApiResponse(message="Farm updated", data=FarmOut.model_validate(farm))


@router.delete("/{farm_id}", response_model=MessageResponse)
async def delete_farm(
    farm_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    await farm_service.delete_farm(farm_id, db)
    return MessageResponse(message="Farm deleted")


@router.get("/{farm_id}/dashboard", response_model=ApiResponse[FarmDashboard])
async def get_dashboard(
    farm_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    dashboard = await farm_service.get_dashboard(db, farm_id)
    return ApiResponse(message="Dashboard retrieved", data=dashboard)
