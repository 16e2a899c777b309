"""Batch router (nested under a farm).

Endpoints:
    POST /api/farms/{farm_id}/batches                          Place a batch in a house
    GET  /api/farms/{farm_id}/batches                          List batches
    GET  /api/farms/{farm_id}/batches/{batch_id}               Batch detail with performance
    PUT  /api/farms/{farm_id}/batches/{batch_id}               Update an active batch
    POST /api/farms/{farm_id}/batches/{batch_id}/complete      Close a batch at harvest
    POST /api/farms/{farm_id}/batches/{batch_id}/daily-records Record a day's data
    GET  /api/farms/{farm_id}/batches/{batch_id}/daily-records Daily record history
    POST /api/farms/{farm_id}/batches/{batch_id}/egg-production Record egg collection
    GET  /api/farms/{farm_id}/batches/{batch_id}/egg-production Egg collection history
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.auth.deps import require_farm_access
from poultry_api.database import get_db
from poultry_api.models.user import User
from poultry_api.schemas.batch import (
    BatchComplete,
    BatchCreate,
    BatchDetail,
    BatchOut,
    BatchSummary,
    BatchUpdate,
    DailyRecordCreate,
    DailyRecordOut,
    EggProductionCreate,
    EggProductionOut,
)
from poultry_api.schemas.common import ApiResponse, Page, PageParams, build_pagination
from poultry_api.services import batch as batch_service

router = APIRouter()


@router.post("", response_model=ApiResponse[BatchSummary], status_code=status.HTTP_201_CREATED)
async def create_batch(
    farm_id: int,
    body: BatchCreate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    batch = await batch_service.create_batch(farm_id, body, db)
    summary = await batch_service.get_batch_summary(db, batch)
    return ApiResponse(message="Batch created", data=summary)


@router.get("", response_model=ApiResponse[Page[BatchSummary]])
async def list_batches(
    farm_id: int,
    batch_status: str | None = Query(None, alias="status", pattern="^(active|completed)$"),
    bird_type: str | None = Query(None, pattern="^(broiler|layer)$"),
    house_id: int | None = None,
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    items, total = await batch_service.list_batches(
        db,
        farm_id,
        status=batch_status,
        bird_type=bird_type,
        house_id=house_id,
        limit=paging.limit,
        offset=paging.offset,
    )
    return ApiResponse(
        message="Batches retrieved",
        data=Page(items=items, pagination=build_pagination(paging.page, paging.limit, total)),
    )


@router.get("/{batch_id}", response_model=ApiResponse[BatchDetail])
async def get_batch(
    farm_id: int,
    batch_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    detail = await batch_service.get_batch_detail(db, farm_id, batch_id)
    return ApiResponse(message="Batch retrieved", data=detail)


@router.put("/{batch_id}", response_model=ApiResponse[BatchOut])
async def update_batch(
    farm_id: int,
    batch_id: int,
    body: BatchUpdate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    batch = await batch_service.update_batch(farm_id, batch_id, body, db)
    return ApiResponse(message="Batch updated", data=BatchOut.model_validate(batch))


@router.post("/{batch_id}/complete", response_model=ApiResponse[BatchOut])
async def complete_batch(
    farm_id: int,
    batch_id: int,
    body: BatchComplete,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    batch = await batch_service.complete_batch(farm_id, batch_id, body, db)
    return ApiResponse(message="Batch completed", data=BatchOut.model_validate(batch))


# ── Daily records ───────────────────────────────────────────

@router.post(
    "/{batch_id}/daily-records",
    response_model=ApiResponse[DailyRecordOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_daily_record(
    farm_id: int,
    batch_id: int,
    body: DailyRecordCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_farm_access),
):
    record = await batch_service.create_daily_record(farm_id, batch_id, body, user.id, db)
    return ApiResponse(message="Daily record created", data=DailyRecordOut.model_validate(record))


@router.get("/{batch_id}/daily-records", response_model=ApiResponse[Page[DailyRecordOut]])
async def list_daily_records(
    farm_id: int,
    batch_id: int,
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    records, total = await batch_service.list_daily_records(
        db, farm_id, batch_id, limit=paging.limit, offset=paging.offset
    )
    return ApiResponse(
        message="Daily records retrieved",
        data=Page(
            items=[DailyRecordOut.model_validate(r) for r in records],
            pagination=build_pagination(paging.page, paging.limit, total),
        ),
    )


# ── Egg production ──────────────────────────────────────────

@router.post(
    "/{batch_id}/egg-production",
    response_model=ApiResponse[EggProductionOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_egg_production(
    farm_id: int,
    batch_id: int,
    body: EggProductionCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_farm_access),
):
    record = await batch_service.create_egg_production(farm_id, batch_id, body, user.id, db)
    return ApiResponse(
        message="Egg production recorded",
        data=EggProductionOut.model_validate(record),
    )


@router.get("/{batch_id}/egg-production", response_model=ApiResponse[Page[EggProductionOut]])
async def list_egg_production(
    farm_id: int,
    batch_id: int,
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    records, total = await batch_service.list_egg_production(
        db, farm_id, batch_id, limit=paging.limit, offset=paging.offset
    )
    return ApiResponse(
        message="Egg production retrieved",
        data=Page(
            items=[EggProductionOut.model_validate(r) for r in records],
            pagination=build_pagination(paging.page, paging.limit, total),
        ),
    )
