"""House service."""

import logging

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.middleware.exceptions import ConflictError, NotFoundError
from poultry_api.models.batch import Batch
from poultry_api.models.breed import Breed
from poultry_api.models.farm import Farm
from poultry_api.models.house import House
from poultry_api.schemas.batch import BatchSummary
from poultry_api.schemas.house import (
    CurrentBatch,
    HouseCreate,
    HouseDetail,
    HouseSummary,
    HouseUpdate,
)
from poultry_api.services.farm import active_batch_count
from poultry_api.utils.production import days_in_production, mortality_count

logger = logging.getLogger(__name__)


async def get_house_or_404(db: AsyncSession, farm_id: int, house_id: int) -> House:
    result = await db.execute(
        select(House).where(
            House.id == house_id,
            House.farm_id == farm_id,
            House.is_active == True,  # noqa: E712
        )
    )
    house = result.scalar_one_or_none()
    if not house:
        raise NotFoundError("House", house_id)
    return house


async def _house_code_taken(
    db: AsyncSession,
    farm_id: int,
    house_code: str,
    exclude_id: int | None = None,
) -> bool:
    stmt = select(House.id).where(
        House.farm_id == farm_id,
        House.house_code == house_code,
        House.is_active == True,  # noqa: E712
    )
    if exclude_id is not None:
        stmt = stmt.where(House.id != exclude_id)
    return (await db.execute(stmt)).first() is not None


async def _current_batches(db: AsyncSession, house_ids: list[int]) -> dict[int, CurrentBatch]:
    if not house_ids:
        return {}
    result = await db.execute(
        select(Batch, Breed.name)
        .outerjoin(Breed, Batch.breed_id == Breed.id)
        .where(Batch.house_id.in_(house_ids), Batch.status == "active")
    )
    return {
        batch.house_id: CurrentBatch(
            id=batch.id,
            batch_code=batch.batch_code,
            bird_type=batch.bird_type,
            current_count=batch.current_count,
            breed_name=breed_name,
        )
        for batch, breed_name in result.all()
    }


async def create_house(farm_id: int, body: HouseCreate, db: AsyncSession) -> House:
    if await _house_code_taken(db, farm_id, body.house_code):
        raise ConflictError(
            f"House code already exists in this farm: {body.house_code}",
            error_code="DUPLICATE_HOUSE_CODE",
        )

    house = House(farm_id=farm_id, **body.model_dump())
    db.add(house)
    await db.flush()
    await db.refresh(house)

    logger.info(f"House {house.house_code} created in farm {farm_id}")
    return house


async def list_houses(
    db: AsyncSession,
    farm_id: int,
    *,
    house_type: str | None = None,
    search: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[HouseSummary], int]:
    filters = [House.farm_id == farm_id, House.is_active == True]  # noqa: E712
    if house_type:
        filters.append(House.house_type == house_type)
    if search:
        pattern = f"%{search}%"
        filters.append(or_(House.house_code.ilike(pattern), House.name.ilike(pattern)))

    total = (await db.execute(select(func.count(House.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(House)
        .where(*filters)
        .order_by(House.house_code)
        .limit(limit)
        .offset(offset)
    )
    houses = list(result.scalars().all())
    current = await _current_batches(db, [h.id for h in houses])

    items = []
    for house in houses:
        summary = HouseSummary.model_validate(house)
        summary.current_batch = current.get(house.id)
        items.append(summary)
    return items, total


async def get_house_detail(db: AsyncSession, farm_id: int, house_id: int) -> HouseDetail:
    house = await get_house_or_404(db, farm_id, house_id)

    counts = (
        await db.execute(
            select(
                func.count(Batch.id),
                func.count(case((Batch.status == "active", 1))),
                func.count(case((Batch.status == "completed", 1))),
            ).where(Batch.house_id == house_id)
        )
    ).one()

    detail = HouseDetail.model_validate(house)
    detail.farm_name = (
        await db.execute(select(Farm.name).where(Farm.id == farm_id))
    ).scalar_one_or_none()
    detail.total_batches, detail.active_batches, detail.completed_batches = counts
    detail.current_batch = (await _current_batches(db, [house.id])).get(house.id)
    return detail


async def update_house(
    farm_id: int,
    house_id: int,
    body: HouseUpdate,
    db: AsyncSession,
) -> House:
    house = await get_house_or_404(db, farm_id, house_id)
    updates = body.model_dump(exclude_unset=True)

    new_code = updates.get("house_code")
    if new_code and await _house_code_taken(db, farm_id, new_code, exclude_id=house_id):
        raise ConflictError(
            f"House code already exists in this farm: {new_code}",
            error_code="DUPLICATE_HOUSE_CODE",
        )

    for key, value in updates.items():
        setattr(house, key, value)
    await db.flush()
    await db.refresh(house)
    return house


async def delete_house(farm_id: int, house_id: int, db: AsyncSession) -> House:
    """Soft-delete a house that has no active batch."""
    house = await get_house_or_404(db, farm_id, house_id)
    if await active_batch_count(db, house_id=house_id):
        raise ConflictError(
            "Cannot delete a house with an active batch",
            error_code="HOUSE_HAS_ACTIVE_BATCH",
        )
    house.is_active = False
    await db.flush()

    logger.info(f"House {house.house_code} deactivated in farm {farm_id}")
    return house


async def list_house_batches(
    db: AsyncSession,
    farm_id: int,
    house_id: int,
    *,
    status: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[BatchSummary], int]:
    """Batch history of one house, newest placement first."""
    house = await get_house_or_404(db, farm_id, house_id)

    filters = [Batch.house_id == house_id, Batch.farm_id == farm_id]
    if status:
        filters.append(Batch.status == status)

    total = (await db.execute(select(func.count(Batch.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(Batch, Breed.name, Breed.breed_type)
        .outerjoin(Breed, Batch.breed_id == Breed.id)
        .where(*filters)
        .order_by(Batch.placement_date.desc(), Batch.id.desc())
        .limit(limit)
        .offset(offset)
    )

    items = []
    for batch, breed_name, breed_type in result.all():
        summary = BatchSummary.model_validate(batch)
        summary.house_code = house.house_code
        summary.house_name = house.name
        summary.breed_name = breed_name
        summary.breed_type = breed_type
        summary.mortality_count = mortality_count(batch.initial_count, batch.current_count)
        summary.days_in_production = days_in_production(
            batch.placement_date, batch.actual_harvest_date
        )
        items.append(summary)
    return items, total
