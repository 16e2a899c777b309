"""Farm service: CRUD plus the farm dashboard aggregates."""

import logging
from datetime import date, timedelta

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.middleware.exceptions import ConflictError, NotFoundError
from poultry_api.models.batch import Batch
from poultry_api.models.breed import Breed
from poultry_api.models.daily_record import DailyRecord
from poultry_api.models.egg_production import EggProduction
from poultry_api.models.farm import Farm
from poultry_api.models.house import House
from poultry_api.models.user import User
from poultry_api.schemas.farm import (
    ActiveHouse,
    BatchStats,
    FarmCreate,
    FarmDashboard,
    FarmDetail,
    FarmSummary,
    FarmUpdate,
    FeedStats,
    HouseStats,
    ProductionStats,
)

logger = logging.getLogger(__name__)

DASHBOARD_WINDOW_DAYS = 30


async def get_farm_or_404(db: AsyncSession, farm_id: int) -> Farm:
    result = await db.execute(
        select(Farm).where(Farm.id == farm_id, Farm.is_active == True)  # noqa: E712
    )
    farm = result.scalar_one_or_none()
    if not farm:
        raise NotFoundError("Farm", farm_id)
    return farm


async def active_batch_count(db: AsyncSession, **where) -> int:
    stmt = select(func.count(Batch.id)).where(Batch.status == "active")
    for column, value in where.items():
        stmt = stmt.where(getattr(Batch, column) == value)
    return (await db.execute(stmt)).scalar() or 0


async def create_farm(body: FarmCreate, owner_id: int, db: AsyncSession) -> Farm:
    farm = Farm(owner_id=owner_id, **body.model_dump())
    db.add(farm)
    await db.flush()
    await db.refresh(farm)

    logger.info(f"Farm {farm.id} '{farm.name}' created by user {owner_id}")
    return farm


async def list_farms(
    db: AsyncSession,
    owner_id: int,
    *,
    farm_type: str | None = None,
    search: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[FarmSummary], int]:
    filters = [Farm.owner_id == owner_id, Farm.is_active == True]  # noqa: E712
    if farm_type:
        filters.append(Farm.farm_type == farm_type)
    if search:
        pattern = f"%{search}%"
        filters.append(or_(
            Farm.name.ilike(pattern),
            Farm.province.ilike(pattern),
            Farm.district.ilike(pattern),
        ))

    total = (await db.execute(select(func.count(Farm.id)).where(*filters))).scalar() or 0

    house_count = (
        select(func.count(House.id))
        .where(House.farm_id == Farm.id, House.is_active == True)  # noqa: E712
        .correlate(Farm)
        .scalar_subquery()
    )
    active_batches = (
        select(func.count(Batch.id))
        .where(Batch.farm_id == Farm.id, Batch.status == "active")
        .correlate(Farm)
        .scalar_subquery()
    )
    result = await db.execute(
        select(Farm, house_count, active_batches)
        .where(*filters)
        .order_by(Farm.created_at.desc(), Farm.id.desc())
        .limit(limit)
        .offset(offset)
    )

    items = []
    for farm, houses, batches in result.all():
        summary = FarmSummary.model_validate(farm)
        summary.house_count = houses or 0
        summary.active_batch_count = batches or 0
        items.append(summary)
    return items, total


async def get_farm_detail(db: AsyncSession, farm_id: int) -> FarmDetail:
    farm = await get_farm_or_404(db, farm_id)

    detail = FarmDetail.model_validate(farm)
    owner = (
        await db.execute(select(User).where(User.id == farm.owner_id))
    ).scalar_one_or_none()
    detail.owner_name = owner.full_name if owner else None
    detail.house_count = (
        await db.execute(
            select(func.count(House.id)).where(
                House.farm_id == farm_id, House.is_active == True  # noqa: E712
            )
        )
    ).scalar() or 0
    detail.batch_count = (
        await db.execute(select(func.count(Batch.id)).where(Batch.farm_id == farm_id))
    ).scalar() or 0
    detail.active_batch_count = await active_batch_count(db, farm_id=farm_id)
    return detail


async def update_farm(farm_id: int, body: FarmUpdate, db: AsyncSession) -> Farm:
    farm = await get_farm_or_404(db, farm_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        setattr(farm, key, value)
    await db.flush()
    await db.refresh(farm)
    return farm


async def delete_farm(farm_id: int, db: AsyncSession) -> Farm:
    """Soft-delete a farm that has no active batch."""
    farm = await get_farm_or_404(db, farm_id)
    if await active_batch_count(db, farm_id=farm_id):
        raise ConflictError(
            "Cannot delete a farm with active batches",
            error_code="FARM_HAS_ACTIVE_BATCHES",
        )
    farm.is_active = False
    await db.flush()

    logger.info(f"Farm {farm_id} deactivated")
    return farm


async def get_dashboard(
    db: AsyncSession,
    farm_id: int,
    today: date | None = None,
) -> FarmDashboard:
    """Farm-wide aggregates: houses, batches and the last 30 days of output."""
    await get_farm_or_404(db, farm_id)
    since = (today or date.today()) - timedelta(days=DASHBOARD_WINDOW_DAYS)

    houses_row = (
        await db.execute(
            select(
                func.count(House.id),
                func.coalesce(func.sum(House.capacity), 0),
                func.coalesce(func.sum(House.area_sqm), 0),
            ).where(House.farm_id == farm_id, House.is_active == True)  # noqa: E712
        )
    ).one()

    batches_row = (
        await db.execute(
            select(
                func.count(case((Batch.status == "active", 1))),
                func.count(case((Batch.status == "completed", 1))),
                func.coalesce(
                    func.sum(case((Batch.status == "active", Batch.current_count), else_=0)), 0
                ),
            ).where(Batch.farm_id == farm_id)
        )
    ).one()

    eggs_row = (
        await db.execute(
            select(
                func.coalesce(func.sum(EggProduction.total_eggs), 0),
                func.coalesce(func.avg(EggProduction.total_eggs), 0),
            )
            .select_from(EggProduction)
            .join(Batch, EggProduction.batch_id == Batch.id)
            .where(Batch.farm_id == farm_id, EggProduction.production_date >= since)
        )
    ).one()

    feed_row = (
        await db.execute(
            select(
                func.coalesce(func.sum(DailyRecord.feed_consumed_kg), 0),
                func.coalesce(func.avg(DailyRecord.feed_consumed_kg), 0),
            )
            .select_from(DailyRecord)
            .join(Batch, DailyRecord.batch_id == Batch.id)
            .where(Batch.farm_id == farm_id, DailyRecord.record_date >= since)
        )
    ).one()

    houses_result = await db.execute(
        select(House, Batch, Breed.name)
        .outerjoin(Batch, (Batch.house_id == House.id) & (Batch.status == "active"))
        .outerjoin(Breed, Batch.breed_id == Breed.id)
        .where(House.farm_id == farm_id, House.is_active == True)  # noqa: E712
        .order_by(House.house_code)
    )
    active_houses = []
    for house, batch, breed_name in houses_result.all():
        active_houses.append(ActiveHouse(
            id=house.id,
            house_code=house.house_code,
            name=house.name,
            capacity=house.capacity,
            batch_id=batch.id if batch else None,
            batch_code=batch.batch_code if batch else None,
            current_count=batch.current_count if batch else None,
            placement_date=batch.placement_date if batch else None,
            breed_name=breed_name,
            bird_type=batch.bird_type if batch else None,
        ))

    return FarmDashboard(
        house_stats=HouseStats(
            total_houses=houses_row[0],
            total_capacity=int(houses_row[1]),
            total_area=round(float(houses_row[2]), 2),
        ),
        batch_stats=BatchStats(
            active_batches=batches_row[0],
            completed_batches=batches_row[1],
            total_birds=int(batches_row[2]),
        ),
        production_stats=ProductionStats(
            total_eggs_30d=int(eggs_row[0]),
            avg_eggs_per_day=round(float(eggs_row[1]), 2),
        ),
        feed_stats=FeedStats(
            total_feed_30d=round(float(feed_row[0]), 2),
            avg_feed_per_day=round(float(feed_row[1]), 2),
        ),
        active_houses=active_houses,
    )
