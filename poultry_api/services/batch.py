"""Batch service: flock placement, husbandry records and completion.

Handles:
  - Placing a batch in a house (code uniqueness, one active batch per
    house, house capacity) with a default expected harvest date
  - Daily records, which reduce `current_count` by mortality and culling
  - Egg production records for layer flocks
  - Completing a batch and the read-time performance figures
    (FCR, survival rate, hen-day production)
"""

import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.middleware.exceptions import (
    CapacityExceededError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
)
from poultry_api.models.batch import Batch
from poultry_api.models.breed import Breed
from poultry_api.models.daily_record import DailyRecord
from poultry_api.models.egg_production import EggProduction
from poultry_api.models.farm import Farm
from poultry_api.models.house import House
from poultry_api.schemas.batch import (
    BatchComplete,
    BatchCreate,
    BatchDetail,
    BatchPerformance,
    BatchSummary,
    BatchUpdate,
    DailyRecordCreate,
    EggProductionCreate,
    EggStatistics,
    FeedStatistics,
)
from poultry_api.utils import production

logger = logging.getLogger(__name__)


# ── Lookups ─────────────────────────────────────────────────

async def get_batch_or_404(db: AsyncSession, farm_id: int, batch_id: int) -> Batch:
    result = await db.execute(
        select(Batch).where(Batch.id == batch_id, Batch.farm_id == farm_id)
    )
    batch = result.scalar_one_or_none()
    if not batch:
        raise NotFoundError("Batch", batch_id)
    return batch


async def get_active_batch(db: AsyncSession, farm_id: int, batch_id: int) -> Batch:
    batch = await get_batch_or_404(db, farm_id, batch_id)
    if batch.status != "active":
        raise InvalidStateError(f"Batch {batch.batch_code} is not active")
    return batch


async def _batch_code_taken(
    db: AsyncSession,
    farm_id: int,
    batch_code: str,
    exclude_id: int | None = None,
) -> bool:
    stmt = select(Batch.id).where(Batch.farm_id == farm_id, Batch.batch_code == batch_code)
    if exclude_id is not None:
        stmt = stmt.where(Batch.id != exclude_id)
    return (await db.execute(stmt)).first() is not None


async def _ensure_breed(db: AsyncSession, breed_id: int) -> Breed:
    breed = (await db.execute(select(Breed).where(Breed.id == breed_id))).scalar_one_or_none()
    if not breed:
        raise NotFoundError("Breed", breed_id)
    return breed


def _duplicate_code(batch_code: str) -> ConflictError:
    return ConflictError(
        f"Batch code already exists in this farm: {batch_code}",
        error_code="DUPLICATE_BATCH_CODE",
    )


# ── Create ──────────────────────────────────────────────────

async def create_batch(farm_id: int, body: BatchCreate, db: AsyncSession) -> Batch:
    """Place a new batch in a house.

    Raises:
        ConflictError if the batch code is used in the farm or the house
        already holds an active batch.
        NotFoundError if the house (active, in this farm) or breed is missing.
        CapacityExceededError if initial_count exceeds the house capacity.
    """
    if await _batch_code_taken(db, farm_id, body.batch_code):
        raise _duplicate_code(body.batch_code)

    house = (
        await db.execute(
            select(House).where(
                House.id == body.house_id,
                House.farm_id == farm_id,
                House.is_active == True,  # noqa: E712
            )
        )
    ).scalar_one_or_none()
    if not house:
        raise NotFoundError("House", body.house_id)

    occupied = (
        await db.execute(
            select(Batch.id).where(Batch.house_id == house.id, Batch.status == "active")
        )
    ).first()
    if occupied:
        raise ConflictError(
            f"House {house.house_code} already has an active batch",
            error_code="HOUSE_OCCUPIED",
        )

    if body.initial_count > house.capacity:
        raise CapacityExceededError(house.capacity)

    await _ensure_breed(db, body.breed_id)

    expected_harvest = body.expected_harvest_date or production.calculate_expected_harvest_date(
        body.placement_date, body.bird_type, body.placement_age_days
    )

    batch = Batch(
        farm_id=farm_id,
        house_id=house.id,
        breed_id=body.breed_id,
        batch_code=body.batch_code,
        bird_type=body.bird_type,
        initial_count=body.initial_count,
        current_count=body.initial_count,
        placement_date=body.placement_date,
        expected_harvest_date=expected_harvest,
        placement_age_days=body.placement_age_days,
        source_farm=body.source_farm,
        cost_per_bird=body.cost_per_bird,
        notes=body.notes,
        status="active",
    )
    db.add(batch)
    await db.flush()
    await db.refresh(batch)

    logger.info(
        f"Batch {batch.batch_code} placed in house {house.house_code} "
        f"(farm {farm_id}, {batch.initial_count} birds)"
    )
    return batch


# ── Reads ───────────────────────────────────────────────────

async def _summary_row(db: AsyncSession, batch: Batch) -> tuple:
    row = (
        await db.execute(
            select(House.house_code, House.name, House.capacity, Breed.name, Breed.breed_type, Breed.fcr_standard)
            .select_from(Batch)
            .outerjoin(House, Batch.house_id == House.id)
            .outerjoin(Breed, Batch.breed_id == Breed.id)
            .where(Batch.id == batch.id)
        )
    ).one()
    return tuple(row)


def _fill_summary(summary: BatchSummary, batch: Batch, today: date | None = None) -> BatchSummary:
    summary.mortality_count = production.mortality_count(batch.initial_count, batch.current_count)
    summary.days_in_production = production.days_in_production(
        batch.placement_date, batch.actual_harvest_date, today
    )
    return summary


async def get_batch_summary(db: AsyncSession, batch: Batch) -> BatchSummary:
    house_code, house_name, _, breed_name, breed_type, _ = await _summary_row(db, batch)
    summary = BatchSummary.model_validate(batch)
    summary.house_code = house_code
    summary.house_name = house_name
    summary.breed_name = breed_name
    summary.breed_type = breed_type
    return _fill_summary(summary, batch)


async def list_batches(
    db: AsyncSession,
    farm_id: int,
    *,
    status: str | None = None,
    bird_type: str | None = None,
    house_id: int | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[BatchSummary], int]:
    filters = [Batch.farm_id == farm_id]
    if status:
        filters.append(Batch.status == status)
    if bird_type:
        filters.append(Batch.bird_type == bird_type)
    if house_id:
        filters.append(Batch.house_id == house_id)

    total = (await db.execute(select(func.count(Batch.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(Batch, House.house_code, House.name, Breed.name, Breed.breed_type)
        .outerjoin(House, Batch.house_id == House.id)
        .outerjoin(Breed, Batch.breed_id == Breed.id)
        .where(*filters)
        .order_by(Batch.placement_date.desc(), Batch.id.desc())
        .limit(limit)
        .offset(offset)
    )

    items = []
    for batch, house_code, house_name, breed_name, breed_type in result.all():
        summary = BatchSummary.model_validate(batch)
        summary.house_code = house_code
        summary.house_name = house_name
        summary.breed_name = breed_name
        summary.breed_type = breed_type
        items.append(_fill_summary(summary, batch))
    return items, total


async def _feed_statistics(db: AsyncSession, batch_id: int) -> FeedStatistics:
    row = (
        await db.execute(
            select(
                func.coalesce(func.sum(DailyRecord.feed_consumed_kg), 0),
                func.coalesce(func.avg(DailyRecord.feed_consumed_kg), 0),
                func.count(DailyRecord.id),
            ).where(DailyRecord.batch_id == batch_id)
        )
    ).one()
    return FeedStatistics(
        total_feed_kg=round(float(row[0]), 2),
        avg_daily_feed=round(float(row[1]), 2),
        recorded_days=row[2],
    )


async def _egg_statistics(db: AsyncSession, batch_id: int) -> EggStatistics:
    row = (
        await db.execute(
            select(
                func.coalesce(func.sum(EggProduction.total_eggs), 0),
                func.coalesce(func.avg(EggProduction.total_eggs), 0),
                func.count(EggProduction.id),
            ).where(EggProduction.batch_id == batch_id)
        )
    ).one()
    return EggStatistics(
        total_eggs=int(row[0]),
        avg_daily_eggs=round(float(row[1]), 2),
        production_days=row[2],
    )


async def _weight_gain_kg(db: AsyncSession, batch: Batch) -> float | None:
    weighed = (
        select(DailyRecord.avg_weight_grams)
        .where(DailyRecord.batch_id == batch.id, DailyRecord.avg_weight_grams.is_not(None))
    )
    first = (
        await db.execute(weighed.order_by(DailyRecord.record_date.asc()).limit(1))
    ).scalar_one_or_none()
    last = (
        await db.execute(weighed.order_by(DailyRecord.record_date.desc()).limit(1))
    ).scalar_one_or_none()
    return production.calculate_weight_gain_kg(first, last, batch.current_count)


async def get_batch_detail(
    db: AsyncSession,
    farm_id: int,
    batch_id: int,
    today: date | None = None,
) -> BatchDetail:
    """Batch with house/breed info, feed and egg aggregates and performance."""
    batch = await get_batch_or_404(db, farm_id, batch_id)
    house_code, house_name, capacity, breed_name, breed_type, fcr_standard = await _summary_row(db, batch)

    detail = BatchDetail.model_validate(batch)
    detail.farm_name = (
        await db.execute(select(Farm.name).where(Farm.id == farm_id))
    ).scalar_one_or_none()
    detail.house_code = house_code
    detail.house_name = house_name
    detail.house_capacity = capacity
    detail.breed_name = breed_name
    detail.breed_type = breed_type
    detail.fcr_standard = fcr_standard
    _fill_summary(detail, batch, today)
    detail.current_age_days = (
        production.calculate_bird_age(batch.placement_date, today) + batch.placement_age_days
    )

    detail.feed_statistics = await _feed_statistics(db, batch.id)
    if batch.bird_type == "layer":
        detail.egg_statistics = await _egg_statistics(db, batch.id)

    fcr = production.calculate_fcr(
        detail.feed_statistics.total_feed_kg, await _weight_gain_kg(db, batch)
    )
    detail.performance = BatchPerformance(
        fcr=fcr,
        feed_efficiency=production.calculate_feed_efficiency(fcr),
        survival_rate=production.calculate_survival_rate(batch.initial_count, batch.current_count),
        hen_day_production=(
            production.calculate_hen_day_production(
                detail.egg_statistics.avg_daily_eggs, batch.current_count
            )
            if detail.egg_statistics is not None
            else None
        ),
    )
    return detail


# ── Update / complete ───────────────────────────────────────

async def update_batch(
    farm_id: int,
    batch_id: int,
    body: BatchUpdate,
    db: AsyncSession,
) -> Batch:
    batch = await get_active_batch(db, farm_id, batch_id)
    updates = body.model_dump(exclude_unset=True)

    new_code = updates.get("batch_code")
    if new_code and await _batch_code_taken(db, farm_id, new_code, exclude_id=batch.id):
        raise _duplicate_code(new_code)
    if updates.get("breed_id") is not None:
        await _ensure_breed(db, updates["breed_id"])

    for key, value in updates.items():
        setattr(batch, key, value)
    await db.flush()
    await db.refresh(batch)
    return batch


async def complete_batch(
    farm_id: int,
    batch_id: int,
    body: BatchComplete,
    db: AsyncSession,
) -> Batch:
    """Close an active batch at harvest.

    Raises:
        InvalidStateError if the batch is not active or final_count is
        larger than the birds still on hand.
    """
    batch = await get_active_batch(db, farm_id, batch_id)

    if body.final_count is not None:
        if body.final_count > batch.current_count:
            raise InvalidStateError(
                f"Final count {body.final_count} exceeds current count {batch.current_count}"
            )
        batch.current_count = body.final_count

    batch.status = "completed"
    batch.actual_harvest_date = body.actual_harvest_date
    if body.notes is not None:
        batch.completion_notes = body.notes
    await db.flush()
    await db.refresh(batch)

    logger.info(
        f"Batch {batch.batch_code} completed on {batch.actual_harvest_date} "
        f"with {batch.current_count} birds"
    )
    return batch


# ── Daily records ───────────────────────────────────────────

async def create_daily_record(
    farm_id: int,
    batch_id: int,
    body: DailyRecordCreate,
    user_id: int,
    db: AsyncSession,
) -> DailyRecord:
    """Record one day of data and deduct mortality and culls from the flock."""
    batch = await get_active_batch(db, farm_id, batch_id)

    exists = (
        await db.execute(
            select(DailyRecord.id).where(
                DailyRecord.batch_id == batch.id,
                DailyRecord.record_date == body.record_date,
            )
        )
    ).first()
    if exists:
        raise ConflictError(
            f"A daily record already exists for {body.record_date}",
            error_code="DUPLICATE_DAILY_RECORD",
        )

    record = DailyRecord(batch_id=batch.id, recorded_by=user_id, **body.model_dump())
    db.add(record)

    losses = body.mortality_count + body.culled_count
    batch.current_count = max(batch.current_count - losses, 0)
    await db.flush()
    await db.refresh(record)

    if losses:
        logger.info(
            f"Batch {batch.batch_code}: {losses} birds lost on {body.record_date}, "
            f"{batch.current_count} remaining"
        )
    return record


async def list_daily_records(
    db: AsyncSession,
    farm_id: int,
    batch_id: int,
    *,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[DailyRecord], int]:
    batch = await get_batch_or_404(db, farm_id, batch_id)
    total = (
        await db.execute(
            select(func.count(DailyRecord.id)).where(DailyRecord.batch_id == batch.id)
        )
    ).scalar() or 0
    result = await db.execute(
        select(DailyRecord)
        .where(DailyRecord.batch_id == batch.id)
        .order_by(DailyRecord.record_date.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all()), total


# ── Egg production ──────────────────────────────────────────

async def create_egg_production(
    farm_id: int,
    batch_id: int,
    body: EggProductionCreate,
    user_id: int,
    db: AsyncSession,
) -> EggProduction:
    batch = await get_active_batch(db, farm_id, batch_id)
    if batch.bird_type != "layer":
        raise InvalidStateError("Egg production can only be recorded for layer batches")

    exists = (
        await db.execute(
            select(EggProduction.id).where(
                EggProduction.batch_id == batch.id,
                EggProduction.production_date == body.production_date,
            )
        )
    ).first()
    if exists:
        raise ConflictError(
            f"Egg production already recorded for {body.production_date}",
            error_code="DUPLICATE_EGG_PRODUCTION",
        )

    record = EggProduction(batch_id=batch.id, recorded_by=user_id, **body.model_dump())
    db.add(record)
    await db.flush()
    await db.refresh(record)
    return record


async def list_egg_production(
    db: AsyncSession,
    farm_id: int,
    batch_id: int,
    *,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[EggProduction], int]:
    batch = await get_batch_or_404(db, farm_id, batch_id)
    total = (
        await db.execute(
            select(func.count(EggProduction.id)).where(EggProduction.batch_id == batch.id)
        )
    ).scalar() or 0
    result = await db.execute(
        select(EggProduction)
        .where(EggProduction.batch_id == batch.id)
        .order_by(EggProduction.production_date.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all()), total
