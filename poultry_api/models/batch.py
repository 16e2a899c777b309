"""Batch: one production cycle (flock) of birds in a house.

Lifecycle:  active → completed

`initial_count` is fixed at placement.  `current_count` only ever goes down
(mortality and culling from daily records, or the final count at
completion), so `current_count <= initial_count` always holds.
Derived figures (mortality, days in production, FCR, ...) are computed at
read time in `poultry_api.utils.production` and never stored here.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date, DateTime, ForeignKey, Integer, Numeric, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from poultry_api.database import Base


class Batch(Base):
    __tablename__ = "batches"
    __table_args__ = (
        UniqueConstraint("farm_id", "batch_code", name="uq_batches_farm_code"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    farm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("farms.id"), nullable=False, index=True
    )
    house_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("houses.id"), nullable=False, index=True
    )
    breed_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("breeds.id"), nullable=False
    )
    batch_code: Mapped[str] = mapped_column(String(50), nullable=False)
    # broiler | layer
    bird_type: Mapped[str] = mapped_column(String(20), nullable=False)

    # ── Bird counts ──────────────────────────────────────────
    initial_count: Mapped[int] = mapped_column(Integer, nullable=False)
    current_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # ── Dates ────────────────────────────────────────────────
    placement_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_harvest_date: Mapped[date | None] = mapped_column(Date)
    actual_harvest_date: Mapped[date | None] = mapped_column(Date)
    # Age of the birds (days) when they arrived at the house
    placement_age_days: Mapped[int] = mapped_column(Integer, default=0)

    # ── Origin / cost ────────────────────────────────────────
    source_farm: Mapped[str | None] = mapped_column(String(255))
    cost_per_bird: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # active | completed
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
    notes: Mapped[str | None] = mapped_column(Text)
    completion_notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ── Relationships ────────────────────────────────────────
    # Lazy by default; load with selectinload() where a route needs them.
    house = relationship("House", back_populates="batches")
    breed = relationship("Breed")
    daily_records = relationship(
        "DailyRecord", back_populates="batch", order_by="DailyRecord.record_date"
    )
    egg_production = relationship(
        "EggProduction", back_populates="batch", order_by="EggProduction.production_date"
    )
