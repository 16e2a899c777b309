"""DailyRecord: one day of husbandry data for a batch.

Mortality and culling reported here are subtracted from the batch's
`current_count` when the record is created.
"""

from datetime import date, datetime

from sqlalchemy import (
    Date, DateTime, Float, ForeignKey, Integer, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from poultry_api.database import Base


class DailyRecord(Base):
    __tablename__ = "daily_records"
    __table_args__ = (
        UniqueConstraint("batch_id", "record_date", name="uq_daily_records_batch_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    batch_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("batches.id"), nullable=False, index=True
    )
    record_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    bird_count: Mapped[int] = mapped_column(Integer, nullable=False)
    mortality_count: Mapped[int] = mapped_column(Integer, default=0)
    culled_count: Mapped[int] = mapped_column(Integer, default=0)

    feed_consumed_kg: Mapped[float | None] = mapped_column(Float)
    water_consumed_liters: Mapped[float | None] = mapped_column(Float)
    avg_weight_grams: Mapped[float | None] = mapped_column(Float)

    temperature_celsius: Mapped[float | None] = mapped_column(Float)
    humidity_percent: Mapped[float | None] = mapped_column(Float)

    notes: Mapped[str | None] = mapped_column(Text)
    recorded_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    batch = relationship("Batch", back_populates="daily_records")
