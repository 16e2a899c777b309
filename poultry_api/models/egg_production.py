"""EggProduction: daily egg collection for a layer batch."""

from datetime import date, datetime

from sqlalchemy import (
    Date, DateTime, Float, ForeignKey, Integer, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from poultry_api.database import Base


class EggProduction(Base):
    __tablename__ = "egg_production"
    __table_args__ = (
        UniqueConstraint("batch_id", "production_date", name="uq_egg_production_batch_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    batch_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("batches.id"), nullable=False, index=True
    )
    production_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    total_eggs: Mapped[int] = mapped_column(Integer, default=0)
    # Size grades: 0 is the largest
    grade_0_count: Mapped[int] = mapped_column(Integer, default=0)
    grade_1_count: Mapped[int] = mapped_column(Integer, default=0)
    grade_2_count: Mapped[int] = mapped_column(Integer, default=0)
    grade_3_count: Mapped[int] = mapped_column(Integer, default=0)
    broken_eggs: Mapped[int] = mapped_column(Integer, default=0)
    double_yolk_eggs: Mapped[int] = mapped_column(Integer, default=0)
    avg_egg_weight_grams: Mapped[float | None] = mapped_column(Float)

    notes: Mapped[str | None] = mapped_column(Text)
    recorded_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    batch = relationship("Batch", back_populates="egg_production")
