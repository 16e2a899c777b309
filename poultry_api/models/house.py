"""House: a building on a farm that holds one flock at a time.

At most one *active* batch may occupy a house.  That rule is enforced by the
batch service, not by a storage constraint.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean, DateTime, Float, ForeignKey, Index, Integer, String, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from poultry_api.database import Base


class House(Base):
    __tablename__ = "houses"
    __table_args__ = (
        # house_code is unique among the farm's *active* houses only
        Index(
            "uq_houses_farm_code_active",
            "farm_id", "house_code",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    farm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("farms.id"), nullable=False, index=True
    )
    house_code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    # open | closed | semi_closed
    house_type: Mapped[str] = mapped_column(String(20), default="open")
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    # ── Dimensions ───────────────────────────────────────────
    area_sqm: Mapped[float | None] = mapped_column(Float)
    width_meters: Mapped[float | None] = mapped_column(Float)
    length_meters: Mapped[float | None] = mapped_column(Float)
    height_meters: Mapped[float | None] = mapped_column(Float)
    ventilation_type: Mapped[str | None] = mapped_column(String(100))

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    farm = relationship("Farm", back_populates="houses")
    batches = relationship("Batch", back_populates="house")
