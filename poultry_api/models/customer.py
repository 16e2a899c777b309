"""Customer: a buyer of farm produce.

`customer_code` is unique per farm among *active* customers; a
soft-deleted customer frees its code for reuse.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Index, Integer, JSON, Numeric, String,
    Text, text,
)
from sqlalchemy.orm import Mapped, mapped_column

from poultry_api.database import Base


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        Index(
            "uq_customers_farm_code_active",
            "farm_id", "customer_code",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    farm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("farms.id"), nullable=False, index=True
    )
    customer_code: Mapped[str] = mapped_column(String(50), nullable=False)
    # individual | company | restaurant | distributor | retail
    customer_type: Mapped[str] = mapped_column(String(20), default="individual")

    # ── Identity ─────────────────────────────────────────────
    company_name: Mapped[str | None] = mapped_column(String(255))
    contact_person: Mapped[str | None] = mapped_column(String(255))
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    phone: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(255))

    # ── Address ──────────────────────────────────────────────
    address: Mapped[str | None] = mapped_column(Text)
    province: Mapped[str | None] = mapped_column(String(100))
    district: Mapped[str | None] = mapped_column(String(100))
    subdistrict: Mapped[str | None] = mapped_column(String(100))
    postal_code: Mapped[str | None] = mapped_column(String(10))
    tax_id: Mapped[str | None] = mapped_column(String(20))

    # ── Commercial terms ─────────────────────────────────────
    credit_limit: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    payment_terms_days: Mapped[int] = mapped_column(Integer, default=0)
    discount_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    # e.g. ["eggs_grade_0", "broiler_whole"]
    preferred_products: Mapped[list] = mapped_column(JSON, default=list)

    delivery_address: Mapped[str | None] = mapped_column(Text)
    delivery_notes: Mapped[str | None] = mapped_column(Text)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def display_name(self) -> str:
        if self.company_name:
            return self.company_name
        return " ".join(p for p in (self.first_name, self.last_name) if p)
