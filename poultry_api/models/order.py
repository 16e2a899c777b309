"""Order, OrderItem, OrderStatusHistory: customer sales orders.

An Order and its OrderItems are written together in one transaction.  Items
are immutable once created.

Two independent lifecycles live on an order:
  status:          pending → confirmed → preparing → ready → delivered
                   (or cancelled at any point before delivery)
  payment_status:  unpaid | partial | paid, always re-derived from the sum
                   of recorded payments, never incremented in place.

Status changes are appended to OrderStatusHistory rather than concatenated
into a free-text column.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date, DateTime, ForeignKey, Integer, Numeric, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from poultry_api.database import Base

ORDER_STATUSES = ("pending", "confirmed", "preparing", "ready", "delivered", "cancelled")
CLOSED_ORDER_STATUSES = ("delivered", "cancelled")
PAYMENT_STATUSES = ("unpaid", "partial", "paid")


class Order(Base):
    __tablename__ = "customer_orders"
    __table_args__ = (
        UniqueConstraint("farm_id", "order_number", name="uq_orders_farm_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    farm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("farms.id"), nullable=False, index=True
    )
    customer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("customers.id"), nullable=False, index=True
    )
    order_number: Mapped[str] = mapped_column(String(50), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    delivery_date: Mapped[date | None] = mapped_column(Date)

    # ── Amounts ──────────────────────────────────────────────
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    net_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    # ── Delivery ─────────────────────────────────────────────
    delivery_address: Mapped[str | None] = mapped_column(Text)
    delivery_notes: Mapped[str | None] = mapped_column(Text)
    special_instructions: Mapped[str | None] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    payment_status: Mapped[str] = mapped_column(String(20), default="unpaid", index=True)

    created_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ── Relationships ────────────────────────────────────────
    customer = relationship("Customer")
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")
    payments = relationship(
        "Payment", back_populates="order", order_by="Payment.payment_date.desc()"
    )
    status_history = relationship(
        "OrderStatusHistory", back_populates="order",
        order_by="OrderStatusHistory.id",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("customer_orders.id"), nullable=False, index=True
    )

    # ── Product ──────────────────────────────────────────────
    # e.g. eggs | live_bird | dressed_bird | manure
    product_type: Mapped[str] = mapped_column(String(50), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_description: Mapped[str | None] = mapped_column(Text)
    grade: Mapped[str | None] = mapped_column(String(20))

    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), default="unit")
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # quantity × unit_price, fixed at creation
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # ── Traceability ─────────────────────────────────────────
    batch_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("batches.id"))
    harvest_date: Mapped[date | None] = mapped_column(Date)
    quality_notes: Mapped[str | None] = mapped_column(Text)

    order = relationship("Order", back_populates="items")
    batch = relationship("Batch")


class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("customer_orders.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[str | None] = mapped_column(Text)
    changed_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))
    changed_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    order = relationship("Order", back_populates="status_history")
