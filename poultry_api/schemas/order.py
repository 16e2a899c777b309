"""Pydantic schemas for orders, order status changes and payments."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

OrderStatus = Literal["pending", "confirmed", "preparing", "ready", "delivered", "cancelled"]
PaymentStatus = Literal["unpaid", "partial", "paid"]
PaymentMethod = Literal["cash", "bank_transfer", "cheque", "credit_card", "mobile"]


# ── Order creation ───────────────────────────────────────────

class OrderItemCreate(BaseModel):
    product_type: str = Field(..., min_length=1, max_length=50)
    product_name: str = Field(..., min_length=1, max_length=255)
    product_description: str | None = None
    grade: str | None = Field(None, max_length=20)
    quantity: Decimal = Field(..., gt=0, decimal_places=2)
    unit: str = Field("unit", max_length=20)
    unit_price: Decimal = Field(..., gt=0, decimal_places=2)
    batch_id: int | None = Field(None, gt=0)
    harvest_date: date | None = None
    quality_notes: str | None = None


class OrderCreate(BaseModel):
    customer_id: int = Field(..., gt=0)
    order_number: str | None = Field(None, min_length=1, max_length=50)
    order_date: date
    delivery_date: date | None = None
    items: list[OrderItemCreate] = Field(..., min_length=1)
    discount_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    tax_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    delivery_address: str | None = None
    delivery_notes: str | None = None
    special_instructions: str | None = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    note: str | None = None


# ── Order output ─────────────────────────────────────────────

class OrderItemOut(BaseModel):
    id: int
    product_type: str
    product_name: str
    product_description: str | None
    grade: str | None
    quantity: Decimal
    unit: str
    unit_price: Decimal
    total_price: Decimal
    batch_id: int | None
    batch_code: str | None = None
    bird_type: str | None = None
    harvest_date: date | None
    quality_notes: str | None

    model_config = {"from_attributes": True}


class OrderStatusHistoryOut(BaseModel):
    id: int
    status: str
    note: str | None
    changed_by: int | None
    changed_at: datetime

    model_config = {"from_attributes": True}


class OrderOut(BaseModel):
    id: int
    farm_id: int
    customer_id: int
    order_number: str
    order_date: date
    delivery_date: date | None
    total_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    net_amount: Decimal
    delivery_address: str | None
    delivery_notes: str | None
    special_instructions: str | None
    status: str
    payment_status: str
    created_by: int | None
    created_at: datetime
    updated_at: datetime
    customer_code: str | None = None
    customer_name: str | None = None

    model_config = {"from_attributes": True}


class OrderSummary(OrderOut):
    item_count: int = 0


class OrderWithItems(OrderOut):
    items: list[OrderItemOut] = []


# ── Payments ─────────────────────────────────────────────────

class PaymentCreate(BaseModel):
    payment_number: str | None = Field(None, min_length=1, max_length=50)
    payment_date: date
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    payment_method: PaymentMethod
    reference_number: str | None = Field(None, max_length=100)
    notes: str | None = None


class PaymentOut(BaseModel):
    id: int
    farm_id: int
    customer_id: int
    order_id: int
    payment_number: str
    payment_date: date
    amount: Decimal
    payment_method: str
    reference_number: str | None
    notes: str | None
    received_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderDetail(OrderWithItems):
    farm_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None
    created_by_name: str | None = None
    total_paid: Decimal = Decimal("0")
    payments: list[PaymentOut] = []
    status_history: list[OrderStatusHistoryOut] = []
