"""Pydantic schemas for customers and customer statistics."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from poultry_api.schemas.validators import reject_null

CustomerType = Literal["individual", "company", "restaurant", "distributor", "retail"]


class CustomerCreate(BaseModel):
    customer_code: str | None = Field(None, min_length=1, max_length=50)
    customer_type: CustomerType = "individual"
    company_name: str | None = Field(None, max_length=255)
    contact_person: str | None = Field(None, max_length=255)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    address: str | None = None
    province: str | None = None
    district: str | None = None
    subdistrict: str | None = None
    postal_code: str | None = Field(None, max_length=10)
    tax_id: str | None = Field(None, max_length=20)
    credit_limit: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    payment_terms_days: int = Field(0, ge=0)
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)
    preferred_products: list[str] = []
    delivery_address: str | None = None
    delivery_notes: str | None = None


class CustomerUpdate(BaseModel):
    customer_type: CustomerType | None = None
    company_name: str | None = Field(None, max_length=255)
    contact_person: str | None = Field(None, max_length=255)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    address: str | None = None
    province: str | None = None
    district: str | None = None
    subdistrict: str | None = None
    postal_code: str | None = Field(None, max_length=10)
    tax_id: str | None = Field(None, max_length=20)
    credit_limit: Decimal | None = Field(None, ge=0, decimal_places=2)
    payment_terms_days: int | None = Field(None, ge=0)
    discount_percent: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)
    preferred_products: list[str] | None = None
    delivery_address: str | None = None
    delivery_notes: str | None = None

    _not_null = reject_null(
        "customer_type",
        "credit_limit",
        "payment_terms_days",
        "discount_percent",
        "preferred_products",
    )


class CustomerOut(BaseModel):
    id: int
    farm_id: int
    customer_code: str
    customer_type: str
    company_name: str | None
    contact_person: str | None
    first_name: str | None
    last_name: str | None
    display_name: str
    phone: str | None
    email: str | None
    address: str | None
    province: str | None
    district: str | None
    subdistrict: str | None
    postal_code: str | None
    tax_id: str | None
    credit_limit: Decimal
    payment_terms_days: int
    discount_percent: Decimal
    preferred_products: list[str]
    delivery_address: str | None
    delivery_notes: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CustomerSummary(CustomerOut):
    total_orders: int = 0
    total_spent: Decimal = Decimal("0")
    last_order_date: date | None = None


class RecentOrder(BaseModel):
    id: int
    order_number: str
    order_date: date
    net_amount: Decimal
    status: str
    payment_status: str

    model_config = {"from_attributes": True}


class CustomerDetail(CustomerOut):
    farm_name: str | None = None
    total_orders: int = 0
    pending_orders: int = 0
    total_spent: Decimal = Decimal("0")
    outstanding_amount: Decimal = Decimal("0")
    recent_orders: list[RecentOrder] = []


# ── Statistics ───────────────────────────────────────────────

class CustomerTypeCounts(BaseModel):
    total_customers: int = 0
    individual_customers: int = 0
    company_customers: int = 0
    restaurant_customers: int = 0
    distributor_customers: int = 0
    retail_customers: int = 0


class CustomerOrderStats(BaseModel):
    total_orders: int = 0
    total_revenue: Decimal = Decimal("0")
    average_order_value: Decimal = Decimal("0")
    customers_with_orders: int = 0


class TopCustomer(BaseModel):
    id: int
    customer_code: str
    customer_name: str
    order_count: int
    total_spent: Decimal


class CustomerStats(BaseModel):
    customer_stats: CustomerTypeCounts
    order_stats: CustomerOrderStats
    top_customers: list[TopCustomer]
