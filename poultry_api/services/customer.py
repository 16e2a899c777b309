"""Customer service: CRUD, order history and farm-level customer statistics."""

import logging

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.middleware.exceptions import ConflictError, NotFoundError
from poultry_api.models.customer import Customer
from poultry_api.models.farm import Farm
from poultry_api.models.order import CLOSED_ORDER_STATUSES, Order
from poultry_api.schemas.customer import (
    CustomerCreate,
    CustomerDetail,
    CustomerOrderStats,
    CustomerStats,
    CustomerSummary,
    CustomerTypeCounts,
    CustomerUpdate,
    RecentOrder,
    TopCustomer,
)
from poultry_api.services.order import list_orders, to_money
from poultry_api.utils.numbering import generate_reference_code

logger = logging.getLogger(__name__)

CUSTOMER_TYPES = ("individual", "company", "restaurant", "distributor", "retail")
RECENT_ORDER_LIMIT = 5
TOP_CUSTOMER_LIMIT = 5


async def get_customer_or_404(db: AsyncSession, farm_id: int, customer_id: int) -> Customer:
    result = await db.execute(
        select(Customer).where(Customer.id == customer_id, Customer.farm_id == farm_id)
    )
    customer = result.scalar_one_or_none()
    if not customer:
        raise NotFoundError("Customer", customer_id)
    return customer


async def _customer_code_taken(db: AsyncSession, farm_id: int, customer_code: str) -> bool:
    result = await db.execute(
        select(Customer.id).where(
            Customer.farm_id == farm_id,
            Customer.customer_code == customer_code,
            Customer.is_active == True,  # noqa: E712
        )
    )
    return result.first() is not None


async def create_customer(farm_id: int, body: CustomerCreate, db: AsyncSession) -> Customer:
    customer_code = body.customer_code or generate_reference_code("CUST")
    if await _customer_code_taken(db, farm_id, customer_code):
        raise ConflictError(
            f"Customer code already exists in this farm: {customer_code}",
            error_code="DUPLICATE_CUSTOMER_CODE",
        )

    customer = Customer(
        farm_id=farm_id,
        **body.model_dump(exclude={"customer_code"}),
        customer_code=customer_code,
    )
    db.add(customer)
    await db.flush()
    await db.refresh(customer)

    logger.info(f"Customer {customer_code} created in farm {farm_id}")
    return customer


async def list_customers(
    db: AsyncSession,
    farm_id: int,
    *,
    customer_type: str | None = None,
    search: str | None = None,
    is_active: str = "true",
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[CustomerSummary], int]:
    """Page of customers with their order totals.

    `is_active` is "true", "false" or "all".
    """
    filters = [Customer.farm_id == farm_id]
    if is_active != "all":
        filters.append(Customer.is_active == (is_active == "true"))
    if customer_type:
        filters.append(Customer.customer_type == customer_type)
    if search:
        pattern = f"%{search}%"
        filters.append(or_(
            Customer.customer_code.ilike(pattern),
            Customer.company_name.ilike(pattern),
            Customer.first_name.ilike(pattern),
            Customer.last_name.ilike(pattern),
            Customer.phone.ilike(pattern),
            Customer.email.ilike(pattern),
        ))

    total = (await db.execute(select(func.count(Customer.id)).where(*filters))).scalar() or 0

    order_totals = (
        select(
            Order.customer_id.label("customer_id"),
            func.count(Order.id).label("total_orders"),
            func.coalesce(func.sum(Order.net_amount), 0).label("total_spent"),
            func.max(Order.order_date).label("last_order_date"),
        )
        .where(Order.farm_id == farm_id)
        .group_by(Order.customer_id)
        .subquery()
    )
    result = await db.execute(
        select(
            Customer,
            order_totals.c.total_orders,
            order_totals.c.total_spent,
            order_totals.c.last_order_date,
        )
        .outerjoin(order_totals, order_totals.c.customer_id == Customer.id)
        .where(*filters)
        .order_by(Customer.created_at.desc(), Customer.id.desc())
        .limit(limit)
        .offset(offset)
    )

    items = []
    for customer, total_orders, total_spent, last_order_date in result.all():
        summary = CustomerSummary.model_validate(customer)
        summary.total_orders = total_orders or 0
        summary.total_spent = to_money(total_spent or 0)
        summary.last_order_date = last_order_date
        items.append(summary)
    return items, total


async def get_customer_detail(db: AsyncSession, farm_id: int, customer_id: int) -> CustomerDetail:
    customer = await get_customer_or_404(db, farm_id, customer_id)

    row = (
        await db.execute(
            select(
                func.count(Order.id),
                func.count(case((Order.status == "pending", 1))),
                func.coalesce(func.sum(Order.net_amount), 0),
                func.coalesce(
                    func.sum(case((Order.payment_status != "paid", Order.net_amount), else_=0)), 0
                ),
            ).where(Order.customer_id == customer.id)
        )
    ).one()

    recent = await db.execute(
        select(Order)
        .where(Order.customer_id == customer.id)
        .order_by(Order.order_date.desc(), Order.id.desc())
        .limit(RECENT_ORDER_LIMIT)
    )

    detail = CustomerDetail.model_validate(customer)
    detail.farm_name = (
        await db.execute(select(Farm.name).where(Farm.id == farm_id))
    ).scalar_one_or_none()
    detail.total_orders = row[0]
    detail.pending_orders = row[1]
    detail.total_spent = to_money(row[2])
    detail.outstanding_amount = to_money(row[3])
    detail.recent_orders = [RecentOrder.model_validate(o) for o in recent.scalars().all()]
    return detail


async def update_customer(
    farm_id: int,
    customer_id: int,
    body: CustomerUpdate,
    db: AsyncSession,
) -> Customer:
    customer = await get_customer_or_404(db, farm_id, customer_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        setattr(customer, key, value)
    await db.flush()
    await db.refresh(customer)
    return customer


async def delete_customer(farm_id: int, customer_id: int, db: AsyncSession) -> Customer:
    """Soft-delete a customer with no open orders.

    Orders that are delivered or cancelled do not block deletion; the row is
    kept and only marked inactive.
    """
    customer = await get_customer_or_404(db, farm_id, customer_id)

    open_orders = (
        await db.execute(
            select(func.count(Order.id)).where(
                Order.customer_id == customer.id,
                Order.status.not_in(CLOSED_ORDER_STATUSES),
            )
        )
    ).scalar() or 0
    if open_orders:
        raise ConflictError(
            f"Cannot delete a customer with {open_orders} open order(s)",
            error_code="CUSTOMER_HAS_OPEN_ORDERS",
        )

    customer.is_active = False
    await db.flush()

    logger.info(f"Customer {customer.customer_code} deactivated in farm {farm_id}")
    return customer


async def list_customer_orders(
    db: AsyncSession,
    farm_id: int,
    customer_id: int,
    *,
    status: str | None = None,
    date_from=None,
    date_to=None,
    limit: int = 10,
    offset: int = 0,
):
    customer = await get_customer_or_404(db, farm_id, customer_id)
    return await list_orders(
        db,
        farm_id,
        customer_id=customer.id,
        status=status,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )


async def get_customer_stats(db: AsyncSession, farm_id: int) -> CustomerStats:
    """Per-type customer counts, order totals and the top five customers."""
    type_counts = [
        func.count(case((Customer.customer_type == t, 1))) for t in CUSTOMER_TYPES
    ]
    counts_row = (
        await db.execute(
            select(func.count(Customer.id), *type_counts).where(
                Customer.farm_id == farm_id, Customer.is_active == True  # noqa: E712
            )
        )
    ).one()

    orders_row = (
        await db.execute(
            select(
                func.count(Order.id),
                func.coalesce(func.sum(Order.net_amount), 0),
                func.coalesce(func.avg(Order.net_amount), 0),
                func.count(func.distinct(Order.customer_id)),
            ).where(Order.farm_id == farm_id)
        )
    ).one()

    total_spent = func.coalesce(func.sum(Order.net_amount), 0).label("total_spent")
    top_result = await db.execute(
        select(Customer, func.count(Order.id), total_spent)
        .outerjoin(Order, Order.customer_id == Customer.id)
        .where(Customer.farm_id == farm_id, Customer.is_active == True)  # noqa: E712
        .group_by(Customer.id)
        .order_by(total_spent.desc(), Customer.id)
        .limit(TOP_CUSTOMER_LIMIT)
    )

    return CustomerStats(
        customer_stats=CustomerTypeCounts(
            total_customers=counts_row[0],
            **{
                f"{t}_customers": counts_row[i + 1]
                for i, t in enumerate(CUSTOMER_TYPES)
            },
        ),
        order_stats=CustomerOrderStats(
            total_orders=orders_row[0],
            total_revenue=to_money(orders_row[1]),
            average_order_value=to_money(orders_row[2]),
            customers_with_orders=orders_row[3],
        ),
        top_customers=[
            TopCustomer(
                id=customer.id,
                customer_code=customer.customer_code,
                customer_name=customer.display_name,
                order_count=order_count,
                total_spent=to_money(spent),
            )
            for customer, order_count, spent in top_result.all()
        ],
    )
