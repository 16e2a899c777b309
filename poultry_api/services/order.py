"""Order workflow service.

Handles the sales side of a farm:
  - Creating an order and its items in one transaction, with totals
    computed in Decimal and rounded half-up to cents
  - Recording payments and re-deriving the order's payment_status from the
    sum of all payments on the order
  - Moving an order through its status lifecycle, appending to
    OrderStatusHistory on every change
"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from poultry_api.middleware.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    OrderCreationError,
)
from poultry_api.models.batch import Batch
from poultry_api.models.customer import Customer
from poultry_api.models.farm import Farm
from poultry_api.models.order import (
    CLOSED_ORDER_STATUSES,
    Order,
    OrderItem,
    OrderStatusHistory,
)
from poultry_api.models.payment import Payment
from poultry_api.models.user import User
from poultry_api.schemas.order import (
    OrderCreate,
    OrderDetail,
    OrderItemOut,
    OrderSummary,
    OrderWithItems,
    PaymentCreate,
)
from poultry_api.utils.numbering import generate_reference_code

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


# ── Money arithmetic ────────────────────────────────────────

def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    return to_money(Decimal(quantity) * Decimal(unit_price))


def calculate_totals(
    lines: Iterable[tuple[Decimal, Decimal]],
    discount_amount: Decimal = ZERO,
    tax_amount: Decimal = ZERO,
) -> tuple[Decimal, Decimal]:
    """Return (total_amount, net_amount) for (quantity, unit_price) pairs."""
    total = sum((line_total(q, p) for q, p in lines), ZERO)
    net = total - to_money(discount_amount) + to_money(tax_amount)
    return to_money(total), to_money(net)


def derive_payment_status(total_paid: Decimal, net_amount: Decimal) -> str:
    """Payment status from the running total of payments on an order."""
    if total_paid >= net_amount:
        return "paid"
    if total_paid > 0:
        return "partial"
    return "unpaid"


# ── Lookups ─────────────────────────────────────────────────

async def _order_number_taken(db: AsyncSession, farm_id: int, order_number: str) -> bool:
    result = await db.execute(
        select(Order.id).where(
            Order.farm_id == farm_id, Order.order_number == order_number
        )
    )
    return result.first() is not None


async def _payment_number_taken(db: AsyncSession, farm_id: int, payment_number: str) -> bool:
    result = await db.execute(
        select(Payment.id).where(
            Payment.farm_id == farm_id, Payment.payment_number == payment_number
        )
    )
    return result.first() is not None


async def get_order_or_404(db: AsyncSession, farm_id: int, order_id: int) -> Order:
    result = await db.execute(
        select(Order).where(Order.id == order_id, Order.farm_id == farm_id)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order", order_id)
    return order


async def _total_paid(db: AsyncSession, order_id: int) -> Decimal:
    result = await db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.order_id == order_id
        )
    )
    return to_money(result.scalar() or 0)


# ── Order creation ──────────────────────────────────────────

async def create_order(
    farm_id: int,
    body: OrderCreate,
    user_id: int,
    db: AsyncSession,
) -> OrderWithItems:
    """Create an order header and its items atomically.

    The header, every item and the initial status history row are flushed
    on the request session and committed together.  On failure the session
    is rolled back: integrity violations propagate unchanged, anything else
    is raised as OrderCreationError.

    Raises:
        NotFoundError if the customer (or a referenced batch) is not an
        active part of this farm.
        ConflictError if the order number is already used in the farm.
    """
    customer = (
        await db.execute(
            select(Customer).where(
                Customer.id == body.customer_id,
                Customer.farm_id == farm_id,
                Customer.is_active == True,  # noqa: E712
            )
        )
    ).scalar_one_or_none()
    if not customer:
        raise NotFoundError("Customer", body.customer_id)

    batch_ids = {item.batch_id for item in body.items if item.batch_id is not None}
    if batch_ids:
        found = set(
            (
                await db.execute(
                    select(Batch.id).where(Batch.id.in_(batch_ids), Batch.farm_id == farm_id)
                )
            ).scalars().all()
        )
        missing = sorted(batch_ids - found)
        if missing:
            raise NotFoundError("Batch", missing[0])

    order_number = body.order_number or generate_reference_code("ORD")
    if await _order_number_taken(db, farm_id, order_number):
        raise ConflictError(
            f"Order number already exists in this farm: {order_number}",
            error_code="DUPLICATE_ORDER_NUMBER",
        )

    total_amount, net_amount = calculate_totals(
        ((item.quantity, item.unit_price) for item in body.items),
        body.discount_amount,
        body.tax_amount,
    )

    try:
        order = Order(
            farm_id=farm_id,
            customer_id=customer.id,
            order_number=order_number,
            order_date=body.order_date,
            delivery_date=body.delivery_date,
            total_amount=total_amount,
            discount_amount=to_money(body.discount_amount),
            tax_amount=to_money(body.tax_amount),
            net_amount=net_amount,
            delivery_address=body.delivery_address,
            delivery_notes=body.delivery_notes,
            special_instructions=body.special_instructions,
            status="pending",
            payment_status=derive_payment_status(ZERO, net_amount),
            created_by=user_id,
        )
        db.add(order)
        await db.flush()  # populate order.id

        for item in body.items:
            db.add(OrderItem(
                order_id=order.id,
                product_type=item.product_type,
                product_name=item.product_name,
                product_description=item.product_description,
                grade=item.grade,
                quantity=item.quantity,
                unit=item.unit,
                unit_price=item.unit_price,
                total_price=line_total(item.quantity, item.unit_price),
                batch_id=item.batch_id,
                harvest_date=item.harvest_date,
                quality_notes=item.quality_notes,
            ))
            await db.flush()

        db.add(OrderStatusHistory(
            order_id=order.id,
            status="pending",
            note="Order created",
            changed_by=user_id,
        ))
        await db.flush()
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Order {order_number} rejected by integrity constraint (farm {farm_id})")
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to create order {order_number} (farm {farm_id}): {e}", exc_info=True)
        raise OrderCreationError() from e

    logger.info(
        f"Order {order_number} created for farm {farm_id}: "
        f"{len(body.items)} items, net {net_amount}"
    )
    return await get_order_with_items(db, farm_id, order.id)


# ── Order reads ─────────────────────────────────────────────

def _item_out(item: OrderItem) -> OrderItemOut:
    out = OrderItemOut.model_validate(item)
    if item.batch is not None:
        out.batch_code = item.batch.batch_code
        out.bird_type = item.batch.bird_type
    return out


async def get_order_with_items(db: AsyncSession, farm_id: int, order_id: int) -> OrderWithItems:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id, Order.farm_id == farm_id)
        .options(
            selectinload(Order.customer),
            selectinload(Order.items).selectinload(OrderItem.batch),
        )
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order", order_id)

    out = OrderWithItems.model_validate(order)
    out.customer_code = order.customer.customer_code
    out.customer_name = order.customer.display_name
    out.items = [_item_out(i) for i in order.items]
    return out


async def get_order_detail(db: AsyncSession, farm_id: int, order_id: int) -> OrderDetail:
    """Order with items, payments, status history and display fields."""
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id, Order.farm_id == farm_id)
        .options(
            selectinload(Order.customer),
            selectinload(Order.items).selectinload(OrderItem.batch),
            selectinload(Order.payments),
            selectinload(Order.status_history),
        )
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order", order_id)

    detail = OrderDetail.model_validate(order)
    detail.customer_code = order.customer.customer_code
    detail.customer_name = order.customer.display_name
    detail.customer_phone = order.customer.phone
    detail.customer_email = order.customer.email
    detail.items = [_item_out(i) for i in order.items]
    detail.total_paid = await _total_paid(db, order.id)

    detail.farm_name = (
        await db.execute(select(Farm.name).where(Farm.id == farm_id))
    ).scalar_one_or_none()
    if order.created_by is not None:
        detail.created_by_name = (
            await db.execute(select(User.first_name).where(User.id == order.created_by))
        ).scalar_one_or_none()
    return detail


async def list_orders(
    db: AsyncSession,
    farm_id: int,
    *,
    status: str | None = None,
    customer_id: int | None = None,
    payment_status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[OrderSummary], int]:
    """Newest-first page of a farm's orders and the unpaged total."""
    filters = [Order.farm_id == farm_id]
    if status:
        filters.append(Order.status == status)
    if customer_id:
        filters.append(Order.customer_id == customer_id)
    if payment_status:
        filters.append(Order.payment_status == payment_status)
    if date_from:
        filters.append(Order.order_date >= date_from)
    if date_to:
        filters.append(Order.order_date <= date_to)

    total = (
        await db.execute(select(func.count(Order.id)).where(*filters))
    ).scalar() or 0

    item_count = (
        select(func.count(OrderItem.id))
        .where(OrderItem.order_id == Order.id)
        .correlate(Order)
        .scalar_subquery()
    )
    result = await db.execute(
        select(Order, Customer, item_count)
        .join(Customer, Order.customer_id == Customer.id)
        .where(*filters)
        .order_by(Order.order_date.desc(), Order.id.desc())
        .limit(limit)
        .offset(offset)
    )

    items = []
    for order, customer, count in result.all():
        summary = OrderSummary.model_validate(order)
        summary.customer_code = customer.customer_code
        summary.customer_name = customer.display_name
        summary.item_count = count or 0
        items.append(summary)
    return items, total


# ── Status lifecycle ────────────────────────────────────────

async def update_order_status(
    farm_id: int,
    order_id: int,
    status: str,
    note: str | None,
    user_id: int,
    db: AsyncSession,
) -> Order:
    """Move an order to `status` and append the change to its history.

    Raises:
        NotFoundError if the order is not in this farm.
        InvalidStateError if the order is already delivered or cancelled.
    """
    order = await get_order_or_404(db, farm_id, order_id)
    if order.status in CLOSED_ORDER_STATUSES:
        raise InvalidStateError(
            f"Order {order.order_number} is {order.status} and can no longer change status"
        )

    previous = order.status
    order.status = status
    db.add(OrderStatusHistory(
        order_id=order.id,
        status=status,
        note=note,
        changed_by=user_id,
    ))
    await db.flush()

    logger.info(f"Order {order.order_number} status {previous} -> {status}")
    return order


# ── Payments ────────────────────────────────────────────────

async def refresh_payment_status(db: AsyncSession, order: Order) -> str:
    """Re-derive and persist payment_status from the order's payments."""
    total_paid = await _total_paid(db, order.id)
    order.payment_status = derive_payment_status(total_paid, to_money(order.net_amount))
    await db.flush()
    return order.payment_status


async def record_payment(
    farm_id: int,
    order_id: int,
    body: PaymentCreate,
    user_id: int,
    db: AsyncSession,
) -> Payment:
    """Record a payment against an order and refresh its payment_status.

    Raises:
        NotFoundError if the order is not in this farm.
        ConflictError if the payment number is already used in the farm.
    """
    order = await get_order_or_404(db, farm_id, order_id)

    payment_number = body.payment_number or generate_reference_code("PAY")
    if await _payment_number_taken(db, farm_id, payment_number):
        raise ConflictError(
            f"Payment number already exists in this farm: {payment_number}",
            error_code="DUPLICATE_PAYMENT_NUMBER",
        )

    payment = Payment(
        farm_id=order.farm_id,
        customer_id=order.customer_id,
        order_id=order.id,
        payment_number=payment_number,
        payment_date=body.payment_date,
        amount=to_money(body.amount),
        payment_method=body.payment_method,
        reference_number=body.reference_number,
        notes=body.notes,
        received_by=user_id,
    )
    db.add(payment)
    await db.flush()

    status = await refresh_payment_status(db, order)
    logger.info(
        f"Payment {payment_number} of {payment.amount} recorded on order "
        f"{order.order_number}; payment_status={status}"
    )
    return payment
