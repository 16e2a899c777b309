"""Order router (nested under a farm).

Endpoints:
    POST /api/farms/{farm_id}/orders                       Create order with items
    GET  /api/farms/{farm_id}/orders                       List orders
    GET  /api/farms/{farm_id}/orders/{order_id}            Order detail
    PUT  /api/farms/{farm_id}/orders/{order_id}/status     Change order status
    POST /api/farms/{farm_id}/orders/{order_id}/payments   Record a payment
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.auth.deps import require_farm_access
from poultry_api.database import get_db
from poultry_api.models.user import User
from poultry_api.schemas.common import ApiResponse, Page, PageParams, build_pagination
from poultry_api.schemas.order import (
    OrderCreate,
    OrderDetail,
    OrderStatus,
    OrderStatusUpdate,
    OrderSummary,
    OrderWithItems,
    PaymentCreate,
    PaymentOut,
    PaymentStatus,
)
from poultry_api.services import order as order_service

router = APIRouter()


@router.post("", response_model=ApiResponse[OrderWithItems], status_code=status.HTTP_201_CREATED)
async def create_order(
    farm_id: int,
    body: OrderCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_farm_access),
):
    order = await order_service.create_order(farm_id, body, user.id, db)
    return ApiResponse(message="Order created", data=order)


@router.get("", response_model=ApiResponse[Page[OrderSummary]])
async def list_orders(
    farm_id: int,
    order_status: OrderStatus | None = Query(None, alias="status"),
    customer_id: int | None = None,
    payment_status: PaymentStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    items, total = await order_service.list_orders(
        db,
        farm_id,
        status=order_status,
        customer_id=customer_id,
        payment_status=payment_status,
        date_from=date_from,
        date_to=date_to,
        limit=paging.limit,
        offset=paging.offset,
    )
    return ApiResponse(
        message="Orders retrieved",
        data=Page(items=items, pagination=build_pagination(paging.page, paging.limit, total)),
    )


@router.get("/{order_id}", response_model=ApiResponse[OrderDetail])
async def get_order(
    farm_id: int,
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    detail = await order_service.get_order_detail(db, farm_id, order_id)
    return ApiResponse(message="Order retrieved", data=detail)


@router.put("/{order_id}/status", response_model=ApiResponse[OrderDetail])
async def update_order_status(
    farm_id: int,
    order_id: int,
    body: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_farm_access),
):
    await order_service.update_order_status(
        farm_id, order_id, body.status, body.note, user.id, db
    )
    detail = await order_service.get_order_detail(db, farm_id, order_id)
    return ApiResponse(message=f"Order status updated to {body.status}", data=detail)


@router.post(
    "/{order_id}/payments",
    response_model=ApiResponse[PaymentOut],
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    farm_id: int,
    order_id: int,
    body: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_farm_access),
):
    payment = await order_service.record_payment(farm_id, order_id, body, user.id, db)
    await db.refresh(payment)
    return ApiResponse(message="Payment recorded", data=PaymentOut.model_validate(payment))
