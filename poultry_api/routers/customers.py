"""Customer router (nested under a farm).

Endpoints:
    POST   /api/farms/{farm_id}/customers                        Create customer
    GET    /api/farms/{farm_id}/customers                        List customers
    GET    /api/farms/{farm_id}/customers/stats                  Customer statistics
    GET    /api/farms/{farm_id}/customers/{customer_id}          Customer detail
    PUT    /api/farms/{farm_id}/customers/{customer_id}          Update customer
    DELETE /api/farms/{farm_id}/customers/{customer_id}          Soft-delete customer
    GET    /api/farms/{farm_id}/customers/{customer_id}/orders   Customer order history
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.auth.deps import require_farm_access
from poultry_api.database import get_db
from poultry_api.models.user import User
from poultry_api.schemas.common import (
    ApiResponse,
    MessageResponse,
    Page,
    PageParams,
    build_pagination,
)
from poultry_api.schemas.customer import (
    CustomerCreate,
    CustomerDetail,
    CustomerOut,
    CustomerStats,
    CustomerSummary,
    CustomerUpdate,
)
from poultry_api.schemas.order import OrderStatus, OrderSummary
from poultry_api.services import customer as customer_service

router = APIRouter()


@router.post("", response_model=ApiResponse[CustomerOut], status_code=status.HTTP_201_CREATED)
async def create_customer(
    farm_id: int,
    body: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    customer = await customer_service.create_customer(farm_id, body, db)
    return ApiResponse(message="Customer created", data=CustomerOut.model_validate(customer))


@router.get("", response_model=ApiResponse[Page[CustomerSummary]])
async def list_customers(
    farm_id: int,
    customer_type: str | None = Query(
        None, pattern="^(individual|company|restaurant|distributor|retail)$"
    ),
    search: str | None = None,
    is_active: str = Query("true", pattern="^(true|false|all)$"),
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    items, total = await customer_service.list_customers(
        db,
        farm_id,
        customer_type=customer_type,
        search=search,
        is_active=is_active,
        limit=paging.limit,
        offset=paging.offset,
    )
    return ApiResponse(
        message="Customers retrieved",
        data=Page(items=items, pagination=build_pagination(paging.page, paging.limit, total)),
    )


@router.get("/stats", response_model=ApiResponse[CustomerStats])
async def get_customer_stats(
    farm_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    stats = await customer_service.get_customer_stats(db, farm_id)
    return ApiResponse(message="Customer statistics retrieved", data=stats)


@router.get("/{customer_id}", response_model=ApiResponse[CustomerDetail])
async def get_customer(
    farm_id: int,
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    detail = await customer_service.get_customer_detail(db, farm_id, customer_id)
    return ApiResponse(message="Customer retrieved", data=detail)


@router.put("/{customer_id}", response_model=ApiResponse[CustomerOut])
async def update_customer(
    farm_id: int,
    customer_id: int,
    body: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    customer = await customer_service.update_customer(farm_id, customer_id, body, db)
    return ApiResponse(message="Customer updated", data=CustomerOut.model_validate(customer))


@router.delete("/{customer_id}", response_model=MessageResponse)
async def delete_customer(
    farm_id: int,
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    await customer_service.delete_customer(farm_id, customer_id, db)
    return MessageResponse(message="Customer deleted")


@router.get("/{customer_id}/orders", response_model=ApiResponse[Page[OrderSummary]])
async def list_customer_orders(
    farm_id: int,
    customer_id: int,
    order_status: OrderStatus | None = Query(None, alias="status"),
    date_from: date | None = None,
    date_to: date | None = None,
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_farm_access),
):
    items, total = await customer_service.list_customer_orders(
        db,
        farm_id,
        customer_id,
        status=order_status,
        date_from=date_from,
        date_to=date_to,
        limit=paging.limit,
        offset=paging.offset,
    )
    return ApiResponse(
        message="Customer orders retrieved",
        data=Page(items=items, pagination=build_pagination(paging.page, paging.limit, total)),
    )
