"""User account router.

Endpoints:
    POST /api/users/register          Create an account, returns a token
    POST /api/users/login             Exchange credentials for a token
    GET  /api/users/profile           Current user's profile
    PUT  /api/users/profile           Update name / phone
    PUT  /api/users/change-password   Change password
    GET  /api/users                   List users (admin only)
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.auth.deps import get_current_user, require_role
from poultry_api.auth.permissions import roles_for
from poultry_api.database import get_db
from poultry_api.models.user import User
from poultry_api.schemas.common import (
    ApiResponse,
    MessageResponse,
    Page,
    PageParams,
    build_pagination,
)
from poultry_api.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    TokenResponse,
    UserOut,
)
from poultry_api.services import user as user_service

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[TokenResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.register_user(body, db)
    return ApiResponse(
        message="Registration successful",
        data=TokenResponse(
            user=UserOut.model_validate(user),
            token=user_service.issue_token(user),
        ),
    )


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate(body.email, body.password, db)
    return ApiResponse(
        message="Login successful",
        data=TokenResponse(
            user=UserOut.model_validate(user),
            token=user_service.issue_token(user),
        ),
    )


@router.get("/profile", response_model=ApiResponse[UserOut])
async def get_profile(user: User = Depends(get_current_user)):
    return ApiResponse(message="Profile retrieved", data=UserOut.model_validate(user))


@router.put("/profile", response_model=ApiResponse[UserOut])
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    user = await user_service.update_profile(user, body, db)
    return ApiResponse(message="Profile updated", data=UserOut.model_validate(user))


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await user_service.change_password(user, body, db)
    return MessageResponse(message="Password changed")


@router.get("", response_model=ApiResponse[Page[UserOut]])
async def list_users(
    role: str | None = Query(None, pattern="^(admin|farm_owner|worker)$"),
    search: str | None = None,
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_role(*roles_for("users.list"))),
):
    users, total = await user_service.list_users(
        db, role=role, search=search, limit=paging.limit, offset=paging.offset
    )
    return ApiResponse(
        message="Users retrieved",
        data=Page(
            items=[UserOut.model_validate(u) for u in users],
            pagination=build_pagination(paging.page, paging.limit, total),
        ),
    )
