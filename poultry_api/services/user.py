"""Account service: registration, login, profile and password changes."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.auth.jwt import create_access_token
from poultry_api.auth.password import hash_password, verify_password
from poultry_api.middleware.exceptions import (
    AuthenticationError,
    ConflictError,
)
from poultry_api.models.user import User, UserRole
from poultry_api.schemas.user import (
    ChangePasswordRequest,
    ProfileUpdate,
    RegisterRequest,
)

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.email, UserRole(user.role).value)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def register_user(body: RegisterRequest, db: AsyncSession) -> User:
    if await get_user_by_email(db, body.email):
        raise ConflictError("Email already registered", error_code="DUPLICATE_EMAIL")

    user = User(
        email=body.email.lower(),
        password_hash=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        role=UserRole(body.role),
    )
    db.add(user)
    await db.flush()

    logger.info(f"Registered user {user.email} ({user.role.value})")
    return user


async def authenticate(email: str, password: str, db: AsyncSession) -> User:
    """Return the account for valid credentials.

    Unknown email and wrong password produce the same error.
    """
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError(
            "Invalid email or password", error_code="INVALID_CREDENTIALS"
        )
    if not user.is_active:
        raise AuthenticationError(
            "Account is deactivated", error_code="ACCOUNT_INACTIVE"
        )
    return user


async def update_profile(user: User, body: ProfileUpdate, db: AsyncSession) -> User:
    for key, value in body.model_dump(exclude_unset=True).items():
        setattr(user, key, value)
    await db.flush()
    await db.refresh(user)
    return user


async def change_password(user: User, body: ChangePasswordRequest, db: AsyncSession) -> None:
    if not verify_password(body.current_password, user.password_hash):
        raise AuthenticationError(
            "Current password is incorrect", error_code="INVALID_CREDENTIALS"
        )
    user.password_hash = hash_password(body.new_password)
    await db.flush()
    logger.info(f"Password changed for user {user.id}")


async def list_users(
    db: AsyncSession,
    *,
    role: str | None = None,
    search: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[User], int]:
    filters = []
    if role:
        filters.append(User.role == UserRole(role))
    if search:
        pattern = f"%{search}%"
        filters.append(or_(
            User.email.ilike(pattern),
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
        ))

    total = (await db.execute(select(func.count(User.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(User)
        .where(*filters)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all()), total
