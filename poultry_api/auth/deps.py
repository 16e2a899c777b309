"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_user       → decode JWT, load user from DB, return User
  require_role(...)      → restrict to specific roles
  require_farm_access    → caller owns the farm in the path (admins bypass)
"""

from fastapi import Depends, Path
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from poultry_api.auth.jwt import decode_token
from poultry_api.auth.permissions import bypasses_ownership, has_role
from poultry_api.database import get_db
from poultry_api.middleware.exceptions import AuthenticationError, AuthorizationError
from poultry_api.models.farm import Farm
from poultry_api.models.user import User, UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/users/login", auto_error=False)


# ── Core user dependency ────────────────────────────────────

async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode the bearer token and load the active account it names."""
    if not token:
        raise AuthenticationError("Access token required", error_code="TOKEN_MISSING")

    payload = decode_token(token)

    result = await db.execute(select(User).where(User.id == payload["userId"]))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise AuthenticationError(
            "User not found or inactive", error_code="ACCOUNT_INACTIVE"
        )
    return user


# ── Role-based access control ───────────────────────────────

def require_role(*roles: UserRole):
    """Dependency factory: restrict to one or more roles.

    Usage:
        @router.get("/admin-only")
        async def admin_view(user: User = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    allowed = frozenset(roles)

    async def _check(user: User = Depends(get_current_user)) -> User:
        if not has_role(user.role, allowed):
            raise AuthorizationError(
                f"Requires role: {', '.join(sorted(r.value for r in allowed))}"
            )
        return user

    return _check


# ── Farm ownership ──────────────────────────────────────────

async def require_farm_access(
    farm_id: int = Path(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Ensure the caller may act on `farm_id`.

    A missing farm and a farm owned by someone else both yield 403, so the
    response never reveals whether a farm id exists.
    """
    if bypasses_ownership(user.role):
        return user

    result = await db.execute(
        select(Farm.id).where(
            Farm.id == farm_id,
            Farm.owner_id == user.id,
            Farm.is_active == True,  # noqa: E712
        )
    )
    if result.scalar_one_or_none() is None:
        raise AuthorizationError("Access denied to this farm")
    return user
