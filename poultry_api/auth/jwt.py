"""JWT token creation and decoding.

Token claims:
  - userId:  user ID
  - email:   account email at issue time
  - role:    user role string
  - exp:     expiry timestamp
"""

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from poultry_api.config import settings
from poultry_api.middleware.exceptions import AuthenticationError

ALGORITHM = settings.jwt_algorithm


def create_access_token(
    user_id: int,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.access_token_expire_days)
    )
    payload = {
        "userId": user_id,
        "email": email,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT.

    Raises AuthenticationError with TOKEN_EXPIRED for a stale signature and
    TOKEN_INVALID for anything else that fails verification.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired", error_code="TOKEN_EXPIRED")
    except JWTError:
        raise AuthenticationError("Invalid token", error_code="TOKEN_INVALID")

    if not isinstance(payload.get("userId"), int):
        raise AuthenticationError("Invalid token", error_code="TOKEN_INVALID")
    return payload
