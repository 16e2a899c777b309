"""Rate limiting middleware using Redis.

Applies a sliding window per user (when a valid bearer token is present)
or per client IP to everything under `/api/`.  When Redis is unreachable the
request is let through.
"""

import logging
import time
from typing import Callable, Optional

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

from poultry_api.auth.jwt import decode_token
from poultry_api.config import settings
from poultry_api.middleware.exceptions import AuthenticationError, create_error_response
from poultry_api.utils.redis_client import get_redis

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window rate limiter with a Redis sorted set per client."""

    def __init__(
        self,
        app,
        limit: Optional[int] = None,
        window: Optional[int] = None,
        path_prefix: str = "/api/",
        enabled: Optional[bool] = None,
    ):
        super().__init__(app)
        self.limit = limit or settings.rate_limit_max_requests
        self.window = window or settings.rate_limit_window_seconds
        self.path_prefix = path_prefix
        self.enabled = settings.rate_limit_enabled if enabled is None else enabled

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        key = self._get_rate_limit_key(request)
        allowed, remaining, reset_time = await self._check_rate_limit(key)

        if not allowed:
            retry_after = max(int(reset_time - time.time()), 1)
            return create_error_response(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                message="Too many requests from this IP, please try again later.",
                error_code="RATE_LIMITED",
                headers={
                    "X-RateLimit-Limit": str(self.limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(int(reset_time)),
                    "Retry-After": str(retry_after),
                },
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = str(int(reset_time))
        return response

    def _get_rate_limit_key(self, request: Request) -> str:
        """Get rate limit key (user ID or IP address)."""
        auth_header = request.headers.get("authorization", "")
        if auth_header.startswith("Bearer "):
            try:
                payload = decode_token(auth_header[7:])
                return f"user:{payload['userId']}"
            except AuthenticationError:
                pass  # Fall back to IP

        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            ip = forwarded.split(",")[0].strip()
        else:
            ip = request.client.host if request.client else "unknown"
        return f"ip:{ip}"

    async def _check_rate_limit(self, key: str) -> tuple[bool, int, float]:
        """Returns (allowed, remaining, reset_time)."""
        current_time = time.time()
        window_start = current_time - self.window
        redis_key = f"ratelimit:{key}"

        try:
            redis_client = await get_redis()
            await redis_client.zremrangebyscore(redis_key, 0, window_start)
            count = await redis_client.zcard(redis_key)

            if count >= self.limit:
                oldest = await redis_client.zrange(redis_key, 0, 0, withscores=True)
                if oldest:
                    reset_time = oldest[0][1] + self.window
                else:
                    reset_time = current_time + self.window
                return False, 0, reset_time

            await redis_client.zadd(redis_key, {str(current_time): current_time})
            await redis_client.expire(redis_key, self.window)

            return True, self.limit - count - 1, current_time + self.window

        except Exception as e:
            # Fail open
            logger.error(f"Rate limit check failed: {e}")
            return True, self.limit, current_time + self.window
