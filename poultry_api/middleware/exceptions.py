"""Application exceptions and the handlers that turn them into responses.

Every error leaves the API in the same envelope as a success:

    {
        "success": false,
        "message": "Human-readable error message",
        "error_code": "ERROR_CODE",
        "errors": [{"field": "...", "message": "..."}]   // validation only
    }

Domain services raise the specific `AppError` subclass; storage-layer
integrity errors that slip past a service pre-check are mapped onto the
conflict shape here, and anything else degrades to a generic 500.
"""

import logging
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from poultry_api.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


class AuthenticationError(AppError):
    """Missing, malformed or expired token, or an inactive account."""

    def __init__(self, message: str = "Authentication required", error_code: str = "UNAUTHENTICATED"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
        )


class AuthorizationError(AppError):
    """Role or farm-ownership denial."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
        )


class NotFoundError(AppError):
    def __init__(self, resource: str, identifier: Union[int, str, None] = None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} not found: {identifier}"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )


class ConflictError(AppError):
    """Duplicate code/number or a dependent record blocking the operation."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
        )


class CapacityExceededError(ConflictError):
    def __init__(self, capacity: int):
        super().__init__(
            message=f"Bird count exceeds house capacity (maximum {capacity} birds)",
            error_code="CAPACITY_EXCEEDED",
        )


class InvalidStateError(AppError):
    """Operation not permitted in the entity's current lifecycle state."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_STATE",
        )


class OrderCreationError(AppError):
    def __init__(self, message: str = "Failed to create order"):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="ORDER_CREATION_FAILED",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    errors: list[dict] | None = None,
    headers: dict | None = None,
    detail: str | None = None,
) -> JSONResponse:
    content = {
        "success": False,
        "message": message,
        "error_code": error_code,
    }
    if errors:
        content["errors"] = errors
    if detail and not settings.is_production:
        content["detail"] = detail

    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        f"Application error: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
        },
    )

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        headers=headers,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"HTTP {exc.status_code}: {exc.detail}",
            extra={"path": request.url.path, "method": request.method},
        )

    message = str(exc.detail)
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = "API endpoint not found"

    return create_error_response(
        status_code=exc.status_code,
        message=message,
        error_code=f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


def _format_location(loc: tuple) -> str:
    # Drop the leading "body"/"query"/"path" segment FastAPI adds
    parts = list(loc)
    if parts and parts[0] in ("body", "query", "path"):
        parts = parts[1:]
    return ".".join(str(p) for p in parts)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    errors = [
        {"field": _format_location(error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    logger.warning(
        f"Validation error on {request.url.path}",
        extra={"path": request.url.path, "method": request.method, "errors": errors},
    )

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Validation error",
        error_code="VALIDATION_ERROR",
        errors=errors,
    )


async def database_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Integrity violations that got past a service pre-check (races)."""
    logger.error(
        f"Database integrity error on {request.url.path}: {exc}",
        extra={"path": request.url.path, "method": request.method},
    )

    error_msg = str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)
    lowered = error_msg.lower()

    if "unique" in lowered or "duplicate" in lowered:
        message = "A record with this value already exists"
        error_code = "DUPLICATE_RECORD"
    elif "foreign key" in lowered:
        message = "Referenced record does not exist"
        error_code = "FOREIGN_KEY_VIOLATION"
    else:
        message = "Database constraint violation"
        error_code = "INTEGRITY_ERROR"

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message=message,
        error_code=error_code,
    )


async def operational_exception_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error(
        f"Database operational error on {request.url.path}: {exc}",
        extra={"path": request.url.path, "method": request.method},
    )

    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Database temporarily unavailable. Please try again.",
        error_code="DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        extra={"path": request.url.path, "method": request.method},
        exc_info=True,
    )

    # Internal detail is only attached outside production
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code="INTERNAL_SERVER_ERROR",
        detail=repr(exc),
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
