"""Common schemas used across the application."""

import math
from typing import Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope.

    Usage:
        response_model=ApiResponse[FarmOut]

    Returns:
        {
            "success": true,
            "message": "Farm created",
            "data": {...}
        }
    """
    success: bool = True
    message: str
    data: T | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class Page(BaseModel, Generic[T]):
    """Generic paginated payload.

    Returns:
        {
            "items": [...],
            "pagination": {"page": 1, "limit": 10, "total": 42, ...}
        }
    """
    items: list[T]
    pagination: Pagination


class PageParams:
    """Query-string paging shared by every list endpoint."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit) if limit else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
