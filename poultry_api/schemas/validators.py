"""Reusable Pydantic validators shared by the request schemas."""

from typing import Any

from pydantic import field_validator


def reject_null(*fields: str):
    """Validator for partial-update fields backed by NOT NULL columns.

    The field may be omitted, but an explicit null is a validation error.

    Usage:
        class FarmUpdate(BaseModel):
            name: str | None = None
            _name_not_null = reject_null("name")
    """

    def _check(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    return field_validator(*fields)(_check)
