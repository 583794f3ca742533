"""Common response schemas used across the API."""

import math
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for request/response bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapped around every response body.

    Attributes:
        success: Whether the operation succeeded
        message: Human-readable outcome
        data: Payload for successful operations
        error: Error message for failed operations
        details: Extra error information (field errors, retry hints)
        timestamp: When the response was produced
    """

    success: bool = True
    message: str | None = None
    data: T | None = None
    error: str | None = None
    details: Any | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ErrorDetail(BaseModel):
    """Detailed error information for a specific field or issue.

    Attributes:
        field: The field name that caused the error (None for general errors)
        message: Human-readable error description
    """

    field: str | None = Field(None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class PageInfo(CamelModel):
    """Pagination block returned with list and search results."""

    current_page: int
    total_pages: int
    total_count: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PageInfo":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_count=total,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


def error_body(message: str, details: Any | None = None) -> dict:
    """JSON body for a failed request."""
    return ApiResponse[None](success=False, error=message, details=details).model_dump(
        mode="json", exclude_none=True
    )
