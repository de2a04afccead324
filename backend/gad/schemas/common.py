"""
GAD Backend — Shared Request/Response Schemas
==============================================

What:  Pydantic models reused by every resource: the page envelope, paging
       query parameters, the error body and the health payload.
Why:   Clients parse one pagination shape and one error shape regardless of
       which endpoint they called.

Design Decision:
    Offset pagination (page/size) rather than cursors. The admin screens that
    consume this API jump to arbitrary pages and show "page N of M", which a
    cursor cannot answer without walking the whole set.
"""

import math
from dataclasses import dataclass
from typing import Annotated, Any, Generic, List, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, EmailStr, Field

T = TypeVar("T")


# ══════════════════════════════════════════════════════════════════════════
# Reusable field types
# ══════════════════════════════════════════════════════════════════════════


def _email_length(v: str) -> str:
    if len(v) > 150:
        raise ValueError("must have at most 150 characters")
    return v


# Field pattern rejecting empty and whitespace-only strings (pattern is a search)
NOT_BLANK = r"\S"

# Syntactically valid address that fits the 150-char email columns
Email = Annotated[EmailStr, AfterValidator(_email_length)]


# ══════════════════════════════════════════════════════════════════════════
# Pagination
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PageParams:
    """
    Validated paging request, built by the `page_params` route dependency.

    Attributes:
        page: Zero-based page index
        size: Items per page, already clamped to settings.max_page_size
        sort: Raw sort expression ("field" or "field,asc|desc"), or None for
              the resource default
    """
    page: int = 0
    size: int = 20
    sort: Optional[str] = None

    @property
    def offset(self) -> int:
        return self.page * self.size


class Page(BaseModel, Generic[T]):
    """
    What:  Envelope for every paginated listing.
    Who:   Returned by list/search endpoints; the same total is also sent in
           the X-Total-Count response header.

    Example:
        {
            "items": [...],
            "total_count": 42,
            "page": 1,
            "size": 20,
            "total_pages": 3,
            "has_more": true
        }
    """
    items: List[T] = Field(description="Records on this page")
    total_count: int = Field(description="Total records matching the filters")
    page: int = Field(description="Zero-based page index")
    size: int = Field(description="Requested page size")
    total_pages: int = Field(description="Number of pages at this size")
    has_more: bool = Field(description="Whether a following page exists")

    @classmethod
    def build(cls, items: List[Any], total_count: int, params: PageParams) -> "Page[T]":
        total_pages = math.ceil(total_count / params.size) if params.size else 0
        return cls(
            items=items,
            total_count=total_count,
            page=params.page,
            size=params.size,
            total_pages=total_pages,
            has_more=params.page + 1 < total_pages,
        )


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models (every non-2xx body)
# ══════════════════════════════════════════════════════════════════════════


class ValidationErrorItem(BaseModel):
    """One rejected input field."""
    field: str = Field(description="Dotted path of the offending field")
    message: str = Field(description="Why the value was rejected")
    rejected_value: Optional[Any] = Field(default=None, description="Value as received")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.
    Why:   Clients need a consistent structure to parse errors programmatically.

    Fields:
        error: Machine-readable error code (e.g., "conflict", "not_found")
        message: Human-readable description for display to users
        status: HTTP status code, repeated in the body for log scrapers
        path: Request path that produced the error
        timestamp: When the error was produced (UTC ISO 8601)
        request_id: Correlation ID for tracing this error in server logs
        details: Optional extra context (e.g., which field conflicted)
        validation_errors: Per-field problems for 400 validation failures

    Example:
        {
            "error": "conflict",
            "message": "email is already in use: ana@example.com",
            "status": 409,
            "path": "/api/v1/students",
            "timestamp": "2024-03-01T12:00:00+00:00",
            "request_id": "550e8400-e29b-41d4-a716-446655440000",
            "details": {"field": "email"}
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    status: int = Field(description="HTTP status code")
    path: str = Field(description="Request path")
    timestamp: str = Field(description="UTC ISO 8601 timestamp")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    validation_errors: Optional[List[ValidationErrorItem]] = Field(
        default=None, description="Field-level validation failures"
    )


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and database status.
    Who:   Returned by GET /health for monitoring and load balancer health checks.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
