"""
GAD Backend — Shared Route Dependencies
========================================

What:  Paging query parameters, the X-Total-Count helper and the error
       response map used in every router's OpenAPI declaration.
"""

from typing import Optional

from fastapi import Query, Response

from gad.config import settings
from gad.schemas.common import ErrorResponse, Page, PageParams

# Merged into each endpoint's `responses=` so Swagger documents the error body
ERROR_RESPONSES = {
    400: {"description": "Invalid input or business rule violated", "model": ErrorResponse},
    404: {"description": "Resource not found", "model": ErrorResponse},
    409: {"description": "Unique value already in use", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


def page_params(
    page: int = Query(default=0, ge=0, description="Zero-based page index"),
    size: int = Query(
        default=settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description=f"Items per page (max {settings.max_page_size})",
    ),
    sort: Optional[str] = Query(
        default=None,
        description="Sort expression: 'field' or 'field,asc|desc' (e.g. 'name,desc')",
    ),
) -> PageParams:
    """FastAPI dependency turning page/size/sort query params into PageParams."""
    return PageParams(page=page, size=size, sort=sort)


def with_total_count(response: Response, page: Page) -> Page:
    """Copy the page total into the X-Total-Count header and return the page."""
    response.headers["X-Total-Count"] = str(page.total_count)
    return page
