"""
GAD Backend — RoleTag Request/Response Schemas
===============================================

What:  API contract for /api/v1/role-tags.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from gad.schemas.common import NOT_BLANK


class RoleTagCreate(BaseModel):
    """Body of POST /api/v1/role-tags."""
    code: str = Field(
        min_length=2, max_length=30, pattern=NOT_BLANK,
        description="Unique code, e.g. INSTRUCTOR",
    )
    name: str = Field(min_length=2, max_length=100, pattern=NOT_BLANK, description="Display name")
    description: Optional[str] = Field(default=None, max_length=255)


class RoleTagUpdate(BaseModel):
    """Body of PUT /api/v1/role-tags/{id}. Omitted/null fields are kept."""
    code: Optional[str] = Field(default=None, min_length=2, max_length=30, pattern=NOT_BLANK)
    name: Optional[str] = Field(default=None, min_length=2, max_length=100, pattern=NOT_BLANK)
    description: Optional[str] = Field(default=None, max_length=255)


class RoleTagResponse(BaseModel):
    id: int
    code: str
    name: str
    description: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
