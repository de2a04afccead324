"""
GAD Backend — User Request/Response Schemas
============================================

What:  API contract for /api/v1/users, including role assignment bodies.

Embedded roles:
    UserResponse.role_tags lists only assignments currently in force. Each
    entry flattens the RoleTag fields together with the assignment metadata
    (granted_at, revoked_at, assignment_active, notes), so a client renders
    a user's functions without a second request.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from gad.models.user import Assignment, User
from gad.schemas.common import NOT_BLANK, Email


class UserCreate(BaseModel):
    """
    What:  Body of POST /api/v1/users.

    role_tag_ids: Optional initial roles. Each must exist (404) and be
                  active (400).
    """
    name: str = Field(min_length=2, max_length=100, pattern=NOT_BLANK)
    email: Email
    cpf: str = Field(pattern=r"^\d{11}$", description="CPF, exactly 11 digits")
    siape: str = Field(pattern=r"^\d{7}$", description="SIAPE, exactly 7 digits")
    phone: Optional[str] = Field(default=None, max_length=15)
    education: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=50)
    role_tag_ids: Optional[List[int]] = Field(default=None, description="Role tags to grant")


class UserUpdate(BaseModel):
    """
    What:  Body of PUT /api/v1/users/{id}.

    role_tag_ids: When present (even as []), the user's in-force roles become
                  exactly this set. When omitted or null, roles are untouched.
    """
    name: Optional[str] = Field(default=None, min_length=2, max_length=100, pattern=NOT_BLANK)
    email: Optional[Email] = None
    cpf: Optional[str] = Field(default=None, pattern=r"^\d{11}$")
    siape: Optional[str] = Field(default=None, pattern=r"^\d{7}$")
    phone: Optional[str] = Field(default=None, max_length=15)
    education: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=50)
    role_tag_ids: Optional[List[int]] = None


class AssignRolesRequest(BaseModel):
    """Body of POST /api/v1/users/{id}/roles."""
    role_tag_ids: List[int] = Field(min_length=1)
    notes: Optional[str] = Field(default=None, max_length=255)


class RevokeRolesRequest(BaseModel):
    """Body of DELETE /api/v1/users/{id}/roles."""
    role_tag_ids: List[int] = Field(min_length=1)


class AssignedRoleTagResponse(BaseModel):
    """A role tag as held by a particular user."""
    id: int
    code: str
    name: str
    description: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    granted_at: datetime
    revoked_at: Optional[datetime] = None
    assignment_active: bool
    notes: Optional[str] = None

    @classmethod
    def from_assignment(cls, assignment: Assignment) -> "AssignedRoleTagResponse":
        tag = assignment.role_tag
        return cls(
            id=tag.id,
            code=tag.code,
            name=tag.name,
            description=tag.description,
            active=tag.active,
            created_at=tag.created_at,
            updated_at=tag.updated_at,
            granted_at=assignment.granted_at,
            revoked_at=assignment.revoked_at,
            assignment_active=assignment.active,
            notes=assignment.notes,
        )


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    cpf: str
    siape: str
    phone: Optional[str] = None
    education: Optional[str] = None
    department: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    role_tags: List[AssignedRoleTagResponse] = Field(default_factory=list)

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            cpf=user.cpf,
            siape=user.siape,
            phone=user.phone,
            education=user.education,
            department=user.department,
            active=user.active,
            created_at=user.created_at,
            updated_at=user.updated_at,
            role_tags=[
                AssignedRoleTagResponse.from_assignment(a) for a in user.active_assignments
            ],
        )
