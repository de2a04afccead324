"""
GAD Backend — Student Request/Response Schemas
===============================================

What:  API contract for /api/v1/students.
Why:   Schemas are separate from the SQLAlchemy model so the API controls
       exactly what is accepted and exposed, independently of table layout.

Update semantics:
    StudentUpdate has every field optional. Services apply
    `model_dump(exclude_unset=True, exclude_none=True)`, so a field that is
    omitted or sent as null keeps its stored value.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from gad.schemas.common import NOT_BLANK, Email


class StudentCreate(BaseModel):
    """
    What:  Body of POST /api/v1/students.
    Who:   Admin UI registering a new student.
    """
    name: str = Field(min_length=2, max_length=100, pattern=NOT_BLANK, description="Full name")
    email: Email = Field(description="Contact email (unique)")
    cpf: str = Field(
        min_length=11, max_length=14, pattern=NOT_BLANK,
        description="CPF, digits or punctuated (unique)",
    )
    phone: Optional[str] = Field(default=None, max_length=15)
    birth_date: date = Field(description="Date of birth (YYYY-MM-DD)")
    address: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=2, description="Two-letter state code")
    zip_code: Optional[str] = Field(default=None, max_length=10)
    enrollment_number: Optional[str] = Field(
        default=None, max_length=20, description="Institutional enrollment number (unique when set)"
    )
    course: Optional[str] = Field(default=None, max_length=100)


class StudentUpdate(BaseModel):
    """Body of PUT /api/v1/students/{id}. Every field is optional."""
    name: Optional[str] = Field(default=None, min_length=2, max_length=100, pattern=NOT_BLANK)
    email: Optional[Email] = None
    cpf: Optional[str] = Field(default=None, min_length=11, max_length=14, pattern=NOT_BLANK)
    phone: Optional[str] = Field(default=None, max_length=15)
    birth_date: Optional[date] = None
    address: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=2)
    zip_code: Optional[str] = Field(default=None, max_length=10)
    enrollment_number: Optional[str] = Field(default=None, max_length=20)
    course: Optional[str] = Field(default=None, max_length=100)


class StudentResponse(BaseModel):
    """Full representation of a student record."""
    id: int
    name: str
    email: str
    cpf: str
    phone: Optional[str] = None
    birth_date: date
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    enrollment_number: Optional[str] = None
    course: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
