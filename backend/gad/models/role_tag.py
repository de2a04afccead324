"""
GAD Backend — RoleTag SQLAlchemy Model
=======================================

What:  ORM model representing the `role_tags` table.
Why:   Staff functions (instructor, coordinator, director, ...) are data, not
       an enum: new functions are created through the API without a deploy,
       and a user can hold any combination of them.
Who:   Referenced by Assignment; managed by RoleTagService.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, true
from sqlalchemy.orm import Mapped, mapped_column

from gad.database import Base, IdType, utcnow


class RoleTag(Base):
    """A named role/function code that can be assigned to users."""

    __tablename__ = "role_tags"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    # Machine-readable code, e.g. "INSTRUCTOR"
    code: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<RoleTag(id={self.id}, code='{self.code}', active={self.active})>"
