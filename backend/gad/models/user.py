"""
GAD Backend — User and Assignment SQLAlchemy Models
====================================================

What:  ORM models for staff users (`users`) and their role assignments
       (`user_role_tags`).
Why:   A staff member can hold several functions at once (instructor and
       coordinator, for instance). Assignments are rows rather than a bare
       association table because each grant carries metadata: when it was
       granted, when it was revoked, and a free-text note.

Assignment lifecycle:
    created   → active=True,  granted_at=now, revoked_at=None
    revoke()  → active=False, revoked_at=now
    reinstate() → active=True, revoked_at=None (granted_at is kept)

    A (user, role_tag) pair has at most one row; re-granting a revoked tag
    reinstates the existing row instead of inserting a duplicate.

Loading strategy:
    Both relationships use lazy="selectin". Async sessions cannot lazy-load
    on attribute access, so collections are fetched eagerly with every
    user query.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gad.database import Base, IdType, utcnow
from gad.models.role_tag import RoleTag


class User(Base):
    """A staff member of the institution."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    cpf: Mapped[str] = mapped_column(String(11), nullable=False, unique=True)

    # Federal civil-servant registration number (7 digits)
    siape: Mapped[str] = mapped_column(String(7), nullable=False, unique=True)

    phone: Mapped[Optional[str]] = mapped_column(String(15), nullable=True)
    education: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utcnow, onupdate=utcnow
    )

    assignments: Mapped[List["Assignment"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Assignment.id",
    )

    __table_args__ = (
        Index("idx_users_name", "name"),
    )

    @property
    def active_assignments(self) -> List["Assignment"]:
        """Assignments currently in force, in grant order."""
        return [a for a in self.assignments if a.in_force]

    def find_assignment(self, role_tag_id: int) -> Optional["Assignment"]:
        """The assignment row for a role tag, in force or not."""
        for assignment in self.assignments:
            if assignment.role_tag_id == role_tag_id:
                return assignment
        return None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', active={self.active})>"


class Assignment(Base):
    """Join record granting a RoleTag to a User."""

    __tablename__ = "user_role_tags"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role_tag_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("role_tags.id"), nullable=False
    )

    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    revoked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    # e.g. "Coordinator of the Computer Science program"
    notes: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    user: Mapped[User] = relationship(back_populates="assignments")
    role_tag: Mapped[RoleTag] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_id", "role_tag_id", name="uq_user_role_tags_user_role"),
        Index("idx_user_role_tags_role_tag_id", "role_tag_id"),
    )

    @property
    def in_force(self) -> bool:
        return bool(self.active) and self.revoked_at is None

    def revoke(self) -> None:
        self.active = False
        self.revoked_at = utcnow()

    def reinstate(self) -> None:
        self.active = True
        self.revoked_at = None

    def __repr__(self) -> str:
        return (
            f"<Assignment(user_id={self.user_id}, role_tag_id={self.role_tag_id}, "
            f"active={self.active})>"
        )
