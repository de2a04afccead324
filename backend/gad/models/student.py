"""
GAD Backend — Student SQLAlchemy Model
=======================================

What:  ORM model representing the `students` table.
Who:   Used by StudentRepository for CRUD and by Alembic for schema management.

Table Design:
    - Integer identity primary key (BIGINT on PostgreSQL, INTEGER on SQLite so
      that SQLite's rowid autoincrement applies)
    - email, cpf: unique and required
    - enrollment_number: unique when present (NULLs never collide)
    - active: soft status toggled by activate/deactivate, never by delete
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Index, String, true
from sqlalchemy.orm import Mapped, mapped_column

from gad.database import Base, IdType, utcnow


class Student(Base):
    """A student enrolled at the institution."""

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)

    # Brazilian taxpayer ID; 11 digits, up to 14 characters when punctuated
    cpf: Mapped[str] = mapped_column(String(14), nullable=False, unique=True)

    phone: Mapped[Optional[str]] = mapped_column(String(15), nullable=True)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    enrollment_number: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True, unique=True
    )
    course: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("idx_students_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, email='{self.email}', active={self.active})>"
