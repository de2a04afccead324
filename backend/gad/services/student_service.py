"""
GAD Backend — Student Service
==============================

What:  Business rules for student records.
Who:   Called by the /api/v1/students route handlers.

Rules enforced here:
    - email, cpf and enrollment_number are unique (409 on collision);
      on update only changed values are re-checked, excluding the record itself
    - activate/deactivate refuse a no-op transition (400)
    - missing ids and exact lookups answer 404
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from gad.exceptions import BusinessRuleError, NotFoundError
from gad.models.student import Student
from gad.repositories.student_repository import StudentRepository
from gad.schemas.common import Page, PageParams
from gad.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from gad.services.base import database_errors, ensure_unique

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = ("email", "cpf", "enrollment_number")


def _page(students, total: int, params: PageParams) -> Page[StudentResponse]:
    items = [StudentResponse.model_validate(s) for s in students]
    return Page[StudentResponse].build(items, total, params)


class StudentService:
    """
    Business logic layer for student operations.

    Stateless; each call builds a StudentRepository over the given session.
    """

    async def _get_or_404(self, repo: StudentRepository, student_id: int) -> Student:
        student = await repo.get(student_id)
        if student is None:
            logger.warning("Student not found: id=%s", student_id)
            raise NotFoundError(resource="Student", resource_id=student_id)
        return student

    async def create(self, db: AsyncSession, data: StudentCreate) -> StudentResponse:
        """
        Register a new student.

        Raises:
            ConflictError: email, CPF or enrollment number already used (→ 409)
        """
        logger.info("Creating student with email %s", data.email)
        repo = StudentRepository(db)
        with database_errors("create student", email=data.email):
            await ensure_unique(repo, data.model_dump(include=set(UNIQUE_FIELDS)))
            student = await repo.add(Student(**data.model_dump()))
        logger.info("Student created: id=%s", student.id)
        return StudentResponse.model_validate(student)

    async def get_by_id(self, db: AsyncSession, student_id: int) -> StudentResponse:
        repo = StudentRepository(db)
        with database_errors("retrieve student", student_id=student_id):
            student = await self._get_or_404(repo, student_id)
        return StudentResponse.model_validate(student)

    async def update(
        self, db: AsyncSession, student_id: int, data: StudentUpdate
    ) -> StudentResponse:
        """
        Apply a partial update. Omitted and null fields keep their value.

        Raises:
            NotFoundError: no such student (→ 404)
            ConflictError: a changed unique field collides (→ 409)
        """
        logger.info("Updating student id=%s", student_id)
        repo = StudentRepository(db)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        with database_errors("update student", student_id=student_id):
            student = await self._get_or_404(repo, student_id)
            await ensure_unique(
                repo,
                {f: changes[f] for f in UNIQUE_FIELDS if f in changes},
                exclude_id=student.id,
                current={f: getattr(student, f) for f in UNIQUE_FIELDS},
            )
            for field, value in changes.items():
                setattr(student, field, value)
            await repo.save(student)
        logger.info("Student updated: id=%s fields=%s", student_id, sorted(changes))
        return StudentResponse.model_validate(student)

    async def delete(self, db: AsyncSession, student_id: int) -> None:
        repo = StudentRepository(db)
        with database_errors("delete student", student_id=student_id):
            student = await self._get_or_404(repo, student_id)
            await repo.delete(student)
        logger.info("Student deleted: id=%s", student_id)

    # ── Listing and search ────────────────────────────────────────────────

    async def list_all(
        self,
        db: AsyncSession,
        params: PageParams,
        name: Optional[str] = None,
        email: Optional[str] = None,
        course: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Page[StudentResponse]:
        repo = StudentRepository(db)
        with database_errors("list students"):
            students, total = await repo.search(
                params, name=name, email=email, course=course, active=active
            )
        return _page(students, total, params)

    async def search_by_name(
        self, db: AsyncSession, name: str, params: PageParams
    ) -> Page[StudentResponse]:
        return await self.list_all(db, params, name=name)

    async def list_by_course(
        self, db: AsyncSession, course: str, params: PageParams
    ) -> Page[StudentResponse]:
        return await self.list_all(db, params, course=course)

    async def list_active(self, db: AsyncSession, params: PageParams) -> Page[StudentResponse]:
        return await self.list_all(db, params, active=True)

    async def _get_by(self, db: AsyncSession, field: str, label: str, value: str) -> StudentResponse:
        repo = StudentRepository(db)
        with database_errors("retrieve student", **{field: value}):
            student = await repo.find_one_by(field, value)
        if student is None:
            raise NotFoundError(resource="Student", resource_id=value, lookup_field=label)
        return StudentResponse.model_validate(student)

    async def get_by_email(self, db: AsyncSession, email: str) -> StudentResponse:
        return await self._get_by(db, "email", "email", email)

    async def get_by_cpf(self, db: AsyncSession, cpf: str) -> StudentResponse:
        return await self._get_by(db, "cpf", "CPF", cpf)

    async def get_by_enrollment_number(
        self, db: AsyncSession, enrollment_number: str
    ) -> StudentResponse:
        return await self._get_by(
            db, "enrollment_number", "enrollment number", enrollment_number
        )

    # ── Activation ────────────────────────────────────────────────────────

    async def activate(self, db: AsyncSession, student_id: int) -> StudentResponse:
        return await self._set_active(db, student_id, True)

    async def deactivate(self, db: AsyncSession, student_id: int) -> StudentResponse:
        return await self._set_active(db, student_id, False)

    async def _set_active(
        self, db: AsyncSession, student_id: int, active: bool
    ) -> StudentResponse:
        repo = StudentRepository(db)
        with database_errors("change student status", student_id=student_id):
            student = await self._get_or_404(repo, student_id)
            if student.active == active:
                state = "active" if active else "inactive"
                logger.warning("Student id=%s is already %s", student_id, state)
                raise BusinessRuleError(
                    message=f"Student is already {state}",
                    context={"student_id": student_id},
                )
            student.active = active
            await repo.save(student)
        logger.info("Student id=%s %s", student_id, "activated" if active else "deactivated")
        return StudentResponse.model_validate(student)


# ── Singleton Instance ────────────────────────────────────────────────────
student_service = StudentService()
