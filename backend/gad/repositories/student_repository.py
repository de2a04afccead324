"""Data access for `Student` rows."""

from typing import List, Optional, Tuple

from sqlalchemy import Select, select

from gad.models.student import Student
from gad.repositories.base import BaseRepository, contains_ci
from gad.schemas.common import PageParams


class StudentRepository(BaseRepository[Student]):
    """Queries over the students table."""

    model = Student
    sortable_fields = (
        "id",
        "name",
        "email",
        "cpf",
        "birth_date",
        "city",
        "state",
        "enrollment_number",
        "course",
        "active",
        "created_at",
        "updated_at",
    )
    default_sort = "name"

    def filtered(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        course: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Select:
        """SELECT with every supplied filter ANDed together."""
        stmt = select(Student)
        if name:
            stmt = stmt.where(contains_ci(Student.name, name))
        if email:
            stmt = stmt.where(contains_ci(Student.email, email))
        if course:
            stmt = stmt.where(contains_ci(Student.course, course))
        if active is not None:
            stmt = stmt.where(Student.active.is_(active))
        return stmt

    async def search(
        self,
        params: PageParams,
        name: Optional[str] = None,
        email: Optional[str] = None,
        course: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Tuple[List[Student], int]:
        stmt = self.filtered(name=name, email=email, course=course, active=active)
        return await self.paginate(stmt, params)
