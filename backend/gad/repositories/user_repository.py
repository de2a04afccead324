"""Data access for `User` rows and their assignments."""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import Select, and_, select

from gad.models.role_tag import RoleTag
from gad.models.user import Assignment, User
from gad.repositories.base import BaseRepository, contains_ci
from gad.schemas.common import PageParams


class UserRepository(BaseRepository[User]):
    """Queries over the users table."""

    model = User
    sortable_fields = (
        "id",
        "name",
        "email",
        "cpf",
        "siape",
        "education",
        "department",
        "active",
        "created_at",
        "updated_at",
    )
    default_sort = "name"

    def filtered(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        department: Optional[str] = None,
        education: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Select:
        stmt = select(User)
        if name:
            stmt = stmt.where(contains_ci(User.name, name))
        if email:
            stmt = stmt.where(contains_ci(User.email, email))
        if department:
            stmt = stmt.where(contains_ci(User.department, department))
        if education:
            stmt = stmt.where(contains_ci(User.education, education))
        if active is not None:
            stmt = stmt.where(User.active.is_(active))
        return stmt

    async def search(
        self,
        params: PageParams,
        name: Optional[str] = None,
        email: Optional[str] = None,
        department: Optional[str] = None,
        education: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Tuple[List[User], int]:
        stmt = self.filtered(
            name=name,
            email=email,
            department=department,
            education=education,
            active=active,
        )
        return await self.paginate(stmt, params)

    def holding_role(self, code: str) -> Select:
        """
        Active users with an in-force assignment of the tag `code`.

        Uses EXISTS rather than a join so a user appears once no matter
        how the assignment rows look.
        """
        in_force_with_code = and_(
            Assignment.active.is_(True),
            Assignment.revoked_at.is_(None),
            Assignment.role_tag.has(RoleTag.code == code),
        )
        return select(User).where(
            User.active.is_(True),
            User.assignments.any(in_force_with_code),
        )

    async def list_by_role(self, code: str, sort: Optional[str] = None) -> Sequence[User]:
        return await self.fetch_all(self.holding_role(code), sort=sort)

    async def page_by_role(self, code: str, params: PageParams) -> Tuple[List[User], int]:
        return await self.paginate(self.holding_role(code), params)
