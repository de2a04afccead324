"""Data access for `RoleTag` rows."""

from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import Select, func, select

from gad.models.role_tag import RoleTag
from gad.models.user import Assignment
from gad.repositories.base import BaseRepository, contains_ci
from gad.schemas.common import PageParams


class RoleTagRepository(BaseRepository[RoleTag]):
    """Queries over the role_tags table."""

    model = RoleTag
    sortable_fields = ("id", "code", "name", "active", "created_at", "updated_at")
    default_sort = "name"

    def filtered(
        self,
        code: Optional[str] = None,
        name: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Select:
        stmt = select(RoleTag)
        if code:
            stmt = stmt.where(contains_ci(RoleTag.code, code))
        if name:
            stmt = stmt.where(contains_ci(RoleTag.name, name))
        if active is not None:
            stmt = stmt.where(RoleTag.active.is_(active))
        return stmt

    async def search(
        self,
        params: PageParams,
        code: Optional[str] = None,
        name: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Tuple[List[RoleTag], int]:
        return await self.paginate(self.filtered(code=code, name=name, active=active), params)

    async def list_active(self) -> Sequence[RoleTag]:
        """Every active tag, sorted by name. Small reference table, never paged."""
        return await self.fetch_all(self.filtered(active=True), sort="name")

    async def find_by_code(self, code: str) -> Optional[RoleTag]:
        return await self.find_one_by("code", code)

    async def find_by_ids(self, ids: Iterable[int]) -> List[RoleTag]:
        wanted = set(ids)
        if not wanted:
            return []
        result = await self.session.execute(select(RoleTag).where(RoleTag.id.in_(wanted)))
        return list(result.scalars().all())

    async def existing_codes(self) -> set:
        result = await self.session.execute(select(RoleTag.code))
        return set(result.scalars().all())

    async def count_assignments(self, role_tag_id: int) -> int:
        """Number of assignment rows (in force or revoked) referencing the tag."""
        stmt = select(func.count(Assignment.id)).where(Assignment.role_tag_id == role_tag_id)
        return (await self.session.execute(stmt)).scalar_one()
