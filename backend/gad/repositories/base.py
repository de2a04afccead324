"""
GAD Backend — Repository Base
==============================

What:  Generic async data-access class shared by the three aggregates.
Why:   Keeps SQL out of the services. A service decides *what* to fetch,
       the repository knows *how* to express it in SQLAlchemy.
How:   One repository instance per request, wrapping the request's
       AsyncSession. Repositories flush but never commit; the session
       dependency (gad.database.get_db_session) owns the transaction.

Sorting:
    Clients send `sort=field` or `sort=field,asc|desc`. The field must be
    listed in the subclass's `sortable_fields`; anything else raises
    ValidationError (400) instead of reaching the database. The primary
    key is appended as a tie-breaker so page boundaries are stable.
"""

from typing import Any, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gad.database import Base
from gad.exceptions import ValidationError
from gad.schemas.common import PageParams

ModelT = TypeVar("ModelT", bound=Base)


def contains_ci(column: Any, term: str) -> Any:
    """Case-insensitive substring match with LIKE wildcards in `term` escaped."""
    return func.lower(column).contains(term.lower(), autoescape=True)


class BaseRepository(Generic[ModelT]):
    """CRUD and paging primitives for a single mapped class."""

    model: Type[ModelT]
    sortable_fields: Tuple[str, ...] = ("id",)
    default_sort: str = "id"

    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Single-row access ─────────────────────────────────────────────────

    async def get(self, entity_id: int) -> Optional[ModelT]:
        """Get an entity by primary key, or None."""
        return await self.session.get(self.model, entity_id)

    async def find_one_by(self, field: str, value: Any) -> Optional[ModelT]:
        """Exact-match lookup on a (unique) column."""
        stmt = select(self.model).where(getattr(self.model, field) == value)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def exists_by(
        self, field: str, value: Any, exclude_id: Optional[int] = None
    ) -> bool:
        """True if another row already holds `value` in `field`."""
        stmt = select(self.model.id).where(getattr(self.model, field) == value)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        result = await self.session.execute(stmt.limit(1))
        return result.first() is not None

    # ── Writes ────────────────────────────────────────────────────────────

    async def add(self, entity: ModelT) -> ModelT:
        """Persist a new entity; the flush assigns its id and defaults."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def save(self, entity: ModelT) -> ModelT:
        """Flush pending changes on an already-managed entity."""
        await self.session.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.session.delete(entity)
        await self.session.flush()

    # ── Listing ───────────────────────────────────────────────────────────

    def order_by(self, sort: Optional[str]) -> List[Any]:
        """Translate a `field[,direction]` expression into ORDER BY clauses."""
        expression = (sort or self.default_sort).strip()
        field, _, direction = expression.partition(",")
        field = field.strip()
        direction = (direction.strip() or "asc").lower()

        if field not in self.sortable_fields:
            raise ValidationError(
                message=(
                    f"Cannot sort by '{field}'. "
                    f"Sortable fields: {', '.join(self.sortable_fields)}"
                ),
                field="sort",
            )
        if direction not in ("asc", "desc"):
            raise ValidationError(
                message=f"Invalid sort direction '{direction}'. Use 'asc' or 'desc'",
                field="sort",
            )

        column = getattr(self.model, field)
        clauses = [column.desc() if direction == "desc" else column.asc()]
        if field != "id":
            clauses.append(self.model.id.asc())
        return clauses

    async def paginate(
        self, stmt: Select, params: PageParams
    ) -> Tuple[List[ModelT], int]:
        """
        Run `stmt` as one page plus a COUNT over the same filters.

        Returns:
            (items on the requested page, total matching rows)
        """
        clauses = self.order_by(params.sort)

        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()

        page_stmt = stmt.order_by(*clauses).offset(params.offset).limit(params.size)
        result = await self.session.execute(page_stmt)
        return list(result.scalars().all()), total

    async def fetch_all(self, stmt: Select, sort: Optional[str] = None) -> Sequence[ModelT]:
        """Run `stmt` unpaginated, ordered by `sort` (or the default)."""
        result = await self.session.execute(stmt.order_by(*self.order_by(sort)))
        return list(result.scalars().all())
