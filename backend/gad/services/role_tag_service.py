"""
GAD Backend — RoleTag Service
==============================

What:  Business rules for role tags plus the startup seeding of the default set.
Who:   Called by the /api/v1/role-tags route handlers and by the app lifespan.

Rules enforced here:
    - code is unique (409 on collision)
    - a tag referenced by any assignment, in force or revoked, cannot be
      deleted (400); deactivate it instead
    - activate/deactivate refuse a no-op transition (400)

Seeding:
    DEFAULT_ROLE_TAGS lists the functions every campus starts with.
    seed_default_role_tags() inserts the ones whose code is missing and
    leaves existing rows untouched, so it is safe on every startup.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from gad.exceptions import BusinessRuleError, NotFoundError
from gad.models.role_tag import RoleTag
from gad.repositories.role_tag_repository import RoleTagRepository
from gad.schemas.common import Page, PageParams
from gad.schemas.role_tag import RoleTagCreate, RoleTagResponse, RoleTagUpdate
from gad.services.base import database_errors, ensure_unique

logger = logging.getLogger(__name__)

# (code, name, description)
DEFAULT_ROLE_TAGS: Tuple[Tuple[str, str, str], ...] = (
    ("INSTRUCTOR", "Instructor",
     "Instructor responsible for teaching classes and advising students"),
    ("COORDINATOR", "Coordinator",
     "General coordinator of an area or sector"),
    ("DIRECTOR", "Director",
     "Campus or department director"),
    ("ADMIN_TECHNICIAN", "Administrative Technician",
     "Technical-administrative staff member"),
    ("COURSE_COORDINATOR", "Course Coordinator",
     "Coordinator responsible for a specific course"),
    ("EXTENSION_COORDINATOR", "Extension Coordinator",
     "Coordinator responsible for extension projects"),
    ("RESEARCH_COORDINATOR", "Research Coordinator",
     "Coordinator responsible for research projects"),
    ("SECRETARY", "Secretary",
     "Responsible for secretariat and records"),
    ("LIBRARIAN", "Librarian",
     "Responsible for the library and collection"),
    ("PEDAGOGUE", "Pedagogue",
     "Responsible for pedagogical and educational matters"),
    ("SOCIAL_WORKER", "Social Worker",
     "Responsible for student social assistance"),
    ("PSYCHOLOGIST", "Psychologist",
     "Responsible for psychological care"),
)


def _page(tags, total: int, params: PageParams) -> Page[RoleTagResponse]:
    items = [RoleTagResponse.model_validate(t) for t in tags]
    return Page[RoleTagResponse].build(items, total, params)


class RoleTagService:
    """Business logic layer for role tag operations."""

    async def _get_or_404(self, repo: RoleTagRepository, role_tag_id: int) -> RoleTag:
        tag = await repo.get(role_tag_id)
        if tag is None:
            logger.warning("Role tag not found: id=%s", role_tag_id)
            raise NotFoundError(resource="Role tag", resource_id=role_tag_id)
        return tag

    async def create(self, db: AsyncSession, data: RoleTagCreate) -> RoleTagResponse:
        logger.info("Creating role tag with code %s", data.code)
        repo = RoleTagRepository(db)
        with database_errors("create role tag", code=data.code):
            await ensure_unique(repo, {"code": data.code})
            tag = await repo.add(RoleTag(**data.model_dump()))
        logger.info("Role tag created: id=%s code=%s", tag.id, tag.code)
        return RoleTagResponse.model_validate(tag)

    async def get_by_id(self, db: AsyncSession, role_tag_id: int) -> RoleTagResponse:
        repo = RoleTagRepository(db)
        with database_errors("retrieve role tag", role_tag_id=role_tag_id):
            tag = await self._get_or_404(repo, role_tag_id)
        return RoleTagResponse.model_validate(tag)

    async def get_by_code(self, db: AsyncSession, code: str) -> RoleTagResponse:
        repo = RoleTagRepository(db)
        with database_errors("retrieve role tag", code=code):
            tag = await repo.find_by_code(code)
        if tag is None:
            logger.warning("Role tag not found: code=%s", code)
            raise NotFoundError(resource="Role tag", resource_id=code, lookup_field="code")
        return RoleTagResponse.model_validate(tag)

    async def update(
        self, db: AsyncSession, role_tag_id: int, data: RoleTagUpdate
    ) -> RoleTagResponse:
        logger.info("Updating role tag id=%s", role_tag_id)
        repo = RoleTagRepository(db)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        with database_errors("update role tag", role_tag_id=role_tag_id):
            tag = await self._get_or_404(repo, role_tag_id)
            if "code" in changes:
                await ensure_unique(
                    repo,
                    {"code": changes["code"]},
                    exclude_id=tag.id,
                    current={"code": tag.code},
                )
            for field, value in changes.items():
                setattr(tag, field, value)
            await repo.save(tag)
        logger.info("Role tag updated: id=%s fields=%s", role_tag_id, sorted(changes))
        return RoleTagResponse.model_validate(tag)

    async def delete(self, db: AsyncSession, role_tag_id: int) -> None:
        """
        Delete a role tag that no assignment references.

        Raises:
            NotFoundError: no such tag (→ 404)
            BusinessRuleError: tag is or was assigned to a user (→ 400)
        """
        repo = RoleTagRepository(db)
        with database_errors("delete role tag", role_tag_id=role_tag_id):
            tag = await self._get_or_404(repo, role_tag_id)
            in_use = await repo.count_assignments(tag.id)
            if in_use:
                logger.warning(
                    "Refusing to delete role tag id=%s: %d assignment(s)", role_tag_id, in_use
                )
                raise BusinessRuleError(
                    message=(
                        f"Role tag '{tag.code}' is assigned to users and cannot be "
                        "deleted; deactivate it instead"
                    ),
                    context={"role_tag_id": role_tag_id, "assignments": in_use},
                )
            await repo.delete(tag)
        logger.info("Role tag deleted: id=%s", role_tag_id)

    # ── Listing and search ────────────────────────────────────────────────

    async def search(
        self,
        db: AsyncSession,
        params: PageParams,
        code: Optional[str] = None,
        name: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Page[RoleTagResponse]:
        repo = RoleTagRepository(db)
        with database_errors("list role tags"):
            tags, total = await repo.search(params, code=code, name=name, active=active)
        return _page(tags, total, params)

    async def list_all(self, db: AsyncSession, params: PageParams) -> Page[RoleTagResponse]:
        return await self.search(db, params)

    async def list_active(self, db: AsyncSession) -> List[RoleTagResponse]:
        repo = RoleTagRepository(db)
        with database_errors("list role tags"):
            tags = await repo.list_active()
        return [RoleTagResponse.model_validate(t) for t in tags]

    async def list_active_paged(
        self, db: AsyncSession, params: PageParams
    ) -> Page[RoleTagResponse]:
        return await self.search(db, params, active=True)

    async def search_by_name(
        self, db: AsyncSession, name: str, params: PageParams
    ) -> Page[RoleTagResponse]:
        return await self.search(db, params, name=name)

    async def search_by_code(
        self, db: AsyncSession, code: str, params: PageParams
    ) -> Page[RoleTagResponse]:
        return await self.search(db, params, code=code)

    # ── Activation ────────────────────────────────────────────────────────

    async def activate(self, db: AsyncSession, role_tag_id: int) -> RoleTagResponse:
        return await self._set_active(db, role_tag_id, True)

    async def deactivate(self, db: AsyncSession, role_tag_id: int) -> RoleTagResponse:
        return await self._set_active(db, role_tag_id, False)

    async def _set_active(
        self, db: AsyncSession, role_tag_id: int, active: bool
    ) -> RoleTagResponse:
        repo = RoleTagRepository(db)
        with database_errors("change role tag status", role_tag_id=role_tag_id):
            tag = await self._get_or_404(repo, role_tag_id)
            if tag.active == active:
                state = "active" if active else "inactive"
                raise BusinessRuleError(
                    message=f"Role tag is already {state}",
                    context={"role_tag_id": role_tag_id},
                )
            tag.active = active
            await repo.save(tag)
        logger.info("Role tag id=%s %s", role_tag_id, "activated" if active else "deactivated")
        return RoleTagResponse.model_validate(tag)

    # ── Seeding ───────────────────────────────────────────────────────────

    async def seed_default_role_tags(self, db: AsyncSession) -> int:
        """
        Insert the default role tags whose code is not yet present.

        Returns:
            Number of tags inserted (0 when everything already exists)
        """
        repo = RoleTagRepository(db)
        with database_errors("seed role tags"):
            existing = await repo.existing_codes()
            created = 0
            for code, name, description in DEFAULT_ROLE_TAGS:
                if code in existing:
                    continue
                await repo.add(RoleTag(code=code, name=name, description=description))
                created += 1
        if created:
            logger.info("Seeded %d default role tag(s)", created)
        else:
            logger.debug("Default role tags already present")
        return created


# ── Singleton Instance ────────────────────────────────────────────────────
role_tag_service = RoleTagService()
