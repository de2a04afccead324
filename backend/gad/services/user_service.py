"""
GAD Backend — User Service
===========================

What:  Business rules for staff users and their role assignments.
Who:   Called by the /api/v1/users route handlers.

Rules enforced here:
    - email, cpf and siape are unique (409 on collision)
    - every referenced role tag must exist (404)
    - a role tag granted anew must be active (400)
    - activate/deactivate refuse a no-op transition (400)

Assignment Flow:
    grant(tag)   no row            → new Assignment(granted_at=now, notes)
                 row, revoked      → reinstate()
                 row, in force     → unchanged
    revoke(tag)  row, in force     → revoke()
                 otherwise         → ignored

    PUT with role_tag_ids replaces the in-force set: tags outside the new
    set are revoked, tags inside it are granted as above. Rows are never
    deleted, so the grant/revoke history survives.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from gad.database import utcnow
from gad.exceptions import BusinessRuleError, NotFoundError
from gad.models.role_tag import RoleTag
from gad.models.user import Assignment, User
from gad.repositories.role_tag_repository import RoleTagRepository
from gad.repositories.user_repository import UserRepository
from gad.schemas.common import Page, PageParams
from gad.schemas.user import (
    AssignRolesRequest,
    RevokeRolesRequest,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from gad.services.base import database_errors, ensure_unique

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = ("email", "cpf", "siape")


def _page(users, total: int, params: PageParams) -> Page[UserResponse]:
    items = [UserResponse.from_model(u) for u in users]
    return Page[UserResponse].build(items, total, params)


def _unique_ids(ids: Iterable[int]) -> List[int]:
    """Drop repeated ids while keeping request order."""
    return list(dict.fromkeys(ids))


class UserService:
    """
    Business logic layer for user operations.

    Role assignment helpers work on the loaded `User.assignments` collection;
    the session flush writes the resulting inserts and updates.
    """

    async def _get_or_404(self, repo: UserRepository, user_id: int) -> User:
        user = await repo.get(user_id)
        if user is None:
            logger.warning("User not found: id=%s", user_id)
            raise NotFoundError(resource="User", resource_id=user_id)
        return user

    async def _resolve_role_tags(
        self,
        db: AsyncSession,
        role_tag_ids: Iterable[int],
        already_held: Iterable[int] = (),
    ) -> List[RoleTag]:
        """
        Load role tags by id, in request order.

        Raises:
            NotFoundError: an id matches no tag (→ 404)
            BusinessRuleError: a tag not in `already_held` is inactive (→ 400)
        """
        ids = _unique_ids(role_tag_ids)
        found = {tag.id: tag for tag in await RoleTagRepository(db).find_by_ids(ids)}
        held = set(already_held)
        tags = []
        for role_tag_id in ids:
            tag = found.get(role_tag_id)
            if tag is None:
                raise NotFoundError(resource="Role tag", resource_id=role_tag_id)
            if not tag.active and role_tag_id not in held:
                raise BusinessRuleError(
                    message=f"Role tag '{tag.code}' is inactive and cannot be assigned",
                    context={"role_tag_id": role_tag_id},
                )
            tags.append(tag)
        return tags

    @staticmethod
    def _grant(user: User, tag: RoleTag, notes: Optional[str] = None) -> bool:
        """Put `tag` in force for `user`; False when it already was."""
        assignment = user.find_assignment(tag.id)
        if assignment is None:
            user.assignments.append(
                Assignment(
                    role_tag_id=tag.id,
                    role_tag=tag,
                    granted_at=utcnow(),
                    active=True,
                    notes=notes,
                )
            )
            return True
        if not assignment.in_force:
            assignment.reinstate()
            if notes is not None:
                assignment.notes = notes
            return True
        return False

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, data: UserCreate) -> UserResponse:
        """
        Register a staff user, optionally granting initial role tags.

        Raises:
            ConflictError: email, CPF or SIAPE already used (→ 409)
            NotFoundError: unknown role tag id (→ 404)
            BusinessRuleError: inactive role tag (→ 400)
        """
        logger.info("Creating user with email %s", data.email)
        repo = UserRepository(db)
        with database_errors("create user", email=data.email):
            await ensure_unique(repo, data.model_dump(include=set(UNIQUE_FIELDS)))
            tags = await self._resolve_role_tags(db, data.role_tag_ids or [])

            # An empty collection keeps the flushed user from lazy loading it
            user = User(**data.model_dump(exclude={"role_tag_ids"}), assignments=[])
            for tag in tags:
                self._grant(user, tag)
            await repo.add(user)
        logger.info("User created: id=%s roles=%s", user.id, [t.code for t in tags])
        return UserResponse.from_model(user)

    async def get_by_id(self, db: AsyncSession, user_id: int) -> UserResponse:
        repo = UserRepository(db)
        with database_errors("retrieve user", user_id=user_id):
            user = await self._get_or_404(repo, user_id)
        return UserResponse.from_model(user)

    async def update(self, db: AsyncSession, user_id: int, data: UserUpdate) -> UserResponse:
        """
        Apply a partial update.

        When `role_tag_ids` is present the user's in-force roles become exactly
        that set. Tags the user already holds may be inactive; newly granted
        ones may not.
        """
        logger.info("Updating user id=%s", user_id)
        repo = UserRepository(db)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        role_tag_ids = changes.pop("role_tag_ids", None)

        with database_errors("update user", user_id=user_id):
            user = await self._get_or_404(repo, user_id)
            await ensure_unique(
                repo,
                {f: changes[f] for f in UNIQUE_FIELDS if f in changes},
                exclude_id=user.id,
                current={f: getattr(user, f) for f in UNIQUE_FIELDS},
            )
            for field, value in changes.items():
                setattr(user, field, value)

            if role_tag_ids is not None:
                held = [a.role_tag_id for a in user.active_assignments]
                tags = await self._resolve_role_tags(db, role_tag_ids, already_held=held)
                wanted = {tag.id for tag in tags}
                roles_changed = False
                for assignment in user.active_assignments:
                    if assignment.role_tag_id not in wanted:
                        assignment.revoke()
                        roles_changed = True
                for tag in tags:
                    roles_changed = self._grant(user, tag) or roles_changed
                if roles_changed:
                    # Only user_role_tags rows changed, so onupdate would not fire
                    user.updated_at = utcnow()

            await repo.save(user)
        logger.info("User updated: id=%s fields=%s", user_id, sorted(changes))
        return UserResponse.from_model(user)

    async def delete(self, db: AsyncSession, user_id: int) -> None:
        """Delete a user together with its assignment rows."""
        repo = UserRepository(db)
        with database_errors("delete user", user_id=user_id):
            user = await self._get_or_404(repo, user_id)
            await repo.delete(user)
        logger.info("User deleted: id=%s", user_id)

    # ── Listing and search ────────────────────────────────────────────────

    async def search(
        self,
        db: AsyncSession,
        params: PageParams,
        name: Optional[str] = None,
        email: Optional[str] = None,
        department: Optional[str] = None,
        education: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Page[UserResponse]:
        repo = UserRepository(db)
        with database_errors("list users"):
            users, total = await repo.search(
                params,
                name=name,
                email=email,
                department=department,
                education=education,
                active=active,
            )
        return _page(users, total, params)

    async def list_all(self, db: AsyncSession, params: PageParams) -> Page[UserResponse]:
        return await self.search(db, params)

    async def list_active(self, db: AsyncSession, params: PageParams) -> Page[UserResponse]:
        return await self.search(db, params, active=True)

    async def search_by_name(
        self, db: AsyncSession, name: str, params: PageParams
    ) -> Page[UserResponse]:
        return await self.search(db, params, name=name)

    async def search_by_department(
        self, db: AsyncSession, department: str, params: PageParams
    ) -> Page[UserResponse]:
        return await self.search(db, params, department=department)

    async def search_by_education(
        self, db: AsyncSession, education: str, params: PageParams
    ) -> Page[UserResponse]:
        return await self.search(db, params, education=education)

    async def list_by_role(self, db: AsyncSession, code: str) -> List[UserResponse]:
        """Active users holding an in-force assignment of `code`, by name."""
        repo = UserRepository(db)
        with database_errors("list users by role", code=code):
            users = await repo.list_by_role(code)
        return [UserResponse.from_model(u) for u in users]

    async def list_by_role_paged(
        self, db: AsyncSession, code: str, params: PageParams
    ) -> Page[UserResponse]:
        repo = UserRepository(db)
        with database_errors("list users by role", code=code):
            users, total = await repo.page_by_role(code, params)
        return _page(users, total, params)

    async def _get_by(self, db: AsyncSession, field: str, label: str, value: str) -> UserResponse:
        repo = UserRepository(db)
        with database_errors("retrieve user", **{field: value}):
            user = await repo.find_one_by(field, value)
        if user is None:
            raise NotFoundError(resource="User", resource_id=value, lookup_field=label)
        return UserResponse.from_model(user)

    async def get_by_email(self, db: AsyncSession, email: str) -> UserResponse:
        return await self._get_by(db, "email", "email", email)

    async def get_by_cpf(self, db: AsyncSession, cpf: str) -> UserResponse:
        return await self._get_by(db, "cpf", "CPF", cpf)

    async def get_by_siape(self, db: AsyncSession, siape: str) -> UserResponse:
        return await self._get_by(db, "siape", "SIAPE", siape)

    # ── Activation ────────────────────────────────────────────────────────

    async def activate(self, db: AsyncSession, user_id: int) -> UserResponse:
        return await self._set_active(db, user_id, True)

    async def deactivate(self, db: AsyncSession, user_id: int) -> UserResponse:
        return await self._set_active(db, user_id, False)

    async def _set_active(self, db: AsyncSession, user_id: int, active: bool) -> UserResponse:
        repo = UserRepository(db)
        with database_errors("change user status", user_id=user_id):
            user = await self._get_or_404(repo, user_id)
            if user.active == active:
                state = "active" if active else "inactive"
                raise BusinessRuleError(
                    message=f"User is already {state}",
                    context={"user_id": user_id},
                )
            user.active = active
            await repo.save(user)
        logger.info("User id=%s %s", user_id, "activated" if active else "deactivated")
        return UserResponse.from_model(user)

    # ── Role assignment ───────────────────────────────────────────────────

    async def assign_roles(
        self, db: AsyncSession, user_id: int, data: AssignRolesRequest
    ) -> UserResponse:
        """
        Grant role tags to a user.

        Tags already in force are skipped, revoked ones are reinstated and
        the rest get a new assignment carrying `data.notes`.
        """
        repo = UserRepository(db)
        with database_errors("assign roles", user_id=user_id):
            user = await self._get_or_404(repo, user_id)
            tags = await self._resolve_role_tags(db, data.role_tag_ids)
            granted = [tag.code for tag in tags if self._grant(user, tag, data.notes)]
            if granted:
                user.updated_at = utcnow()
            await repo.save(user)
        logger.info("Roles assigned to user id=%s: %s", user_id, granted)
        return UserResponse.from_model(user)

    async def revoke_roles(
        self, db: AsyncSession, user_id: int, data: RevokeRolesRequest
    ) -> UserResponse:
        """Revoke in-force assignments; ids the user does not hold are ignored."""
        repo = UserRepository(db)
        with database_errors("revoke roles", user_id=user_id):
            user = await self._get_or_404(repo, user_id)
            revoked = []
            for role_tag_id in _unique_ids(data.role_tag_ids):
                assignment = user.find_assignment(role_tag_id)
                if assignment is not None and assignment.in_force:
                    assignment.revoke()
                    revoked.append(role_tag_id)
            if revoked:
                user.updated_at = utcnow()
            await repo.save(user)
        logger.info("Roles revoked from user id=%s: %s", user_id, revoked)
        return UserResponse.from_model(user)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
