"""
GAD Backend — Role Tag Service Tests
=====================================

What:  RoleTagService rules, run against the in-memory database.

What we test:
    ✅ Seeding inserts the default tags once and is idempotent
    ✅ Seeding fills in only the missing codes
    ✅ Duplicate code rejected with ConflictError
    ✅ Deleting an assigned tag is refused; an unused tag is deleted
    ✅ list_active excludes deactivated tags
"""

import pytest

from gad.database import utcnow
from gad.exceptions import BusinessRuleError, ConflictError, NotFoundError
from gad.models.role_tag import RoleTag
from gad.models.user import Assignment, User
from gad.schemas.role_tag import RoleTagCreate, RoleTagUpdate
from gad.services.role_tag_service import DEFAULT_ROLE_TAGS, RoleTagService


class TestSeeding:

    def setup_method(self):
        self.service = RoleTagService()

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        first = await self.service.seed_default_role_tags(db_session)
        second = await self.service.seed_default_role_tags(db_session)

        assert first == len(DEFAULT_ROLE_TAGS) == 12
        assert second == 0

        active = await self.service.list_active(db_session)
        assert {t.code for t in active} == {code for code, _, _ in DEFAULT_ROLE_TAGS}

    @pytest.mark.asyncio
    async def test_seed_keeps_existing_rows(self, db_session):
        db_session.add(RoleTag(code="INSTRUCTOR", name="Professor", description="Local wording"))
        await db_session.flush()

        created = await self.service.seed_default_role_tags(db_session)

        assert created == len(DEFAULT_ROLE_TAGS) - 1
        kept = await self.service.get_by_code(db_session, "INSTRUCTOR")
        assert kept.name == "Professor"


class TestRoleTagRules:

    def setup_method(self):
        self.service = RoleTagService()

    @pytest.mark.asyncio
    async def test_duplicate_code_conflicts(self, db_session):
        await self.service.create(db_session, RoleTagCreate(code="TUTOR", name="Tutor"))

        with pytest.raises(ConflictError) as exc_info:
            await self.service.create(db_session, RoleTagCreate(code="TUTOR", name="Other"))

        assert exc_info.value.field == "code"

    @pytest.mark.asyncio
    async def test_rename_to_own_code_is_allowed(self, db_session):
        tag = await self.service.create(db_session, RoleTagCreate(code="TUTOR", name="Tutor"))

        updated = await self.service.update(
            db_session, tag.id, RoleTagUpdate(code="TUTOR", name="Peer Tutor")
        )

        assert updated.name == "Peer Tutor"

    @pytest.mark.asyncio
    async def test_delete_assigned_tag_refused(self, db_session, role_tag):
        user = User(name="Ana", email="ana@example.edu", cpf="11111111111", siape="1111111")
        user.assignments.append(
            Assignment(role_tag=role_tag, granted_at=utcnow(), active=False, revoked_at=utcnow())
        )
        db_session.add(user)
        await db_session.flush()

        with pytest.raises(BusinessRuleError, match="deactivate it instead"):
            await self.service.delete(db_session, role_tag.id)

    @pytest.mark.asyncio
    async def test_delete_unused_tag(self, db_session, role_tag):
        await self.service.delete(db_session, role_tag.id)

        with pytest.raises(NotFoundError):
            await self.service.get_by_id(db_session, role_tag.id)

    @pytest.mark.asyncio
    async def test_list_active_excludes_deactivated(self, db_session, role_tag):
        await self.service.create(db_session, RoleTagCreate(code="LIBRARIAN", name="Librarian"))
        await self.service.deactivate(db_session, role_tag.id)

        active = await self.service.list_active(db_session)

        assert [t.code for t in active] == ["LIBRARIAN"]

    @pytest.mark.asyncio
    async def test_deactivate_twice_refused(self, db_session, role_tag):
        await self.service.deactivate(db_session, role_tag.id)

        with pytest.raises(BusinessRuleError, match="already inactive"):
            await self.service.deactivate(db_session, role_tag.id)
