"""
GAD Backend — User Service Unit Tests
======================================

What:  Tests for UserService role assignment rules and lookups.
How:   UserRepository and RoleTagRepository are patched; User, Assignment
       and RoleTag are real (transient) model instances so the assignment
       logic runs on actual collections.

What we test:
    ✅ assign_roles: skip in force, reinstate revoked, create new with notes
    ✅ assign_roles: unknown tag → NotFoundError, inactive tag → BusinessRuleError
    ✅ revoke_roles: revokes in force, ignores ids the user does not hold
    ✅ update with role_tag_ids replaces the in-force set
    ✅ create grants initial roles
    ✅ updated_at moves whenever the in-force role set changes
    ✅ create without roles against a real session
"""

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from gad.exceptions import BusinessRuleError, ConflictError, NotFoundError
from gad.models.role_tag import RoleTag
from gad.models.user import Assignment, User
from gad.schemas.user import AssignRolesRequest, RevokeRolesRequest, UserCreate, UserUpdate
from gad.services.user_service import UserService

USER_REPO = "gad.services.user_service.UserRepository"
TAG_REPO = "gad.services.user_service.RoleTagRepository"

NOW = datetime.now(timezone.utc)


def make_tag(tag_id: int, code: str, active: bool = True) -> RoleTag:
    return RoleTag(id=tag_id, code=code, name=code.title(), active=active, created_at=NOW)


def make_user() -> User:
    return User(
        id=1,
        name="Carlos Lima",
        email="carlos@example.edu",
        cpf="98765432100",
        siape="1234567",
        active=True,
        created_at=NOW,
    )


def hold(user: User, tag: RoleTag, revoked: bool = False) -> Assignment:
    assignment = Assignment(
        role_tag_id=tag.id,
        role_tag=tag,
        granted_at=NOW - timedelta(days=30),
        active=not revoked,
        revoked_at=NOW - timedelta(days=1) if revoked else None,
    )
    user.assignments.append(assignment)
    return assignment


@pytest.fixture
def tags():
    return {
        10: make_tag(10, "INSTRUCTOR"),
        11: make_tag(11, "COORDINATOR"),
        12: make_tag(12, "LIBRARIAN"),
        13: make_tag(13, "DIRECTOR", active=False),
    }


@contextmanager
def patched_repos(user, tags):
    """Patch both repositories; yields the UserRepository instance mock."""
    with patch(USER_REPO) as user_cls, patch(TAG_REPO) as tag_cls:
        user_repo = user_cls.return_value
        user_repo.get = AsyncMock(return_value=user)
        user_repo.save = AsyncMock(side_effect=lambda u: u)
        user_repo.exists_by = AsyncMock(return_value=False)

        async def find_by_ids(ids):
            return [tags[i] for i in ids if i in tags]

        tag_cls.return_value.find_by_ids = AsyncMock(side_effect=find_by_ids)
        yield user_repo


class TestAssignRoles:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_skip_reinstate_and_create(self, mock_db_session, tags):
        user = make_user()
        in_force = hold(user, tags[10])
        revoked = hold(user, tags[11], revoked=True)

        with patched_repos(user, tags) as user_repo:
            result = await self.service.assign_roles(
                mock_db_session,
                1,
                AssignRolesRequest(role_tag_ids=[10, 11, 12], notes="Semester 2024.1"),
            )

        # Already in force: untouched, note not overwritten
        assert in_force.in_force and in_force.notes is None
        # Previously revoked: same row reinstated
        assert revoked.in_force and revoked.revoked_at is None
        assert revoked.notes == "Semester 2024.1"
        # New: a third row carrying the note
        new = user.find_assignment(12)
        assert new is not None and new.in_force and new.notes == "Semester 2024.1"
        assert len(user.assignments) == 3

        user_repo.save.assert_awaited_once_with(user)
        assert sorted(t.code for t in result.role_tags) == ["COORDINATOR", "INSTRUCTOR", "LIBRARIAN"]
        assert user.updated_at is not None

    @pytest.mark.asyncio
    async def test_unknown_tag_raises_not_found(self, mock_db_session, tags):
        user = make_user()
        with patched_repos(user, tags) as user_repo:
            with pytest.raises(NotFoundError, match="999"):
                await self.service.assign_roles(
                    mock_db_session, 1, AssignRolesRequest(role_tag_ids=[10, 999])
                )

        assert user.assignments == []
        user_repo.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_inactive_tag_rejected(self, mock_db_session, tags):
        with patched_repos(make_user(), tags):
            with pytest.raises(BusinessRuleError, match="DIRECTOR"):
                await self.service.assign_roles(
                    mock_db_session, 1, AssignRolesRequest(role_tag_ids=[13])
                )

    @pytest.mark.asyncio
    async def test_repeated_ids_grant_once(self, mock_db_session, tags):
        user = make_user()
        with patched_repos(user, tags):
            await self.service.assign_roles(
                mock_db_session, 1, AssignRolesRequest(role_tag_ids=[10, 10, 10])
            )

        assert len(user.assignments) == 1

    @pytest.mark.asyncio
    async def test_assigning_held_roles_leaves_timestamp(self, mock_db_session, tags):
        user = make_user()
        hold(user, tags[10])

        with patched_repos(user, tags):
            await self.service.assign_roles(
                mock_db_session, 1, AssignRolesRequest(role_tag_ids=[10])
            )

        assert user.updated_at is None


class TestRevokeRoles:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_revokes_in_force_and_ignores_unknown(self, mock_db_session, tags):
        user = make_user()
        instructor = hold(user, tags[10])
        coordinator = hold(user, tags[11])

        with patched_repos(user, tags):
            result = await self.service.revoke_roles(
                mock_db_session, 1, RevokeRolesRequest(role_tag_ids=[10, 12, 500])
            )

        assert instructor.active is False
        assert instructor.revoked_at is not None
        assert coordinator.in_force
        assert [t.code for t in result.role_tags] == ["COORDINATOR"]
        # History is kept
        assert len(user.assignments) == 2
        assert user.updated_at is not None

    @pytest.mark.asyncio
    async def test_revoke_for_missing_user(self, mock_db_session, tags):
        with patched_repos(None, tags):
            with pytest.raises(NotFoundError):
                await self.service.revoke_roles(
                    mock_db_session, 7, RevokeRolesRequest(role_tag_ids=[10])
                )


class TestUpdateRoles:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_role_set_is_replaced(self, mock_db_session, tags):
        user = make_user()
        instructor = hold(user, tags[10])
        coordinator = hold(user, tags[11])

        with patched_repos(user, tags):
            result = await self.service.update(
                mock_db_session, 1, UserUpdate(department="Mathematics", role_tag_ids=[11, 12])
            )

        assert not instructor.in_force
        assert coordinator.in_force
        assert user.find_assignment(12).in_force
        assert result.department == "Mathematics"
        assert sorted(t.code for t in result.role_tags) == ["COORDINATOR", "LIBRARIAN"]
        assert user.updated_at is not None

    @pytest.mark.asyncio
    async def test_omitted_role_ids_leave_roles_alone(self, mock_db_session, tags):
        user = make_user()
        instructor = hold(user, tags[10])

        with patched_repos(user, tags):
            await self.service.update(mock_db_session, 1, UserUpdate(phone="6733330000"))

        assert instructor.in_force
        assert user.phone == "6733330000"
        # A users column changed, so onupdate stamps it on flush
        assert user.updated_at is None

    @pytest.mark.asyncio
    async def test_empty_role_ids_revoke_everything(self, mock_db_session, tags):
        user = make_user()
        instructor = hold(user, tags[10])

        with patched_repos(user, tags):
            result = await self.service.update(mock_db_session, 1, UserUpdate(role_tag_ids=[]))

        assert not instructor.in_force
        assert result.role_tags == []
        assert result.updated_at is not None

    @pytest.mark.asyncio
    async def test_held_inactive_tag_may_stay(self, mock_db_session, tags):
        """A tag deactivated after it was granted does not block the update."""
        user = make_user()
        director = hold(user, tags[13])

        with patched_repos(user, tags):
            await self.service.update(mock_db_session, 1, UserUpdate(role_tag_ids=[13, 10]))

        assert director.in_force
        assert user.find_assignment(10).in_force


class TestCreateUser:

    def setup_method(self):
        self.service = UserService()
        self.payload = UserCreate(
            name="Carlos Lima",
            email="carlos@example.edu",
            cpf="98765432100",
            siape="1234567",
            role_tag_ids=[10, 11],
        )

    @pytest.mark.asyncio
    async def test_create_with_initial_roles(self, mock_db_session, tags):
        async def fake_add(user):
            user.id = 5
            user.active = True
            user.created_at = NOW
            return user

        with patched_repos(None, tags) as user_repo:
            user_repo.add = AsyncMock(side_effect=fake_add)
            result = await self.service.create(mock_db_session, self.payload)

        assert result.id == 5
        assert [t.code for t in result.role_tags] == ["INSTRUCTOR", "COORDINATOR"]
        assert all(t.assignment_active for t in result.role_tags)

    @pytest.mark.asyncio
    async def test_duplicate_siape_rejected(self, mock_db_session, tags):
        async def exists(field, value, exclude_id=None):
            return field == "siape"

        with patched_repos(None, tags) as user_repo:
            user_repo.exists_by = AsyncMock(side_effect=exists)
            user_repo.add = AsyncMock()
            with pytest.raises(ConflictError) as exc_info:
                await self.service.create(mock_db_session, self.payload)

        assert exc_info.value.field == "siape"
        user_repo.add.assert_not_awaited()


class TestCreateUserPersisted:
    """UserService.create against the in-memory database."""

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_create_without_roles(self, db_session):
        payload = UserCreate(
            name="Carlos Lima",
            email="carlos@example.edu",
            cpf="98765432100",
            siape="1234567",
        )

        result = await self.service.create(db_session, payload)

        assert result.id is not None
        assert result.role_tags == []

    @pytest.mark.asyncio
    async def test_create_with_empty_role_list(self, db_session):
        payload = UserCreate(
            name="Carlos Lima",
            email="carlos@example.edu",
            cpf="98765432100",
            siape="1234567",
            role_tag_ids=[],
        )

        result = await self.service.create(db_session, payload)

        assert result.role_tags == []
        fetched = await self.service.get_by_id(db_session, result.id)
        assert fetched.siape == "1234567"
