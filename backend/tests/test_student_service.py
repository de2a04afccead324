"""
GAD Backend — Student Service Unit Tests
=========================================

What:  Tests for StudentService business rules.
How:   StudentRepository is patched with AsyncMocks; no database involved.

What we test:
    ✅ Create persists and returns the new student
    ✅ Duplicate email / CPF rejected with ConflictError before insert
    ✅ Update re-checks only changed unique fields, excluding the record itself
    ✅ Missing ids raise NotFoundError
    ✅ Activation no-ops raise BusinessRuleError
    ✅ SQLAlchemy errors are translated (IntegrityError → Conflict, others → Database)
"""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from gad.exceptions import BusinessRuleError, ConflictError, DatabaseError, NotFoundError
from gad.models.student import Student
from gad.schemas.common import PageParams
from gad.schemas.student import StudentCreate, StudentUpdate
from gad.services.student_service import StudentService

REPO_PATH = "gad.services.student_service.StudentRepository"


def make_student(**overrides) -> Student:
    data = dict(
        id=1,
        name="Ana Souza",
        email="ana@example.com",
        cpf="12345678909",
        birth_date=date(2004, 5, 17),
        enrollment_number="2024001",
        course="Computer Science",
        active=True,
        created_at=datetime.now(timezone.utc),
        updated_at=None,
    )
    data.update(overrides)
    return Student(**data)


async def fake_add(student: Student) -> Student:
    """Stand-in for the flush: assign id and defaults."""
    student.id = 42
    student.active = True
    student.created_at = datetime.now(timezone.utc)
    return student


class TestStudentServiceCreate:

    def setup_method(self):
        self.service = StudentService()
        self.payload = StudentCreate(
            name="Ana Souza",
            email="ana@example.com",
            cpf="12345678909",
            birth_date=date(2004, 5, 17),
            enrollment_number="2024001",
        )

    @pytest.mark.asyncio
    async def test_create_success(self, mock_db_session):
        with patch(REPO_PATH) as repo_cls:
            repo = repo_cls.return_value
            repo.exists_by = AsyncMock(return_value=False)
            repo.add = AsyncMock(side_effect=fake_add)

            result = await self.service.create(mock_db_session, self.payload)

        assert result.id == 42
        assert result.email == "ana@example.com"
        assert result.active is True
        repo.add.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_duplicate_email_rejected(self, mock_db_session):
        """Duplicate email should raise ConflictError and never insert."""
        async def exists(field, value, exclude_id=None):
            return field == "email"

        with patch(REPO_PATH) as repo_cls:
            repo = repo_cls.return_value
            repo.exists_by = AsyncMock(side_effect=exists)
            repo.add = AsyncMock(side_effect=fake_add)

            with pytest.raises(ConflictError) as exc_info:
                await self.service.create(mock_db_session, self.payload)

        assert exc_info.value.field == "email"
        assert "ana@example.com" in exc_info.value.message
        repo.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_without_enrollment_number_skips_its_check(self, mock_db_session):
        payload = self.payload.model_copy(update={"enrollment_number": None})
        with patch(REPO_PATH) as repo_cls:
            repo = repo_cls.return_value
            repo.exists_by = AsyncMock(return_value=False)
            repo.add = AsyncMock(side_effect=fake_add)

            await self.service.create(mock_db_session, payload)

        checked = [call.args[0] for call in repo.exists_by.await_args_list]
        assert checked == ["email", "cpf"]

    @pytest.mark.asyncio
    async def test_integrity_error_becomes_conflict(self, mock_db_session):
        """A unique index firing after the pre-check still answers 409."""
        with patch(REPO_PATH) as repo_cls:
            repo = repo_cls.return_value
            repo.exists_by = AsyncMock(return_value=False)
            repo.add = AsyncMock(
                side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
            )

            with pytest.raises(ConflictError):
                await self.service.create(mock_db_session, self.payload)


class TestStudentServiceUpdate:

    def setup_method(self):
        self.service = StudentService()

    @pytest.mark.asyncio
    async def test_unchanged_unique_fields_are_not_rechecked(self, mock_db_session):
        student = make_student()
        with patch(REPO_PATH) as repo_cls:
            repo = repo_cls.return_value
            repo.get = AsyncMock(return_value=student)
            repo.exists_by = AsyncMock(return_value=True)
            repo.save = AsyncMock(side_effect=lambda s: s)

            result = await self.service.update(
                mock_db_session, 1, StudentUpdate(email="ana@example.com", city="Dourados")
            )

        repo.exists_by.assert_not_awaited()
        assert result.city == "Dourados"

    @pytest.mark.asyncio
    async def test_changed_cpf_collision_raises_conflict(self, mock_db_session):
        student = make_student()
        with patch(REPO_PATH) as repo_cls:
            repo = repo_cls.return_value
            repo.get = AsyncMock(return_value=student)
            repo.exists_by = AsyncMock(return_value=True)
            repo.save = AsyncMock()

            with pytest.raises(ConflictError):
                await self.service.update(mock_db_session, 1, StudentUpdate(cpf="98765432100"))

        repo.exists_by.assert_awaited_once_with("cpf", "98765432100", exclude_id=1)
        repo.save.assert_not_awaited()
        assert student.cpf == "12345678909"

    @pytest.mark.asyncio
    async def test_null_fields_keep_stored_values(self, mock_db_session):
        student = make_student(course="Computer Science")
        with patch(REPO_PATH) as repo_cls:
            repo = repo_cls.return_value
            repo.get = AsyncMock(return_value=student)
            repo.exists_by = AsyncMock(return_value=False)
            repo.save = AsyncMock(side_effect=lambda s: s)

            result = await self.service.update(
                mock_db_session, 1, StudentUpdate(name="Ana S. Souza", course=None)
            )

        assert result.name == "Ana S. Souza"
        assert result.course == "Computer Science"

    @pytest.mark.asyncio
    async def test_update_missing_student(self, mock_db_session):
        with patch(REPO_PATH) as repo_cls:
            repo_cls.return_value.get = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError) as exc_info:
                await self.service.update(mock_db_session, 99, StudentUpdate(name="Nobody"))

        assert "99" in exc_info.value.message


class TestStudentServiceActivation:

    def setup_method(self):
        self.service = StudentService()

    @pytest.mark.asyncio
    async def test_activate_already_active(self, mock_db_session):
        with patch(REPO_PATH) as repo_cls:
            repo_cls.return_value.get = AsyncMock(return_value=make_student(active=True))

            with pytest.raises(BusinessRuleError, match="already active"):
                await self.service.activate(mock_db_session, 1)

    @pytest.mark.asyncio
    async def test_deactivate(self, mock_db_session):
        student = make_student(active=True)
        with patch(REPO_PATH) as repo_cls:
            repo = repo_cls.return_value
            repo.get = AsyncMock(return_value=student)
            repo.save = AsyncMock(side_effect=lambda s: s)

            result = await self.service.deactivate(mock_db_session, 1)

        assert result.active is False
        repo.save.assert_awaited_once_with(student)


class TestStudentServiceQueries:

    def setup_method(self):
        self.service = StudentService()

    @pytest.mark.asyncio
    async def test_get_by_cpf_not_found_mentions_lookup(self, mock_db_session):
        with patch(REPO_PATH) as repo_cls:
            repo_cls.return_value.find_one_by = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError) as exc_info:
                await self.service.get_by_cpf(mock_db_session, "00000000000")

        assert exc_info.value.message == "Student with CPF '00000000000' was not found"

    @pytest.mark.asyncio
    async def test_list_active_builds_page(self, mock_db_session):
        students = [make_student(id=i, email=f"s{i}@example.com", cpf=f"{i:011d}") for i in (1, 2)]
        with patch(REPO_PATH) as repo_cls:
            repo = repo_cls.return_value
            repo.search = AsyncMock(return_value=(students, 5))

            page = await self.service.list_active(mock_db_session, PageParams(page=0, size=2))

        repo.search.assert_awaited_once()
        assert repo.search.await_args.kwargs["active"] is True
        assert page.total_count == 5
        assert page.total_pages == 3
        assert page.has_more is True
        assert [s.id for s in page.items] == [1, 2]

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        with patch(REPO_PATH) as repo_cls:
            repo_cls.return_value.get = AsyncMock(
                side_effect=OperationalError("SELECT", {}, Exception("connection refused"))
            )

            with pytest.raises(DatabaseError) as exc_info:
                await self.service.get_by_id(mock_db_session, 1)

        assert "connection refused" not in exc_info.value.message
