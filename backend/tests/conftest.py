"""
GAD Backend — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh per test):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── db_engine:       In-memory SQLite engine with every table created
    ├── db_session:      Real AsyncSession on db_engine (repository/service tests)
    ├── client:          HTTPX AsyncClient on the app, sessions bound to db_engine
    └── student_payload / user_payload / role_tag: sample data

The in-memory database uses StaticPool so every session of a test shares
the one connection (and therefore the one database).
"""

import os

# Override settings for testing BEFORE any gad imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SEED_ROLE_TAGS"] = "false"

from typing import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import gad.models  # noqa: E402,F401
from gad.database import Base, get_db_session  # noqa: E402
from gad.main import app  # noqa: E402
from gad.models.role_tag import RoleTag  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Mocks
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Service unit tests patch the repository classes, so the session is only
    passed through; it must still look like an AsyncSession.
    """
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Real database (in-memory SQLite)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    get_db_session is overridden with the same commit/rollback behaviour,
    bound to the test engine. The lifespan does not run, so nothing is seeded.
    """
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Sample data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def student_payload():
    return {
        "name": "Ana Souza",
        "email": "ana.souza@example.com",
        "cpf": "123.456.789-09",
        "phone": "67999990000",
        "birth_date": "2004-05-17",
        "city": "Campo Grande",
        "state": "MS",
        "enrollment_number": "2024001",
        "course": "Computer Science",
    }


@pytest.fixture
def user_payload():
    return {
        "name": "Carlos Lima",
        "email": "carlos.lima@example.edu",
        "cpf": "98765432100",
        "siape": "1234567",
        "education": "PhD",
        "department": "Informatics",
    }


@pytest_asyncio.fixture
async def role_tag(db_session) -> RoleTag:
    """A persisted, active INSTRUCTOR tag."""
    tag = RoleTag(code="INSTRUCTOR", name="Instructor", description="Teaches classes")
    db_session.add(tag)
    await db_session.commit()
    return tag
