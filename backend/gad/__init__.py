"""
GAD Backend — Application Package Initializer
==============================================

What: Marks the `gad` directory as a Python package.
Why:  Enables module imports like `from gad.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Rules)   │  ← Uniqueness, activation, role assignment
    ├─────────────────────────────────────┤
    │     Repositories (Query Building)   │  ← Filters, pagination, lookups
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic DTOs
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the session directly; services never build SQL.
"""

__version__ = "1.0.0"
