"""
Postboard Backend — Application Package Initializer
===================================================

What: Marks the `postboard` directory as a Python package.
Who:  Imported by uvicorn, Alembic and pytest.

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← uploads, ownership, pagination
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate requests into service calls and never touch the
    database directly; services raise application exceptions that the
    handlers in `postboard.main` turn into HTTP responses.
"""

__version__ = "1.0.0"
