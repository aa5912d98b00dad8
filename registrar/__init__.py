"""
Registrar Backend: Application Package Initializer
===================================================

What: Marks the `registrar` directory as a Python package.
Who:  Imported by uvicorn (`registrar.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered the same way for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← CRUD + enrollment consistency
    ├─────────────────────────────────────┤
    │     Schemas & Models (Data shape)   │  ← Pydantic contracts, ORM tables
    ├─────────────────────────────────────┤
    │       Document Store (Persistence)  │  ← in-memory or async SQLAlchemy
    └─────────────────────────────────────┘

    Services never talk to SQLAlchemy directly. They receive a DocumentStore
    per call, which is what lets the same enrollment logic run against an
    in-memory store in tests and PostgreSQL in production.
"""

__version__ = "1.0.0"
