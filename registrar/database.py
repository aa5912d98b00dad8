"""
Registrar Backend: Database Engine and Session Factory
=======================================================

What:  Async SQLAlchemy engine, session factory, declarative Base and
       lifecycle helpers.
How:   The engine is created at import time from settings.database_url.
       SqlDocumentStore opens one short-lived session per collection call
       through `async_session_factory`.
Who:   Used by the SQL document store, the ORM models, Alembic and main.py.

Why there is no session-per-request dependency:
    Enrollment writes must become durable one at a time (student side first,
    then course side). A request-wide transaction would commit or roll back
    both sides together, hiding the ordering the consistency logic relies on
    and behaving differently from the in-memory store.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20, max_overflow=10: at most 30 connections
    pool_pre_ping: validates connections before use
    pool_recycle=3600: recycles connections every hour
    SQLite URLs skip the sizing arguments and get configure_sqlite_engine()
    (write lock taken at BEGIN, Unicode-aware lower()) and a longer busy
    timeout so concurrent writers queue instead of failing.
"""

import json
from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from registrar.config import settings


def _json_serializer(value: Any) -> str:
    # Keep non-ASCII topic and name text searchable with LIKE
    return json.dumps(value, ensure_ascii=False)


def _engine_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
        "json_serializer": _json_serializer,
    }
    if settings.is_sqlite:
        # Seconds a writer waits for the lock held by another BEGIN IMMEDIATE
        options["connect_args"] = {"timeout": 30}
    else:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


def _unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def configure_sqlite_engine(async_engine: AsyncEngine) -> AsyncEngine:
    """
    Make SQLite transactions usable for the document store.

    What:  Every transaction starts with BEGIN IMMEDIATE, and lower() is
           replaced by a Unicode-aware Python function.
    Why:   pysqlite only emits BEGIN before the first write, so two sessions
           can both read a JSON list before either writes it back, and
           SELECT ... FOR UPDATE is not rendered on SQLite at all. BEGIN
           IMMEDIATE takes the write lock up front, which makes each store
           call's read-modify-write atomic. SQLite's built-in lower() folds
           ASCII only, which would make name and topic search differ from
           the in-memory store.
    How:   The pysqlite "serializable isolation" recipe from the SQLAlchemy
           docs, applied to the sync engine behind the async one.
    """
    sync_engine = async_engine.sync_engine

    @event.listens_for(sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Stop the driver from issuing its own deferred BEGIN
        dbapi_connection.isolation_level = None
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    @event.listens_for(sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return async_engine


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())
if settings.is_sqlite:
    configure_sqlite_engine(engine)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: documents are built from ORM rows after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for autogenerate.
    """
    pass


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_schema() -> None:
    """
    Create missing tables directly from the ORM metadata.

    When:  Startup, only if settings.auto_create_schema is set (local SQLite).
    Production schemas are managed by Alembic instead.
    """
    # Import models so they register with Base.metadata
    from registrar.models import course, student  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """
    Gracefully close all connections in the pool.

    When: Application shutdown (lifespan handler).
    """
    await engine.dispose()
