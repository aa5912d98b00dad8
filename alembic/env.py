"""
Alembic Migration Environment
==============================

What:  Runs revisions against settings.database_url with an async engine.
Who:   `alembic upgrade head`, `alembic revision --autogenerate -m ...`

Only the students and courses tables are managed here; `registrar.models`
registers both on Base.metadata.
"""

import asyncio
from logging.config import fileConfig
from typing import Any, Dict

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from registrar.config import settings
from registrar.database import Base
import registrar.models  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def _migration_options() -> Dict[str, Any]:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        # SQLite rewrites tables instead of ALTERing constraints
        "render_as_batch": settings.is_sqlite,
    }


def _run_offline() -> None:
    """Print the SQL instead of executing it (`alembic upgrade head --sql`)."""
    context.configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_migration_options(),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **_migration_options())
    with context.begin_transaction():
        context.run_migrations()


async def _run_online() -> None:
    engine = create_async_engine(settings.database_url, poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _run_offline()
else:
    asyncio.run(_run_online())
