"""
Alembic env.py: Migration runner for the treasury gateway.

Path handling:
  - When run from project root: adds src/backend to sys.path
  - When PYTHONPATH already includes src/backend: no-op
"""

import asyncio
import os
import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

# 1. Path Management
_backend_dir = str(Path(__file__).resolve().parents[1] / "src" / "backend")
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

# 2. Config Setup
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# 3. Model Discovery
# Import from models.py, NOT database.py: no engine is created just to read metadata.
from models import Base

target_metadata = Base.metadata

# 4. Database URL: DATABASE_URL wins over alembic.ini's sqlalchemy.url
_db_url = os.environ.get("DATABASE_URL")
if _db_url:
    config.set_main_option("sqlalchemy.url", _db_url)


def run_migrations_offline() -> None:
    """Emit SQL only."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
