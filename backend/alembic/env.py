"""
Alembic Migration Environment
==============================

What:  Migrates the image record store.
How:   The URL always comes from image_uploader settings (DATABASE_URL or
       the legacy URL variable); alembic.ini carries none. Online runs use
       a throwaway unpooled async engine and hand its connection to the
       synchronous migration context through run_sync().
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from image_uploader.config import settings
from image_uploader.database import Base

# Registers the images table on Base.metadata for --autogenerate
from image_uploader.models.image import ImageRecord  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

CONFIGURE_OPTIONS = {"target_metadata": Base.metadata, "compare_server_default": True}


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **CONFIGURE_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    context.configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **CONFIGURE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    asyncio.run(_migrate_online())
