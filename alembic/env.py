# alembic/env.py
import asyncio
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context

# Корінь проекту, щоб імпортувати models та config_reader
sys.path.append(str(Path(__file__).parent.parent))

import models  # noqa: F401  (реєструє всі таблиці в Base.metadata)
from models.base import Base
from config_reader import config

config_obj = context.config # Не плутати з config з config_reader

if config_obj.config_file_name is not None:
    fileConfig(config_obj.config_file_name)

target_metadata = Base.metadata

if not config.database_url:
    raise ValueError("DATABASE_URL не налаштовано у .env файлі. Alembic не може продовжити.")

config_obj.set_main_option('sqlalchemy.url', str(config.database_url))


def run_migrations_offline() -> None:
    """Генерує SQL без підключення до БД."""
    context.configure(
        url=config_obj.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    # batch-режим потрібен для ALTER у SQLite
    context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Міграції через async engine з models/base.py."""
    from models.base import engine

    if engine is None:
        raise RuntimeError("Engine in models/base.py is None. Check DATABASE_URL.")

    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
