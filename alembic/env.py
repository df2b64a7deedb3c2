import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config
from sqlmodel import SQLModel

from alembic import context  # type: ignore[attr-defined]
from product_catalog.core.config import settings
from product_catalog.db import models  # noqa: F401

# это объект конфигурации Alembic, который предоставляет
# доступ к значениям из используемого .ini файла.
config = context.config

# Интерпретируем файл конфигурации для логгирования Python.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Указываем Alembic на метаданные наших SQLModel моделей
# для поддержки автогенерации миграций.
target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Запуск миграций в 'оффлайн' режиме.

    Этот режим конфигурирует контекст только с URL, без Engine,
    поэтому DBAPI даже не нужен. Вызовы context.execute() выводят
    SQL в выходной файл скрипта.
    """
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """
    Запуск миграций в 'онлайн' режиме.

    Строка подключения берется из наших настроек (.env), а не из alembic.ini.
    Драйвер асинхронный, поэтому миграции выполняются через run_sync.
    """
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = settings.database_url

    connectable = async_engine_from_config(
        configuration,
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
