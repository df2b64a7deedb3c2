"""Настройка сессии базы данных."""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Создает асинхронный "движок" SQLAlchemy.

    Движок создается при старте приложения и закрывается при остановке,
    глобального подключения на уровне модуля нет.

    Args:
        database_url: Строка подключения.
        echo: Логировать ли все SQL-запросы.

    Returns:
        Асинхронный движок.
    """
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,  # Проверяет "живо" ли соединение перед использованием
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Создает фабрику асинхронных сессий для переданного движка.

    Args:
        engine: Асинхронный движок.

    Returns:
        Фабрика сессий.
    """
    return async_sessionmaker(
        engine,
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Создает таблицы, которых еще нет в базе."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Зависимость (dependency) для получения сессии базы данных.

    Фабрика сессий берется из app.state, куда ее кладет lifespan.

    Yields:
        Объект асинхронной сессии SQLAlchemy.
    """
    session_factory: async_sessionmaker[AsyncSession] = (
        request.app.state.session_factory
    )
    async with session_factory() as session:
        yield session
