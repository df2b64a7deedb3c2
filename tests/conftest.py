"""Конфигурация и фикстуры для тестов Pytest."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from product_catalog.core.config import Settings
from product_catalog.db.session import build_session_factory, get_db_session
from product_catalog.main import create_app

# Используем асинхронный драйвер для SQLite для тестов
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Фикстура для создания асинхронного движка БД для тестов.
    Каждый тест получает свою чистую базу в памяти.
    """
    async_engine = create_async_engine(
        TEST_DATABASE_URL, echo=False, poolclass=StaticPool
    )
    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_engine

    await async_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Фикстура, создающая фабрику сессий для тестов.
    """
    return build_session_factory(engine)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Фикстура, предоставляющая изолированную сессию БД для каждого теста.
    """
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        APP_ENV="development",
        DATABASE_URL=TEST_DATABASE_URL,
        REDIS_HOST=None,
        RATE_LIMIT_MAX_REQUESTS=1000,
    )


@pytest.fixture
def app(
    test_settings: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> FastAPI:
    """
    Приложение, в котором сессия БД подменена на тестовую.
    """
    application = create_app(test_settings)

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as db_session:
            yield db_session

    application.dependency_overrides[get_db_session] = override_db_session
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP-клиент к приложению без запуска сервера."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
