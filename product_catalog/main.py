"""REST API каталога товаров. Точка входа."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from product_catalog.api import products
from product_catalog.api.errors import register_exception_handlers
from product_catalog.api.rate_limit import (
    CounterStore,
    MemoryCounterStore,
    RateLimitMiddleware,
    RedisCounterStore,
)
from product_catalog.core.config import Settings, settings
from product_catalog.db.session import (
    build_engine,
    build_session_factory,
    create_tables,
)

API_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_index_router() -> APIRouter:
    router = APIRouter()

    @router.get("")
    async def api_index() -> dict[str, object]:
        """Краткое описание API."""
        return {
            "message": "Product catalog API",
            "version": API_VERSION,
            "endpoints": {
                "products": "/api/products",
                "search": "/api/products/search?q=keyword",
            },
        }

    return router


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Собирает приложение FastAPI.

    Args:
        app_settings: Настройки; по умолчанию берутся из .env.

    Returns:
        Готовое приложение.
    """
    config = app_settings or settings
    redis_client = (
        Redis(host=config.REDIS_HOST, port=config.REDIS_PORT)
        if config.REDIS_HOST
        else None
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Контекстный менеджер для управления жизненным циклом приложения.
        """
        configure_logging(config.LOG_LEVEL)
        logger.info("Starting product catalog API (mode: %s)", config.APP_ENV)

        engine = build_engine(config.database_url)
        await create_tables(engine)
        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        logger.info("Database connected and tables synchronized")

        yield

        logger.info("Shutting down product catalog API")
        await engine.dispose()
        if redis_client is not None:
            await redis_client.aclose()

    app = FastAPI(
        title="Product Catalog API", version=API_VERSION, lifespan=lifespan
    )

    store: CounterStore = (
        RedisCounterStore(redis_client) if redis_client else MemoryCounterStore()
    )
    app.add_middleware(
        RateLimitMiddleware,
        store=store,
        max_requests=config.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.FRONTEND_URL],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, expose_errors=config.is_development)
    app.include_router(build_index_router(), prefix="/api")
    app.include_router(products.router, prefix="/api")
    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "product_catalog.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
    )


# --- Точка входа для локального запуска ---
if __name__ == "__main__":
    run()
