"""Telegram-клиент каталога (вебхук). Точка входа."""

import hmac
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.base import BaseStorage
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.fsm.storage.redis import RedisStorage
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from redis.asyncio import Redis

from product_catalog.client.api import ProductAPI
from product_catalog.core.config import settings
from product_catalog.handlers import commands, product_management
from product_catalog.middlewares.catalog import CatalogMiddleware, ViewModelRegistry

logger = logging.getLogger(__name__)


def build_dispatcher(
    storage: BaseStorage, api: ProductAPI, registry: ViewModelRegistry
) -> Dispatcher:
    """
    Собирает Dispatcher с middleware и роутерами.

    Роутер управления товарами подключается первым, чтобы /cancel
    срабатывал и в режиме поиска.
    """
    dp = Dispatcher(storage=storage)
    dp.update.middleware(CatalogMiddleware(api=api, registry=registry))
    dp.include_router(product_management.router)
    dp.include_router(commands.router)
    return dp


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Контекстный менеджер для управления жизненным циклом приложения.
    """
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    logger.info("Starting catalog bot")

    bot = Bot(token=settings.BOT_TOKEN)
    redis_client = (
        Redis(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
        if settings.REDIS_HOST
        else None
    )
    storage: BaseStorage = (
        RedisStorage(redis=redis_client) if redis_client else MemoryStorage()
    )
    api = ProductAPI(settings.API_BASE_URL, timeout=settings.HTTP_TIMEOUT_SECONDS)
    registry = ViewModelRegistry(
        api, debounce_seconds=settings.search_debounce_seconds
    )
    dp = build_dispatcher(storage, api, registry)

    # Сохраняем экземпляры в app.state для доступа в хендлерах
    app.state.bot = bot
    app.state.dp = dp
    logger.info(
        "Bot, Dispatcher and FSM storage initialized (API: %s)",
        settings.API_BASE_URL,
    )

    await bot.delete_webhook(drop_pending_updates=True)
    logger.info("Setting new webhook to: %s", settings.webhook_url)
    await bot.set_webhook(
        url=settings.webhook_url, secret_token=settings.WEBHOOK_SECRET
    )
    logger.info("Catalog bot is ready")

    yield

    logger.info("Shutting down catalog bot")
    registry.close()
    await bot.delete_webhook()
    await bot.session.close()
    await api.aclose()
    await storage.close()
    logger.info("Catalog bot stopped")


# --- Приложение FastAPI ---
app = FastAPI(lifespan=lifespan)


def check_webhook_request(token: str, secret_header: str | None) -> str | None:
    """
    Проверяет, что запрос пришел от Telegram для нашего бота.

    Args:
        token: Токен из пути вебхука.
        secret_header: Значение заголовка X-Telegram-Bot-Api-Secret-Token.

    Returns:
        Текст ошибки или None, если запрос можно обрабатывать.
    """
    if not hmac.compare_digest(token.encode(), settings.BOT_TOKEN.encode()):
        return "Invalid token"
    if not hmac.compare_digest(
        (secret_header or "").encode(), settings.WEBHOOK_SECRET.encode()
    ):
        return "Invalid secret token"
    return None


@app.post("/telegram/webhook/{token}")
async def webhook_handler(request: Request, token: str) -> Response:
    """Принимает обновление от Telegram и передает его в Dispatcher."""
    error = check_webhook_request(
        token, request.headers.get("X-Telegram-Bot-Api-Secret-Token")
    )
    if error is not None:
        logger.warning("Rejected webhook request: %s", error)
        return JSONResponse(content={"error": error}, status_code=403)

    dp: Dispatcher = request.app.state.dp
    bot: Bot = request.app.state.bot
    try:
        update = await request.json()
        await dp.feed_webhook_update(bot=bot, update=update)
    except Exception:
        logger.exception("Failed to process webhook update")
        return Response(status_code=500)

    return Response(status_code=200)


def run() -> None:
    uvicorn.run(
        "product_catalog.bot:app",
        host=settings.HOST,
        port=8000,
        reload=settings.is_development,
    )


# --- Точка входа для локального запуска ---
if __name__ == "__main__":
    run()
