"""Middleware, передающий хендлерам клиент API и модель представления чата."""

import time
from collections.abc import Awaitable, Callable
from typing import Any

from aiogram import BaseMiddleware, Bot
from aiogram.types import Chat, TelegramObject

from product_catalog.client.api import ProductAPI
from product_catalog.client.models import Product
from product_catalog.client.view_model import (
    DEFAULT_DEBOUNCE_SECONDS,
    ProductListViewModel,
)
from product_catalog.handlers.formatting import format_product_list

DEFAULT_IDLE_SECONDS = 3600.0


class ChatListener:
    """Показывает изменения модели представления сообщениями в чат."""

    def __init__(
        self,
        bot: Bot,
        chat_id: int,
        view_model: ProductListViewModel | None = None,
    ) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.view_model = view_model

    async def products_changed(self, products: list[Product]) -> None:
        query = self.view_model.query if self.view_model else ""
        await self.bot.send_message(
            chat_id=self.chat_id, text=format_product_list(products, query.strip())
        )

    async def show_error(self, message: str) -> None:
        await self.bot.send_message(chat_id=self.chat_id, text=f"Error: {message}")

    async def show_success(self, message: str) -> None:
        await self.bot.send_message(chat_id=self.chat_id, text=message)


class ViewModelRegistry:
    """
    Хранит по одной модели представления на чат.

    Модели чатов, к которым не обращались дольше idle_seconds, удаляются
    при следующем вызове get (если у них нет отложенного поиска).
    """

    def __init__(
        self,
        api: ProductAPI,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        idle_seconds: float = DEFAULT_IDLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.api = api
        self.debounce_seconds = debounce_seconds
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._view_models: dict[int, ProductListViewModel] = {}
        self._last_used: dict[int, float] = {}

    def __len__(self) -> int:
        return len(self._view_models)

    def get(self, chat_id: int, bot: Bot) -> ProductListViewModel:
        now = self._clock()
        self._prune(now)
        view_model = self._view_models.get(chat_id)
        if view_model is None:
            view_model = ProductListViewModel(
                self.api, debounce_seconds=self.debounce_seconds
            )
            view_model.listener = ChatListener(bot, chat_id, view_model)
            self._view_models[chat_id] = view_model
        self._last_used[chat_id] = now
        return view_model

    def close(self) -> None:
        for view_model in self._view_models.values():
            view_model.close()
        self._view_models.clear()
        self._last_used.clear()

    def _prune(self, now: float) -> None:
        idle = [
            chat_id
            for chat_id, used_at in self._last_used.items()
            if now - used_at >= self.idle_seconds
            and not self._view_models[chat_id].busy
        ]
        for chat_id in idle:
            self._view_models.pop(chat_id).close()
            del self._last_used[chat_id]


class CatalogMiddleware(BaseMiddleware):
    """
    Добавляет в данные хендлера `api` и `view_model` текущего чата.
    """

    def __init__(self, api: ProductAPI, registry: ViewModelRegistry) -> None:
        self.api = api
        self.registry = registry

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        data["api"] = self.api
        chat: Chat | None = data.get("event_chat")
        if chat is not None:
            data["view_model"] = self.registry.get(chat.id, data["bot"])
        return await handler(event, data)
