"""Модель представления списка товаров: загрузка, поиск с задержкой, правки."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from product_catalog.client.api import ProductAPI, ProductAPIError
from product_catalog.client.models import Product, ProductFormData

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


class ProductListListener(Protocol):
    """Получатель уведомлений об изменениях списка (экран, чат и т.п.)."""

    async def products_changed(self, products: list[Product]) -> None: ...

    async def show_error(self, message: str) -> None: ...

    async def show_success(self, message: str) -> None: ...


class NullListener:
    async def products_changed(self, products: list[Product]) -> None:
        return None

    async def show_error(self, message: str) -> None:
        return None

    async def show_success(self, message: str) -> None:
        return None


class ProductListViewModel:
    """
    Состояние экрана списка товаров.

    Поиск запускается только после паузы во вводе (debounce): каждое новое
    изменение строки отменяет ранее запланированный таймер. Уже
    отправленные запросы не отменяются, но ответ применяется, только если
    после него не был запущен более новый запрос списка.

    После успешного изменения или удаления локальный список правится
    сразу, без повторной загрузки с сервера. При ошибке состояние
    не меняется, а слушатель получает сообщение об ошибке.

    Атрибуты:
        products: Текущий список товаров.
        query: Текущая строка поиска.
        loading: Идет загрузка списка или поиск.
        refreshing: Идет обновление списка по запросу пользователя.
        loaded: Список хотя бы раз был загружен с сервера.
    """

    def __init__(
        self,
        api: ProductAPI,
        listener: ProductListListener | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self.api = api
        self.listener: ProductListListener = listener or NullListener()
        self.debounce_seconds = debounce_seconds

        self.products: list[Product] = []
        self.query = ""
        self.loading = False
        self.refreshing = False
        self.loaded = False

        self._debounce_timer: asyncio.TimerHandle | None = None
        self._request_seq = 0
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def search_pending(self) -> bool:
        """Запланирован ли поиск (таймер взведен, но еще не сработал)."""
        return self._debounce_timer is not None

    @property
    def busy(self) -> bool:
        """Ждет ли модель таймера или ответа на запущенный им запрос."""
        return self.search_pending or bool(self._tasks)

    async def mount(self) -> None:
        """Первичная загрузка полного списка."""
        await self.load_products()

    async def load_products(self) -> None:
        await self._replace_products(self.api.get_all)

    async def search(self, text: str) -> None:
        """Поиск на сервере; для пустой строки загружается полный список."""
        if not text.strip():
            await self.load_products()
            return
        await self._replace_products(lambda: self.api.search(text))

    def on_query_change(self, text: str) -> None:
        """
        Обрабатывает изменение строки поиска.

        Отменяет ранее взведенный таймер и взводит новый; поиск с последним
        текстом выполнится через debounce_seconds после последнего вызова.
        """
        self.query = text
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._debounce_timer = loop.call_later(
            self.debounce_seconds, self._fire_search, text
        )

    async def refresh(self) -> None:
        """Сбрасывает поиск и перезагружает полный список."""
        self._cancel_timer()
        self.query = ""
        self.refreshing = True
        try:
            await self.load_products()
        finally:
            self.refreshing = False

    async def create_product(self, form: ProductFormData) -> Product | None:
        """
        Создает товар. Локальный список не меняется.

        Returns:
            Созданный товар или None при ошибке.
        """
        try:
            product = await self.api.create(form)
        except ProductAPIError as exc:
            await self.listener.show_error(exc.message)
            return None
        await self.listener.show_success("Product added successfully")
        return product

    async def update_product(self, product_id: int, form: ProductFormData) -> bool:
        """
        Сохраняет изменения товара и сразу применяет их к локальному списку.

        Returns:
            True, если сервер принял изменения.
        """
        try:
            await self.api.update(product_id, form)
        except ProductAPIError as exc:
            await self.listener.show_error(exc.message)
            return False

        self.products = [
            product.model_copy(update=form.model_dump())
            if product.id == product_id
            else product
            for product in self.products
        ]
        if self.loaded:
            await self.listener.products_changed(self.products)
        await self.listener.show_success("Product updated successfully")
        return True

    async def delete_product(self, product_id: int) -> bool:
        """
        Удаляет товар и сразу убирает его из локального списка.

        Returns:
            True, если сервер удалил товар.
        """
        try:
            await self.api.delete(product_id)
        except ProductAPIError as exc:
            await self.listener.show_error(exc.message)
            return False

        self.products = [p for p in self.products if p.id != product_id]
        if self.loaded:
            await self.listener.products_changed(self.products)
        await self.listener.show_success("Product deleted")
        return True

    async def wait_idle(self) -> None:
        """Дожидается завершения запущенных таймером запросов."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def close(self) -> None:
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._debounce_timer is not None:
            self._debounce_timer.cancel()
            self._debounce_timer = None

    def _fire_search(self, text: str) -> None:
        self._debounce_timer = None
        task = asyncio.create_task(self.search(text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _replace_products(
        self, fetch: Callable[[], Awaitable[list[Product]]]
    ) -> None:
        self._request_seq += 1
        seq = self._request_seq
        self.loading = True
        try:
            products = await fetch()
        except ProductAPIError as exc:
            logger.warning("Failed to load products: %s", exc.message)
            # Об ошибке устаревшего запроса не сообщаем: его результат уже заменен
            if seq == self._request_seq:
                self.loading = False
                await self.listener.show_error(exc.message)
            return

        if seq != self._request_seq:
            # Пока шел запрос, был запущен более новый: этот ответ устарел
            logger.debug("Discarding stale product list response #%s", seq)
            return
        self.loading = False
        self.loaded = True
        self.products = products
        await self.listener.products_changed(self.products)
