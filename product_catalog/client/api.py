"""Асинхронный HTTP-клиент REST API каталога."""

import logging
from types import TracebackType
from typing import Any, Self

import httpx
from pydantic import ValidationError

from product_catalog.client.models import Product, ProductFormData

logger = logging.getLogger(__name__)


class ProductAPIError(Exception):
    """
    Ошибка обращения к API: статус не 2xx, сбой сети или неожиданный ответ.

    Атрибуты:
        message: Сообщение из ответа сервера или общий текст.
        status_code: HTTP-статус, если ответ был получен.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _extract_products(payload: Any) -> list[Any]:
    # Сервер может вернуть как голый массив, так и конверт {data: [...]}
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return []


class ProductAPI:
    """
    Обертка над REST API каталога.

    Все методы возвращают уже разобранные объекты Product с числовой ценой.
    Клиент можно использовать как асинхронный контекстный менеджер.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self, method: str, url: str, failure_message: str, **kwargs: Any
    ) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ProductAPIError(failure_message) from exc

        if not response.is_success:
            raise ProductAPIError(
                self._error_message(response, failure_message), response.status_code
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProductAPIError(failure_message, response.status_code) from exc

    @staticmethod
    def _error_message(response: httpx.Response, default: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return default

    @staticmethod
    def _parse_products(payload: Any, failure_message: str) -> list[Product]:
        try:
            return [Product.model_validate(item) for item in _extract_products(payload)]
        except ValidationError as exc:
            raise ProductAPIError(failure_message) from exc

    @staticmethod
    def _parse_product(payload: Any, failure_message: str) -> Product:
        data = payload.get("data") if isinstance(payload, dict) else None
        try:
            return Product.model_validate(data)
        except ValidationError as exc:
            raise ProductAPIError(failure_message) from exc

    async def get_all(self) -> list[Product]:
        message = "Failed to load products"
        payload = await self._request("GET", "/products", message)
        return self._parse_products(payload, message)

    async def search(self, query: str) -> list[Product]:
        message = "Search failed"
        payload = await self._request(
            "GET", "/products/search", message, params={"q": query}
        )
        return self._parse_products(payload, message)

    async def get(self, product_id: int) -> Product:
        message = "Failed to load product"
        payload = await self._request("GET", f"/products/{product_id}", message)
        return self._parse_product(payload, message)

    async def create(self, form: ProductFormData) -> Product:
        message = "Failed to create product"
        payload = await self._request(
            "POST", "/products", message, json=form.model_dump()
        )
        return self._parse_product(payload, message)

    async def update(self, product_id: int, form: ProductFormData) -> Product:
        message = "Failed to update product"
        payload = await self._request(
            "PUT", f"/products/{product_id}", message, json=form.model_dump()
        )
        return self._parse_product(payload, message)

    async def delete(self, product_id: int) -> bool:
        await self._request(
            "DELETE", f"/products/{product_id}", "Failed to delete product"
        )
        return True
