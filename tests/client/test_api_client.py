"""Тесты HTTP-клиента каталога."""

import json
from collections.abc import Callable
from datetime import UTC, datetime

import httpx
import pytest

from product_catalog.client.api import ProductAPI, ProductAPIError
from product_catalog.client.models import ProductFormData

BASE_URL = "http://catalog.test/api"

Handler = Callable[[httpx.Request], httpx.Response]


def make_api(handler: Handler) -> ProductAPI:
    client = httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(handler)
    )
    return ProductAPI(BASE_URL, client=client)


async def test_get_all_unwraps_envelope_and_coerces_price() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/products"
        return httpx.Response(
            200,
            json={
                "success": True,
                "count": 2,
                "data": [
                    {"id": 2, "name": "Lamp", "price": "30.50", "description": None},
                    {"id": 1, "name": "Desk", "price": 120, "description": "Oak"},
                ],
            },
        )

    async with make_api(handler) as api:
        products = await api.get_all()

    assert [p.id for p in products] == [2, 1]
    assert products[0].price == 30.5
    assert isinstance(products[0].price, float)
    assert isinstance(products[1].price, float)
    assert products[0].description == ""


async def test_get_all_accepts_bare_array() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"id": 1, "name": "Desk", "price": "99.99"}])

    async with make_api(handler) as api:
        products = await api.get_all()

    assert products[0].price == 99.99


async def test_search_sends_query_parameter() -> None:
    seen: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.params.get("q"))
        assert request.url.path == "/api/products/search"
        return httpx.Response(200, json={"success": True, "count": 0, "data": []})

    async with make_api(handler) as api:
        products = await api.search("iphone 15 & co")

    assert products == []
    assert seen == ["iphone 15 & co"]


async def test_create_returns_product_from_envelope() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        body = json.loads(request.content)
        assert body == {"name": "iPhone 15", "price": 999.99, "description": ""}
        return httpx.Response(
            201,
            json={
                "success": True,
                "message": "Product created successfully",
                "data": {
                    "id": 7,
                    **body,
                    "price": "999.99",
                    "created_at": "2024-05-01T10:00:00Z",
                    "updated_at": "2024-05-02T12:30:00Z",
                },
            },
        )

    async with make_api(handler) as api:
        product = await api.create(ProductFormData(name="iPhone 15", price=999.99))

    assert product.id == 7
    assert product.price == 999.99
    assert product.created_at == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
    assert product.updated_at == datetime(2024, 5, 2, 12, 30, tzinfo=UTC)


async def test_update_uses_put() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PUT"
        assert request.url.path == "/api/products/7"
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {"id": 7, "name": "iPhone", "price": 899.99},
            },
        )

    async with make_api(handler) as api:
        product = await api.update(7, ProductFormData(name="iPhone", price=899.99))

    assert product.price == 899.99


async def test_delete_returns_true() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        return httpx.Response(200, json={"success": True, "message": "Deleted"})

    async with make_api(handler) as api:
        assert await api.delete(3) is True


async def test_error_message_from_response_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404, json={"success": False, "message": "Product not found"}
        )

    async with make_api(handler) as api:
        with pytest.raises(ProductAPIError) as exc_info:
            await api.delete(3)

    assert exc_info.value.message == "Product not found"
    assert exc_info.value.status_code == 404


async def test_generic_error_message_without_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad gateway")

    async with make_api(handler) as api:
        with pytest.raises(ProductAPIError) as exc_info:
            await api.update(1, ProductFormData(name="Desk", price=10))

    assert exc_info.value.message == "Failed to update product"
    assert exc_info.value.status_code == 502


async def test_network_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with make_api(handler) as api:
        with pytest.raises(ProductAPIError) as exc_info:
            await api.get_all()

    assert exc_info.value.message == "Failed to load products"
    assert exc_info.value.status_code is None
