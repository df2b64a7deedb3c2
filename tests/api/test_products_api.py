"""Тесты REST API товаров."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from product_catalog.core.config import Settings
from product_catalog.main import create_app


async def create(client: AsyncClient, **body: object) -> dict[str, object]:
    response = await client.post("/api/products", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_api_index(client: AsyncClient) -> None:
    response = await client.get("/api")

    assert response.status_code == 200
    assert response.json()["endpoints"]["products"] == "/api/products"


async def test_product_lifecycle_scenario(client: AsyncClient) -> None:
    """Создание, частичное обновление, удаление и повторное чтение."""
    response = await client.post(
        "/api/products", json={"name": "iPhone 15", "price": 999.99, "description": ""}
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Product created successfully"
    product_id = body["data"]["id"]
    assert isinstance(product_id, int)

    response = await client.put(f"/api/products/{product_id}", json={"price": 899.99})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["price"] == 899.99
    assert data["name"] == "iPhone 15"

    response = await client.delete(f"/api/products/{product_id}")
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Product deleted successfully",
    }

    response = await client.get(f"/api/products/{product_id}")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Product not found"}


async def test_string_price_round_trip_returns_number(client: AsyncClient) -> None:
    created = await create(client, name="USB cable", price="19.99")

    response = await client.get(f"/api/products/{created['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body == {"success": True, "data": body["data"]}
    assert body["data"]["price"] == 19.99
    assert body["data"]["description"] == ""


async def test_list_products_envelope(client: AsyncClient) -> None:
    await create(client, name="Old", price=1)
    await create(client, name="New", price=2)

    response = await client.get("/api/products")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert [p["name"] for p in body["data"]] == ["New", "Old"]


async def test_create_validation_errors(client: AsyncClient) -> None:
    response = await client.post("/api/products", json={"name": "A", "price": "abc"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    assert body["errors"] == [
        {"field": "name", "message": "Name must be between 2 and 100 characters"},
        {"field": "price", "message": "Price must be a decimal number"},
    ]


async def test_update_validation_error_names_only_bad_field(
    client: AsyncClient,
) -> None:
    created = await create(client, name="Mouse", price=25)

    response = await client.put(f"/api/products/{created['id']}", json={"price": -3})

    assert response.status_code == 400
    assert {e["field"] for e in response.json()["errors"]} == {"price"}


async def test_update_missing_product(client: AsyncClient) -> None:
    response = await client.put("/api/products/999", json={"name": "Ghost"})

    assert response.status_code == 404
    assert response.json()["success"] is False


async def test_delete_missing_product(client: AsyncClient) -> None:
    response = await client.delete("/api/products/999")

    assert response.status_code == 404


async def test_search(client: AsyncClient) -> None:
    await create(client, name="Phone stand", price=15)
    await create(client, name="Lamp", price=30, description="Desk lamp")

    response = await client.get("/api/products/search", params={"q": "LAMP"})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["data"][0]["name"] == "Lamp"


async def test_search_without_matches(client: AsyncClient) -> None:
    await create(client, name="Phone stand", price=15)

    response = await client.get("/api/products/search", params={"q": "guitar"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 0, "data": []}


@pytest.mark.parametrize("params", [{}, {"q": ""}])
async def test_search_requires_query(
    client: AsyncClient, params: dict[str, str]
) -> None:
    response = await client.get("/api/products/search", params=params)

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Search term is required",
    }


async def test_invalid_product_id_is_bad_request(client: AsyncClient) -> None:
    response = await client.get("/api/products/abc")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["field"] == "product_id"


@pytest.mark.parametrize(
    "request_args",
    [
        ("GET", "/api/products/99999999999999999999"),
        ("PUT", "/api/products/2147483648"),
        ("DELETE", "/api/products/0"),
    ],
)
async def test_out_of_range_product_id_is_bad_request(
    client: AsyncClient, request_args: tuple[str, str]
) -> None:
    method, url = request_args
    response = await client.request(method, url, json={"name": "Ghost"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["field"] == "product_id"


async def test_huge_integer_price_is_validation_error(client: AsyncClient) -> None:
    response = await client.post(
        "/api/products", json={"name": "Phone", "price": 10**400}
    )

    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "price", "message": "Price must be a decimal number"}
    ]


async def test_malformed_json_body(client: AsyncClient) -> None:
    response = await client.post(
        "/api/products",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_unknown_route(client: AsyncClient) -> None:
    response = await client.get("/api/unknown")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Route not found"}


async def test_unsupported_method_is_unknown_route(client: AsyncClient) -> None:
    created = await create(client, name="Mouse", price=25)

    response = await client.patch(
        f"/api/products/{created['id']}", json={"price": 30}
    )

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Route not found"}


@pytest.mark.parametrize(
    ("app_env", "exposed"), [("development", True), ("production", False)]
)
async def test_internal_error_detail_only_in_development(
    app: FastAPI, test_settings: Settings, app_env: str, exposed: bool
) -> None:
    settings = test_settings.model_copy(update={"APP_ENV": app_env})
    application = create_app(settings)
    application.dependency_overrides = app.dependency_overrides

    transport = ASGITransport(app=application, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        with patch(
            "product_catalog.services.product_service.get_all_products",
            side_effect=RuntimeError("database exploded"),
        ):
            response = await client.get("/api/products")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Internal server error"
    assert ("error" in body) is exposed
    if exposed:
        assert body["error"] == "database exploded"
