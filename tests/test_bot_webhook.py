"""Тесты вебхука Telegram-клиента."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from product_catalog import bot as bot_module
from product_catalog.core.config import settings

TOKEN = "123:abc"
SECRET = "s3cret"


@pytest.fixture
async def webhook_client(
    monkeypatch: pytest.MonkeyPatch,
) -> AsyncGenerator[tuple[AsyncClient, AsyncMock], None]:
    monkeypatch.setattr(settings, "BOT_TOKEN", TOKEN)
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", SECRET)
    dp = AsyncMock()
    # ASGITransport не запускает lifespan, поэтому состояние задаем вручную
    monkeypatch.setattr(bot_module.app.state, "dp", dp, raising=False)
    monkeypatch.setattr(bot_module.app.state, "bot", AsyncMock(), raising=False)

    transport = ASGITransport(app=bot_module.app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, dp


@pytest.mark.parametrize(
    ("token", "secret", "expected"),
    [
        (TOKEN, SECRET, None),
        ("999:zzz", SECRET, "Invalid token"),
        ("ключ", SECRET, "Invalid token"),
        (TOKEN, None, "Invalid secret token"),
        (TOKEN, "wrong", "Invalid secret token"),
    ],
)
def test_check_webhook_request(
    monkeypatch: pytest.MonkeyPatch,
    token: str,
    secret: str | None,
    expected: str | None,
) -> None:
    monkeypatch.setattr(settings, "BOT_TOKEN", TOKEN)
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", SECRET)

    assert bot_module.check_webhook_request(token, secret) == expected


async def test_webhook_feeds_update(
    webhook_client: tuple[AsyncClient, AsyncMock],
) -> None:
    client, dp = webhook_client
    update = {"update_id": 1}

    response = await client.post(
        f"/telegram/webhook/{TOKEN}",
        json=update,
        headers={"X-Telegram-Bot-Api-Secret-Token": SECRET},
    )

    assert response.status_code == 200
    dp.feed_webhook_update.assert_awaited_once()
    assert dp.feed_webhook_update.await_args.kwargs["update"] == update


async def test_webhook_rejects_wrong_secret(
    webhook_client: tuple[AsyncClient, AsyncMock],
) -> None:
    client, dp = webhook_client

    response = await client.post(
        f"/telegram/webhook/{TOKEN}",
        json={"update_id": 1},
        headers={"X-Telegram-Bot-Api-Secret-Token": "wrong"},
    )

    assert response.status_code == 403
    assert response.json() == {"error": "Invalid secret token"}
    dp.feed_webhook_update.assert_not_awaited()


async def test_webhook_reports_processing_failure(
    webhook_client: tuple[AsyncClient, AsyncMock],
) -> None:
    client, dp = webhook_client
    dp.feed_webhook_update.side_effect = RuntimeError("boom")

    response = await client.post(
        f"/telegram/webhook/{TOKEN}",
        json={"update_id": 1},
        headers={"X-Telegram-Bot-Api-Secret-Token": SECRET},
    )

    assert response.status_code == 500
