"""Ограничение частоты запросов к API (фиксированное окно)."""

import logging
import math
import time
from collections.abc import Callable
from typing import Protocol

from redis.asyncio import Redis
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class CounterStore(Protocol):
    """Хранилище счетчиков запросов."""

    async def hit(self, key: str, window_seconds: int) -> tuple[int, float]:
        """
        Увеличивает счетчик для ключа в текущем окне.

        Returns:
            Пару (число запросов в окне, секунд до сброса окна).
        """
        ...


class MemoryCounterStore:
    """Счетчики в памяти процесса. Подходит для одного экземпляра API."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}

    async def hit(self, key: str, window_seconds: int) -> tuple[int, float]:
        now = self._clock()
        self._prune(now, window_seconds)
        started_at, count = self._windows.get(key, (now, 0))
        count += 1
        self._windows[key] = (started_at, count)
        return count, window_seconds - (now - started_at)

    def _prune(self, now: float, window_seconds: int) -> None:
        expired = [
            key
            for key, (started_at, _) in self._windows.items()
            if now - started_at >= window_seconds
        ]
        for key in expired:
            del self._windows[key]


class RedisCounterStore:
    """Счетчики в Redis, общие для всех экземпляров API."""

    def __init__(self, redis: Redis, prefix: str = "rate-limit") -> None:
        self.redis = redis
        self.prefix = prefix

    async def hit(self, key: str, window_seconds: int) -> tuple[int, float]:
        redis_key = f"{self.prefix}:{key}"
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(redis_key)
            pipe.expire(redis_key, window_seconds, nx=True)
            pipe.ttl(redis_key)
            count, _, ttl = await pipe.execute()
        return int(count), float(ttl if ttl > 0 else window_seconds)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware, ограничивающий число запросов с одного адреса.

    Запросы сверх лимита получают 429 с заголовком Retry-After.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: CounterStore,
        max_requests: int,
        window_seconds: int,
        path_prefix: str = "/api",
    ) -> None:
        super().__init__(app)
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_key = request.client.host if request.client else "anonymous"
        count, retry_after = await self.store.hit(client_key, self.window_seconds)
        if count > self.max_requests:
            logger.warning("Rate limit exceeded for %s", client_key)
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "message": "Too many requests, please try again later",
                },
                headers={"Retry-After": str(math.ceil(retry_after))},
            )
        return await call_next(request)
