from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

from redis.asyncio import Redis
from redis.exceptions import RedisError

from governance_sync.config import AppSettings
from governance_sync.errors import CacheUnavailableError

T = TypeVar("T")


class RedisCacheBackend:
    """``CacheBackend`` over a redis-py asyncio client."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: AppSettings) -> RedisCacheBackend:
        client = Redis.from_url(
            settings.active_redis_url,
            socket_timeout=settings.request_timeout_seconds,
            socket_connect_timeout=5.0,
        )
        return cls(client)

    async def _call(self, operation: str, pending: Awaitable[T]) -> T:
        try:
            return await pending
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError(f"redis {operation} failed: {exc}") from exc

    async def get(self, key: str) -> str | bytes | None:
        return await self._call("get", self._client.get(key))

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        await self._call("set", self._client.set(key, value, ex=ex))

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._call("delete", self._client.delete(*keys))

    async def ping(self) -> None:
        await self._call("ping", self._client.ping())

    async def keys(self, pattern: str) -> list[str]:
        async def _scan() -> list[str]:
            return [
                key.decode() if isinstance(key, bytes) else key
                async for key in self._client.scan_iter(match=pattern, count=500)
            ]

        return await self._call("scan", _scan())

    async def aclose(self) -> None:
        await self._client.aclose()
