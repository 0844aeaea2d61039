"""
Key-value backing stores for the cache service.
"""

from typing import Any, List, Optional, Protocol, runtime_checkable

import redis.asyncio as redis

from shared.config import BaseConfig
from shared.errors import BackingStoreError
from shared.logging import get_logger


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal async key-value contract the cache service is built on.

    Every method may raise; callers decide how to degrade.
    """

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> Any:
        ...

    async def delete(self, *keys: str) -> int:
        """Remove ``keys`` and return how many existed."""
        ...

    async def keys(self, pattern: str) -> List[str]:
        """List keys matching a glob where ``*`` matches any run of characters."""
        ...


class RedisStore:
    """Redis implementation of :class:`KeyValueStore`."""

    def __init__(
        self,
        redis_url: str,
        *,
        socket_timeout: float = 5.0,
        socket_connect_timeout: float = 5.0,
    ):
        self.redis_url = redis_url
        self.socket_timeout = socket_timeout
        self.socket_connect_timeout = socket_connect_timeout
        self.logger = get_logger("cache.store.redis")
        self._redis: Optional[redis.Redis] = None

    @classmethod
    def from_settings(cls, settings: BaseConfig) -> "RedisStore":
        return cls(
            settings.redis_url,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_connect_timeout,
        )

    @property
    def is_open(self) -> bool:
        return self._redis is not None

    def _client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=self.socket_connect_timeout,
                socket_timeout=self.socket_timeout,
            )
        return self._redis

    async def start(self) -> None:
        """Open the connection and verify it with a ping."""
        try:
            await self._client().ping()
            self.logger.info("Redis store started", redis_url=self.redis_url)
        except Exception as e:
            self.logger.error("Failed to start Redis store", error=str(e))
            await self.stop()
            raise BackingStoreError("REDIS_START_FAILED", str(e)) from e

    async def stop(self) -> None:
        """Close the connection."""
        if self._redis is not None:
            client, self._redis = self._redis, None
            await client.aclose()
            self.logger.info("Redis store stopped")

    async def get(self, key: str) -> Optional[str]:
        return await self._client().get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> Any:
        return await self._client().set(key, value, ex=ttl_seconds)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return await self._client().delete(*keys)

    async def keys(self, pattern: str) -> List[str]:
        return await self._client().keys(pattern)

    async def ping(self) -> bool:
        return bool(await self._client().ping())
