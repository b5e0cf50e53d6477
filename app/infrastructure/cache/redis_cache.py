"""Redis-based L2 cache tier.

Shared across service instances so their caches stay coherent. Stores
raw payload bytes (decode_responses=False) with a per-key expiry. Every
Redis failure is re-raised as CacheTierUnavailableError so HybridCache
can fall back for that single call; the client is kept, so the tier
recovers on its own once Redis is reachable again.
"""

from __future__ import annotations

import logging
from datetime import timedelta

import redis.asyncio as redis

from app.infrastructure.cache.exceptions import CacheTierUnavailableError

logger = logging.getLogger(__name__)

_UNLINK_CHUNK_SIZE = 500


class RedisCacheTier:
    """Async Redis cache tier with TTL support.

    Call connect() at startup and disconnect() at shutdown. Operation
    timeouts come from socket_timeout so a dead server fails fast
    instead of hanging the request.
    """

    name = "redis"

    def __init__(
        self,
        url: str | None = None,
        *,
        redis_client: redis.Redis | None = None,
        timeout_seconds: float = 5.0,
        namespace_pattern: str = "*",
    ) -> None:
        """Initialize the tier.

        Args:
            url: Redis URL (redis://host:port/db). Ignored when redis_client is given.
            redis_client: Optional Redis client for testing or DI.
            timeout_seconds: Connect and per-operation socket timeout.
            namespace_pattern: SCAN pattern removed by clear() (e.g. 'v1:*').
        """
        self.url = url
        self.redis = redis_client
        self.timeout_seconds = timeout_seconds
        self.namespace_pattern = namespace_pattern
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Create the client and ping it. Call on app startup.

        A failed ping is logged, not raised: the client is kept and later
        calls fail fast (and are absorbed by HybridCache) until Redis is back.
        """
        if self.redis is None:
            if not self.url:
                raise ValueError("RedisCacheTier.connect() needs a url or a redis_client")
            self.redis = redis.Redis.from_url(
                self.url,
                decode_responses=False,
                socket_connect_timeout=self.timeout_seconds,
                socket_timeout=self.timeout_seconds,
                socket_keepalive=True,
                health_check_interval=30,
            )
        try:
            await self.redis.ping()
            self._connected = True
            logger.info("Redis cache tier connected: %s", _safe_url(self.url))
        except (redis.ConnectionError, redis.TimeoutError) as e:
            self._connected = False
            logger.warning(
                "Redis connection failed: %s. Continuing with L1 only until it recovers.",
                e,
            )

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache tier disconnected")

    def is_available(self) -> bool:
        """Return True if a client exists; per-call errors are reported by raising."""
        return self.redis is not None

    def _client(self, operation: str) -> redis.Redis:
        if self.redis is None:
            raise CacheTierUnavailableError(self.name, operation, "not connected")
        return self.redis

    async def get(self, key: str) -> bytes | None:
        """Return the stored payload or None on miss.

        Raises:
            CacheTierUnavailableError: On any Redis error.
        """
        client = self._client("get")
        try:
            value = await client.get(key)
        except redis.RedisError as e:
            self._connected = False
            raise CacheTierUnavailableError(self.name, "get", str(e)) from e
        self._connected = True
        return value

    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        """Store payload with a millisecond-precision expiry.

        Raises:
            CacheTierUnavailableError: On any Redis error.
        """
        client = self._client("set")
        ttl_ms = int(ttl.total_seconds() * 1000)
        try:
            if ttl_ms <= 0:
                await client.delete(key)
                return
            await client.set(key, value, px=ttl_ms)
        except redis.RedisError as e:
            self._connected = False
            raise CacheTierUnavailableError(self.name, "set", str(e)) from e
        self._connected = True

    async def delete(self, key: str) -> None:
        """Remove key from Redis.

        Raises:
            CacheTierUnavailableError: On any Redis error.
        """
        client = self._client("delete")
        try:
            await client.delete(key)
        except redis.RedisError as e:
            self._connected = False
            raise CacheTierUnavailableError(self.name, "delete", str(e)) from e
        self._connected = True

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern using SCAN + batched UNLINK (non-blocking).

        Args:
            pattern: Redis SCAN match pattern (e.g. v1:product:*).

        Returns:
            Number of keys deleted.

        Raises:
            CacheTierUnavailableError: On any Redis error.
        """
        client = self._client("delete_pattern")
        deleted = 0
        try:
            chunk: list[bytes] = []
            async for key in client.scan_iter(match=pattern):
                chunk.append(key)
                if len(chunk) >= _UNLINK_CHUNK_SIZE:
                    deleted += int(await client.unlink(*chunk) or 0)
                    chunk = []
            if chunk:
                deleted += int(await client.unlink(*chunk) or 0)
        except redis.RedisError as e:
            self._connected = False
            raise CacheTierUnavailableError(self.name, "delete_pattern", str(e)) from e
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted

    async def clear(self) -> None:
        """Remove every key in this tier's namespace (never FLUSHDB)."""
        await self.delete_pattern(self.namespace_pattern)


def _safe_url(url: str | None) -> str:
    """Strip credentials from a Redis URL before logging it."""
    if not url:
        return "<client>"
    scheme, sep, rest = url.partition("://")
    if "@" in rest:
        rest = rest.split("@", 1)[1]
    return f"{scheme}{sep}{rest}"
