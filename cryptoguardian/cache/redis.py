"""Redis cache backend implementation."""

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from cryptoguardian.core.cache import KEY_PREFIX, CacheBackend
from cryptoguardian.core.exceptions import CacheError

logger = logging.getLogger(__name__)


class RedisCacheBackend(CacheBackend):
    """
    Shared cache for address snapshots and spot prices.

    Values are stored as JSON strings with a Redis-side expiry, so several
    API processes see the same prices and snapshots. Redis being down is
    never fatal: reads degrade to misses and writes report False.
    """

    def __init__(
        self,
        redis_url: str,
        default_ttl: int = 300,
        client: redis.Redis | None = None,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            redis_url: Redis connection URL.
            default_ttl: Expiry used when a caller passes no TTL (5 minutes).
            client: Ready asyncio client; built lazily from the URL if omitted.
        """
        self._redis_url = redis_url
        self._default_ttl = default_ttl
        self._client = client

    def _connection(self) -> redis.Redis:
        if self._client is None:
            try:
                self._client = redis.from_url(self._redis_url, decode_responses=True)
            except ValueError as e:
                raise CacheError(f"Invalid Redis URL: {e}", "connect") from e
        return self._client

    async def get(self, key: str) -> Any | None:
        """Read and decode a JSON value; errors count as a miss."""
        try:
            raw = await self._connection().get(key)
        except (RedisError, OSError, CacheError) as e:
            logger.warning(f"[RedisCache] read of {key} failed: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"[RedisCache] dropping undecodable value at {key}")
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Encode ``value`` as JSON and store it with an expiry."""
        expiry = self._default_ttl if ttl is None else ttl
        try:
            await self._connection().set(
                key, json.dumps(value, default=str), ex=expiry or None
            )
        except (RedisError, OSError, CacheError, TypeError) as e:
            logger.warning(f"[RedisCache] write of {key} failed: {e}")
            return False
        return True

    async def delete(self, key: str) -> bool:
        """Remove one key."""
        try:
            removed = await self._connection().delete(key)
        except (RedisError, OSError, CacheError) as e:
            logger.warning(f"[RedisCache] delete of {key} failed: {e}")
            return False
        return removed > 0

    async def clear(self) -> bool:
        """Remove every key under the application prefix."""
        try:
            client = self._connection()
            stale = [key async for key in client.scan_iter(match=f"{KEY_PREFIX}:*", count=100)]
            if stale:
                await client.delete(*stale)
        except (RedisError, OSError, CacheError) as e:
            logger.warning(f"[RedisCache] clear failed: {e}")
            return False
        logger.info(f"[RedisCache] cleared {len(stale)} keys")
        return True

    async def close(self) -> None:
        """Close the connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> bool:
        """Round-trip a PING."""
        try:
            return bool(await self._connection().ping())
        except (RedisError, OSError, CacheError):
            return False
