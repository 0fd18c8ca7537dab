"""Cache service with Redis backend and in-memory fallback.

Listing pages are cached as JSON with a TTL (``cache_ttl_warehouses``).

Graceful degradation: if Redis is unreachable at startup, entries live in a
cachetools ``TLRUCache`` instead. Read and write failures are logged and
treated as a miss / no-op; only the administrative prefix delete reports
failure to its caller.
"""

import asyncio
import json
import logging
import time
from collections.abc import Callable
from typing import Any

from cachetools import TLRUCache
from fastapi import Request

from app.config import settings

logger = logging.getLogger(__name__)

SCAN_COUNT = 100
DELETE_BATCH = 500


class CacheError(Exception):
    """The cache backend failed during an operation whose caller must know."""


def _escape_glob(text: str) -> str:
    for ch in "\\*?[]":
        text = text.replace(ch, "\\" + ch)
    return text


class RedisCacheBackend:
    """Thin async wrapper over a ``redis.asyncio`` client."""

    name = "redis"

    def __init__(self, client):
        self._redis = client

    async def get(self, key: str) -> str | None:
        return await self._redis.get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self._redis.setex(key, ttl, value)

    async def delete_by_prefix(self, prefix: str) -> int:
        """SCAN for ``prefix*`` and delete in batches; never issues ``KEYS``."""
        cleared = 0
        batch: list[str] = []
        async for key in self._redis.scan_iter(
            match=_escape_glob(prefix) + "*", count=SCAN_COUNT, _type="string",
        ):
            batch.append(key)
            if len(batch) >= DELETE_BATCH:
                cleared += await self._redis.delete(*batch)
                batch = []
        if batch:
            cleared += await self._redis.delete(*batch)
        return cleared

    async def ping(self) -> bool:
        return bool(await self._redis.ping())

    async def close(self) -> None:
        await self._redis.aclose()


class MemoryCacheBackend:
    """Process-local cache with per-entry TTL."""

    name = "memory"

    def __init__(self, maxsize: int | None = None, timer: Callable[[], float] = time.monotonic):
        self._entries: TLRUCache = TLRUCache(
            maxsize=maxsize or settings.memory_cache_maxsize,
            ttu=lambda _key, value, now: now + value[1],
            timer=timer,
        )

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._entries[key] = (value, ttl)

    async def delete_by_prefix(self, prefix: str) -> int:
        self._entries.expire()
        keys = [k for k in list(self._entries.keys()) if k.startswith(prefix)]
        for key in keys:
            self._entries.pop(key, None)
        return len(keys)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()


class CacheService:
    """Async JSON cache over a pluggable backend."""

    def __init__(self, backend=None, op_timeout: float | None = None):
        self._backend = backend or MemoryCacheBackend()
        self._op_timeout = op_timeout or settings.cache_op_timeout_seconds

    @property
    def backend_name(self) -> str:
        return getattr(self._backend, "name", type(self._backend).__name__)

    @property
    def using_fallback(self) -> bool:
        """True while entries live in process memory instead of Redis."""
        return isinstance(self._backend, MemoryCacheBackend)

    async def connect(self, redis_url: str | None = None) -> bool:
        """Switch to Redis if it answers PING. Returns True on success."""
        import redis.asyncio as aioredis

        client = None
        try:
            client = aioredis.from_url(
                redis_url or settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=settings.redis_socket_timeout,
                socket_timeout=settings.redis_socket_timeout,
            )
            await client.ping()
        except Exception as e:
            logger.warning("Redis connection failed, using in-memory fallback: %s", str(e)[:100])
            if client is not None:
                await client.aclose()
            return False
        self._backend = RedisCacheBackend(client)
        return True

    async def disconnect(self):
        await self._backend.close()

    async def _call(self, coro):
        # Last-resort bound in case the client's own socket timeout never fires
        return await asyncio.wait_for(coro, timeout=self._op_timeout)

    async def get(self, key: str) -> dict[str, Any] | None:
        """Read from cache. Returns None on miss or backend failure."""
        try:
            data = await self._call(self._backend.get(key))
        except Exception as e:
            logger.warning("Cache read error | backend=%s | %s", self.backend_name, str(e)[:100])
            return None
        if not data:
            return None
        try:
            return json.loads(data)
        except ValueError:
            logger.warning("Discarding undecodable cache entry | key=%s", key[:80])
            return None

    async def set(self, key: str, data: dict[str, Any], ttl: int) -> None:
        """Write to cache with TTL. Failures are logged and swallowed."""
        if ttl <= 0:
            return
        try:
            await self._call(self._backend.set(key, json.dumps(data, ensure_ascii=False), ttl))
            logger.info("Cache SET (%s) | key=%s | ttl=%ds", self.backend_name, key[:80], ttl)
        except Exception as e:
            logger.warning("Cache write error | backend=%s | %s", self.backend_name, str(e)[:100])

    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``. Raises CacheError on failure."""
        try:
            cleared = await self._call(self._backend.delete_by_prefix(prefix))
        except Exception as e:
            logger.error("Cache clear failed | prefix=%s | %s", prefix, str(e)[:200])
            raise CacheError(f"failed to clear keys with prefix {prefix!r}") from e
        logger.info("Cache cleared %d keys with prefix '%s'", cleared, prefix)
        return cleared

    async def ping(self) -> bool:
        try:
            return await self._call(self._backend.ping())
        except Exception as e:
            logger.error("Cache health check failed: %s", str(e)[:100])
            return False


def get_cache(request: Request) -> CacheService:
    """FastAPI dependency: the process-wide cache built in the lifespan."""
    return request.app.state.cache
