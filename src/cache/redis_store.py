# src/cache/redis_store.py — v2
"""Redis-based storage backend (CACHE_BACKEND=redis).

One string value per key under a namespace prefix; a put overwrites any
previous value for the same key. Suitable for shared multi-host caches.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Any, Callable
from urllib.parse import urlsplit, urlunsplit

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from artifactcache.cache.base_storage import BaseStorage
from artifactcache.cache.connection import ConnectionHandle
from artifactcache.cache.entry import PendingWrite, finish_entry
from artifactcache.cache.errors import InsertError, QueryError
from artifactcache.cache.models import CacheHit, CacheLookup, CacheMiss
from artifactcache.logging.context import operation_context

logger = logging.getLogger(__name__)

_BACKEND = "redis"


def _mask_password(url: str) -> str:
    parts = urlsplit(url)
    if not parts.password:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit(parts._replace(netloc=netloc))


class RedisStorage(BaseStorage):
    """Cache storage backed by a Redis server."""

    def __init__(
        self,
        url: str,
        key_prefix: str = "artifactcache:",
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        self._url = url
        self._prefix = key_prefix
        self._client_factory = client_factory or aioredis.from_url
        self._connection: ConnectionHandle[Any] = ConnectionHandle(
            self._connect, name=_BACKEND
        )

    async def _connect(self) -> Any:
        client = self._client_factory(self._url)
        try:
            await client.ping()
        except Exception:
            await client.aclose()
            raise
        return client

    def _redis_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> CacheLookup:
        with operation_context(_BACKEND, "get", key):
            client = await self._connection.acquire()
            try:
                data = await client.get(self._redis_key(key))
            except RedisError as e:
                raise QueryError(
                    "failed to fetch entry", backend=_BACKEND, key=key
                ) from e

            if data is None:
                logger.debug("cache miss, key: %s", key)
                return CacheMiss()
            logger.debug("cache hit, key: %s", key)
            return CacheHit.from_bytes(data)

    async def put(self, key: str, entry: PendingWrite) -> timedelta:
        start = time.monotonic()
        with operation_context(_BACKEND, "put", key):
            payload = await finish_entry(entry)
            client = await self._connection.acquire()
            try:
                await client.set(self._redis_key(key), payload)
            except RedisError as e:
                raise InsertError(
                    "failed to store entry in Redis", backend=_BACKEND, key=key
                ) from e
            return timedelta(seconds=time.monotonic() - start)

    def location(self) -> str:
        return f"Redis: {_mask_password(self._url)}"

    async def current_size(self) -> int | None:
        return None

    async def max_size(self) -> int | None:
        """Server ``maxmemory`` limit, or None when the server sets none."""
        with operation_context(_BACKEND, "max_size"):
            client = await self._connection.acquire()
            try:
                config = await client.config_get("maxmemory")
            except RedisError as e:
                raise QueryError(
                    "failed to read maxmemory", backend=_BACKEND
                ) from e

        raw = config.get("maxmemory", config.get(b"maxmemory"))
        if raw is None:
            return None
        value = int(raw)
        return value or None
