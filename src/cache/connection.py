# src/cache/connection.py — v1
"""Lazily-established connection shared by all operations of one backend.

The slot starts empty and is filled by the first caller that needs it.
Readers that find it filled never touch the lock. Callers that find it empty
serialize on an asyncio.Lock and re-check after acquiring it, so a race of N
first-time callers performs a single connect and all of them observe the
same object. A failed connect publishes nothing: the next call tries again.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

from artifactcache.cache.errors import StorageConnectionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConnectionHandle(Generic[T]):
    """Shared, lazily-initialized connection slot."""

    def __init__(self, connect: Callable[[], Awaitable[T]], name: str = "") -> None:
        """
        Args:
            connect: Coroutine factory that establishes the connection.
            name: Backend label used in logs and errors.
        """
        self._connect = connect
        self._name = name
        self._value: T | None = None
        self._ready = False
        self._lock = asyncio.Lock()
        self._attempts = 0

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def connect_attempts(self) -> int:
        """Number of connection attempts made so far, failed ones included."""
        return self._attempts

    async def acquire(self) -> T:
        """Return the shared connection, establishing it on first use.

        Raises:
            StorageConnectionError: If establishing the connection fails.
                The slot stays empty so a later call can retry.
        """
        if self._ready:
            return self._value  # type: ignore[return-value]

        async with self._lock:
            # Another caller may have connected while we waited.
            if self._ready:
                return self._value  # type: ignore[return-value]

            self._attempts += 1
            logger.debug("%s: connecting (attempt %d)", self._name, self._attempts)
            try:
                value = await self._connect()
            except StorageConnectionError:
                raise
            except Exception as e:
                logger.warning("%s: connection failed: %s", self._name, e)
                raise StorageConnectionError(
                    f"failed to connect to {self._name or 'storage backend'}",
                    backend=self._name or None,
                ) from e

            self._value = value
            self._ready = True
            logger.info("%s: connection ready", self._name)
            return value
