# src/cache/base_storage.py — v2
"""Abstract storage backend interface.

A backend stores opaque cache payloads under fingerprint keys. Lookups
resolve to CacheHit or CacheMiss; failures raise CacheStorageError
subclasses (see cache/errors.py).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta

from artifactcache.cache.entry import PendingWrite
from artifactcache.cache.models import CacheLookup


class BaseStorage(ABC):
    """Unified interface for cache storage backends."""

    @abstractmethod
    async def get(self, key: str) -> CacheLookup:
        """Look up a payload by fingerprint key."""

    @abstractmethod
    async def put(self, key: str, entry: PendingWrite) -> timedelta:
        """Finalize and store a payload; return the wall-clock time taken."""

    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where entries are stored."""

    @abstractmethod
    async def current_size(self) -> int | None:
        """Bytes currently stored, or None when unknown."""

    @abstractmethod
    async def max_size(self) -> int | None:
        """Capacity in bytes, or None when unknown."""
