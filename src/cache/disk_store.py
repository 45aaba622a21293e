# src/cache/disk_store.py — v1
"""Local filesystem storage backend (CACHE_BACKEND=disk, the default).

Entries are stored as individual files named by the SHA-256 of the key and
sharded by its first two hex digits. Size is tracked by scanning the
directory; enforcing the limit is left to the caller.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import tempfile
import time
from datetime import timedelta
from pathlib import Path

from artifactcache.cache.base_storage import BaseStorage
from artifactcache.cache.entry import PendingWrite, finish_entry
from artifactcache.cache.errors import InsertError, QueryError
from artifactcache.cache.models import CacheHit, CacheLookup, CacheMiss
from artifactcache.logging.context import operation_context

logger = logging.getLogger(__name__)

_BACKEND = "disk"
_TMP_PREFIX = ".inflight-"


class DiskStorage(BaseStorage):
    """File-based cache storage under a root directory."""

    def __init__(self, root: Path | str, max_size: int | None = None) -> None:
        self._root = Path(root).expanduser()
        self._max_size = max_size

    @property
    def root(self) -> Path:
        return self._root

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        digest = hashlib.sha256(key.encode("utf-8", "surrogatepass")).hexdigest()
        return self._root / digest[0] / digest[1] / digest

    async def get(self, key: str) -> CacheLookup:
        with operation_context(_BACKEND, "get", key):
            path = self._entry_path(key)
            try:
                data = await asyncio.to_thread(path.read_bytes)
            except FileNotFoundError:
                logger.debug("cache miss, key: %s", key)
                return CacheMiss()
            except OSError as e:
                raise QueryError(
                    f"failed to read {path}", backend=_BACKEND, key=key
                ) from e
            logger.debug("cache hit, key: %s", key)
            return CacheHit.from_bytes(data)

    async def put(self, key: str, entry: PendingWrite) -> timedelta:
        start = time.monotonic()
        with operation_context(_BACKEND, "put", key):
            payload = await finish_entry(entry)
            path = self._entry_path(key)
            try:
                await asyncio.to_thread(self._write_atomic, path, payload)
            except OSError as e:
                raise InsertError(
                    f"failed to write {path}", backend=_BACKEND, key=key
                ) from e
            return timedelta(seconds=time.monotonic() - start)

    @staticmethod
    def _write_atomic(path: Path, payload: bytes) -> None:
        """Write to a temp file in the target directory, then rename over."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=_TMP_PREFIX)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def location(self) -> str:
        return f"Local disk: {self._root}"

    async def current_size(self) -> int | None:
        """Total bytes of stored entries (in-flight temp files excluded)."""
        return await asyncio.to_thread(self._scan_size)

    def _scan_size(self) -> int:
        if not self._root.is_dir():
            return 0
        total = 0
        for path in self._root.rglob("*"):
            if path.is_file() and not path.name.startswith(_TMP_PREFIX):
                total += path.stat().st_size
        return total

    async def max_size(self) -> int | None:
        return self._max_size
