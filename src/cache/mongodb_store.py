# src/cache/mongodb_store.py — v1
"""MongoDB-based storage backend (CACHE_BACKEND=mongodb).

Each put inserts one ``{key, cache}`` document; duplicates are allowed and a
lookup returns whichever matching document the server finds first.
Capacity accounting is left to the database, so sizes are reported as
unknown. Requires 'pymongo' (async API, 4.9+).
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Any, Callable

from bson import Binary
from bson.binary import BINARY_SUBTYPE
from bson.errors import BSONError
from pydantic import ValidationError
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from artifactcache.cache.base_storage import BaseStorage
from artifactcache.cache.connection import ConnectionHandle
from artifactcache.cache.entry import PendingWrite, finish_entry
from artifactcache.cache.errors import (
    DecodeError,
    EncodeError,
    InsertError,
    QueryError,
)
from artifactcache.cache.models import (
    CacheHit,
    CacheLookup,
    CacheMiss,
    MongoCacheRecord,
    MongoConfig,
)
from artifactcache.logging.context import operation_context

logger = logging.getLogger(__name__)

_BACKEND = "mongodb"


class MongoDBStorage(BaseStorage):
    """Cache storage backed by a MongoDB collection."""

    def __init__(
        self,
        url: str,
        database_name: str,
        collection_name: str,
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        """Initialize the backend. No I/O happens until the first get/put.

        Args:
            url: MongoDB connection string.
            database_name: Database holding the cache collection.
            collection_name: Collection holding cache documents.
            client_factory: Builds a client from the URL (defaults to
                pymongo.AsyncMongoClient). Mainly a seam for tests.
        """
        self._config = MongoConfig(
            url=url, database_name=database_name, collection_name=collection_name
        )
        self._client_factory = client_factory or AsyncMongoClient
        self._connection: ConnectionHandle[Any] = ConnectionHandle(
            self._connect, name=_BACKEND
        )

    @property
    def config(self) -> MongoConfig:
        return self._config

    async def _connect(self) -> Any:
        """Create the client, verify the server answers and return the collection."""
        client = self._client_factory(self._config.url)
        try:
            await client.admin.command("ping")
        except Exception:
            await client.close()
            raise
        return client[self._config.database_name][self._config.collection_name]

    async def get(self, key: str) -> CacheLookup:
        """Fetch the first document whose key matches exactly."""
        with operation_context(_BACKEND, "get", key):
            collection = await self._connection.acquire()
            try:
                document = await collection.find_one({"key": key})
            except PyMongoError as e:
                raise QueryError(
                    "failed to fetch entry", backend=_BACKEND, key=key
                ) from e

            if document is None:
                logger.debug("cache miss, key: %s", key)
                return CacheMiss()

            try:
                record = MongoCacheRecord.model_validate(document)
            except ValidationError as e:
                raise DecodeError(
                    "failed to deserialize MongoDB entry", backend=_BACKEND, key=key
                ) from e

            logger.debug("cache hit, key: %s", key)
            return CacheHit.from_bytes(record.cache)

    async def put(self, key: str, entry: PendingWrite) -> timedelta:
        """Insert a new document for ``key``. Existing documents are kept."""
        start = time.monotonic()
        with operation_context(_BACKEND, "put", key):
            payload = await finish_entry(entry)
            collection = await self._connection.acquire()

            document = {
                "key": key,
                "cache": Binary(payload, BINARY_SUBTYPE),
            }
            try:
                await collection.insert_one(document)
            except BSONError as e:
                raise EncodeError(
                    "failed to serialize cache entry", backend=_BACKEND, key=key
                ) from e
            except PyMongoError as e:
                raise InsertError(
                    "failed to insert to MongoDB", backend=_BACKEND, key=key
                ) from e

            elapsed = timedelta(seconds=time.monotonic() - start)
            logger.debug(
                "stored %d bytes in %.3fs, key: %s",
                len(payload), elapsed.total_seconds(), key,
            )
            return elapsed

    def location(self) -> str:
        return (
            f"MongoDB: {self._config.url}, "
            f"database: {self._config.database_name}, "
            f"collection: {self._config.collection_name}"
        )

    async def current_size(self) -> int | None:
        return None

    async def max_size(self) -> int | None:
        return None
