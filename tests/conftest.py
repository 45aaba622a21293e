# tests/conftest.py — v2
"""Shared test fixtures for all unit tests.

Provides in-memory stand-ins for the MongoDB and Redis async clients so
storage backends can be exercised without a live server.
"""

from __future__ import annotations

import asyncio
import copy
from pathlib import Path
from typing import Any

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from artifactcache.logging.context import clear_context


# === FAKES: MongoDB ===


class FakeCollection:
    """Async collection storing documents in insertion order."""

    def __init__(self) -> None:
        self.documents: list[dict[str, Any]] = []
        self.find_error: Exception | None = None
        self.insert_error: Exception | None = None

    async def find_one(self, filter: dict[str, Any]) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        if self.find_error is not None:
            raise self.find_error
        for doc in self.documents:
            if all(doc.get(k) == v for k, v in filter.items()):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, document: dict[str, Any]) -> Any:
        await asyncio.sleep(0)
        if self.insert_error is not None:
            raise self.insert_error
        stored = dict(document)
        stored["_id"] = len(self.documents) + 1
        # bson decodes generic-subtype Binary back to plain bytes
        if isinstance(stored.get("cache"), bytes):
            stored["cache"] = bytes(stored["cache"])
        self.documents.append(stored)
        return stored["_id"]


class _FakeAdmin:
    def __init__(self, client: FakeMongoClient) -> None:
        self._client = client

    async def command(self, name: str) -> dict[str, Any]:
        await asyncio.sleep(0)
        if self._client.ping_error is not None:
            raise self._client.ping_error
        return {"ok": 1.0}


class FakeMongoClient:
    """Client exposing ``client[db][coll]`` over a shared FakeCollection."""

    def __init__(
        self, url: str, collection: FakeCollection, ping_error: Exception | None = None
    ) -> None:
        self.url = url
        self.collection = collection
        self.ping_error = ping_error
        self.admin = _FakeAdmin(self)
        self.closed = False
        self.databases: list[str] = []

    def __getitem__(self, database: str) -> _FakeDatabase:
        self.databases.append(database)
        return _FakeDatabase(self.collection)

    async def close(self) -> None:
        self.closed = True


class _FakeDatabase:
    def __init__(self, collection: FakeCollection) -> None:
        self._collection = collection
        self.names: list[str] = []

    def __getitem__(self, name: str) -> FakeCollection:
        self.names.append(name)
        return self._collection


class FakeMongoFactory:
    """Client factory that records every client it builds.

    ``failures`` makes the first N clients fail their ping.
    """

    def __init__(self, failures: int = 0) -> None:
        self.collection = FakeCollection()
        self.clients: list[FakeMongoClient] = []
        self._failures = failures

    def __call__(self, url: str) -> FakeMongoClient:
        error = None
        if len(self.clients) < self._failures:
            error = ServerSelectionTimeoutError("no servers available")
        client = FakeMongoClient(url, self.collection, ping_error=error)
        self.clients.append(client)
        return client


# === FAKES: Redis ===


class FakeRedis:
    """Async subset of redis.asyncio.Redis backed by a dict."""

    def __init__(self, maxmemory: str = "0") -> None:
        self.data: dict[str, bytes] = {}
        self.maxmemory = maxmemory
        self.error: Exception | None = None
        self.ping_error: Exception | None = None
        self.closed = False

    async def ping(self) -> bool:
        if self.ping_error is not None:
            raise self.ping_error
        return True

    async def get(self, key: str) -> bytes | None:
        if self.error is not None:
            raise self.error
        return self.data.get(key)

    async def set(self, key: str, value: bytes) -> bool:
        if self.error is not None:
            raise self.error
        self.data[key] = value
        return True

    async def config_get(self, pattern: str) -> dict[bytes, bytes]:
        if self.error is not None:
            raise self.error
        return {b"maxmemory": self.maxmemory.encode()}

    async def aclose(self) -> None:
        self.closed = True


# === FIXTURES ===


@pytest.fixture
def mongo_factory() -> FakeMongoFactory:
    return FakeMongoFactory()


@pytest.fixture
def make_mongo_factory():
    """Build a factory whose first `failures` clients cannot reach the server."""
    return FakeMongoFactory


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    """Temporary cache directory."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()
