# src/cache/storage_factory.py — v3
"""Factory for storage backend instantiation from Settings."""

from __future__ import annotations

from artifactcache.cache.base_storage import BaseStorage
from artifactcache.config.settings import Settings


def create_storage(settings: Settings | None = None) -> BaseStorage:
    """Instantiate the configured storage backend.

    Args:
        settings: Application settings. Defaults to a disk backend with
            default location and size.

    Returns:
        Configured BaseStorage implementation. No connection is opened here.
    """
    if settings is None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
    backend = settings.cache_backend

    if backend == "disk":
        from artifactcache.cache.disk_store import DiskStorage
        return DiskStorage(
            root=settings.cache_dir, max_size=settings.cache_max_size_bytes
        )

    if backend == "mongodb":
        from artifactcache.cache.mongodb_store import MongoDBStorage
        if not settings.cache_mongo_url:
            raise ValueError(
                "CACHE_MONGO_URL must be set when CACHE_BACKEND=mongodb"
            )
        return MongoDBStorage(
            url=settings.cache_mongo_url,
            database_name=settings.cache_mongo_database,
            collection_name=settings.cache_mongo_collection,
        )

    if backend == "redis":
        from artifactcache.cache.redis_store import RedisStorage
        if not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisStorage(
            url=settings.cache_redis_url, key_prefix=settings.cache_redis_prefix
        )

    raise ValueError(f"Unsupported cache backend: {backend!r}")
