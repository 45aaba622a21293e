# src/cache/errors.py — v1
"""Storage error taxonomy.

Every backend translates driver exceptions into one of these at its boundary,
chaining the original cause. A cache miss is never an error.
"""

from __future__ import annotations


class CacheStorageError(Exception):
    """Base class for all storage backend failures."""

    def __init__(
        self, message: str, backend: str | None = None, key: str | None = None
    ) -> None:
        self.backend = backend
        self.key = key
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.__cause__ is not None:
            return f"{message}: {self.__cause__}"
        return message


class StorageConnectionError(CacheStorageError):
    """Client or transport could not be set up."""


class QueryError(CacheStorageError):
    """Lookup round-trip failed on an established connection."""


class InsertError(CacheStorageError):
    """Insert round-trip failed on an established connection."""


class DecodeError(CacheStorageError):
    """Stored record or payload does not have the expected shape."""


class EncodeError(CacheStorageError):
    """Payload finalization or serialization failed."""
