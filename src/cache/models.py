# src/cache/models.py — v2
"""Cache domain models: lookup outcomes, stored record shape, backend config."""

from __future__ import annotations

import io
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class CacheHit(BaseModel):
    """Lookup found a record; reader is positioned at offset 0 over its payload."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: Literal["hit"] = "hit"
    reader: io.BytesIO

    @classmethod
    def from_bytes(cls, payload: bytes) -> CacheHit:
        return cls(reader=io.BytesIO(payload))

    def read_all(self) -> bytes:
        """Return the full payload regardless of the reader position."""
        return self.reader.getvalue()


class CacheMiss(BaseModel):
    """Lookup found nothing for the key."""

    status: Literal["miss"] = "miss"


CacheLookup = Union[CacheHit, CacheMiss]


class MongoCacheRecord(BaseModel):
    """Document stored per cache entry: ``{key, cache}``.

    ``cache`` holds the opaque payload; bson.Binary with the generic subtype
    decodes to plain ``bytes`` on read. Unknown fields (``_id``) are ignored.
    """

    model_config = ConfigDict(extra="ignore", strict=True)

    key: str
    cache: bytes


class MongoConfig(BaseModel):
    """Connection coordinates for the MongoDB backend."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1)
    database_name: str = Field(min_length=1)
    collection_name: str = Field(min_length=1)
