# src/cache/entry.py — v1
"""Pending cache writes and archived cache reads.

A cache entry is a zip archive of named build outputs plus the captured
stdout/stderr of the compilation. Backends never look inside it: they only
store the bytes produced by ``PendingWrite.finish()``.
"""

from __future__ import annotations

import inspect
import io
import zipfile
import zlib
from typing import BinaryIO, Protocol, runtime_checkable

from artifactcache.cache.errors import DecodeError, EncodeError

_STDOUT = "stdout"
_STDERR = "stderr"


@runtime_checkable
class PendingWrite(Protocol):
    """Payload that is materialized exactly once when a backend stores it."""

    def finish(self) -> bytes: ...


async def finish_entry(entry: PendingWrite) -> bytes:
    """Finalize a pending write, awaiting it if ``finish`` is a coroutine.

    Raises:
        EncodeError: If finalization fails or yields something other than bytes.
    """
    try:
        payload = entry.finish()
        if inspect.isawaitable(payload):
            payload = await payload
    except EncodeError:
        raise
    except Exception as e:
        raise EncodeError("failed to finalize cache entry") from e
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise EncodeError(
            f"cache entry finalized to {type(payload).__name__}, expected bytes"
        )
    return bytes(payload)


class RawWrite:
    """Pre-encoded payload."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)

    def finish(self) -> bytes:
        return self._data


class CacheWrite:
    """Builds a compressed archive of named objects."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self._buffer = io.BytesIO()
        self._zip: zipfile.ZipFile | None = zipfile.ZipFile(
            self._buffer, mode="w", compression=compression
        )

    def put_object(self, name: str, data: bytes) -> None:
        """Add a named object to the archive."""
        if self._zip is None:
            raise EncodeError(f"cannot add {name!r}: entry already finished")
        self._zip.writestr(name, data)

    def put_stdout(self, data: bytes) -> None:
        if data:
            self.put_object(_STDOUT, data)

    def put_stderr(self, data: bytes) -> None:
        if data:
            self.put_object(_STDERR, data)

    def finish(self) -> bytes:
        """Close the archive and return its bytes. Can only be called once."""
        if self._zip is None:
            raise EncodeError("cache entry already finished")
        self._zip.close()
        self._zip = None
        return self._buffer.getvalue()


class CacheRead:
    """Read-only view over an archived cache entry."""

    def __init__(self, source: BinaryIO | bytes) -> None:
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        try:
            self._zip = zipfile.ZipFile(source, mode="r")
            bad_member = self._zip.testzip()
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            zlib.error,
            EOFError,
            ValueError,
        ) as e:
            raise DecodeError("cache entry is not a valid archive") from e
        if bad_member is not None:
            raise DecodeError(f"cache entry member {bad_member!r} is corrupted")

    def names(self) -> list[str]:
        """Object names stored in the entry, stdout/stderr excluded."""
        return [
            n for n in self._zip.namelist() if n not in (_STDOUT, _STDERR)
        ]

    def get_object(self, name: str) -> bytes:
        """Return a stored object.

        Raises:
            KeyError: If the entry does not contain ``name``.
        """
        return self._zip.read(name)

    def get_stdout(self) -> bytes:
        return self._get_optional(_STDOUT)

    def get_stderr(self) -> bytes:
        return self._get_optional(_STDERR)

    def _get_optional(self, name: str) -> bytes:
        try:
            return self._zip.read(name)
        except KeyError:
            return b""
