# src/logging/context.py — v2
"""Contextual logging support: attach backend, operation and cache key to records."""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

# Set per storage operation; asyncio tasks each get their own copy.
_backend: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "backend", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_cache_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_key", default=None
)


@dataclass(frozen=True)
class LogContext:
    """Immutable snapshot of current logging context."""

    backend: str | None = None
    operation: str | None = None
    cache_key: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        backend=_backend.get(),
        operation=_operation.get(),
        cache_key=_cache_key.get(),
    )


@contextmanager
def operation_context(
    backend: str, operation: str, cache_key: str | None = None
) -> Iterator[LogContext]:
    """Scope log context to one storage operation, restoring the previous one on exit."""
    tokens = (
        _backend.set(backend),
        _operation.set(operation),
        _cache_key.set(cache_key),
    )
    try:
        yield get_context()
    finally:
        _cache_key.reset(tokens[2])
        _operation.reset(tokens[1])
        _backend.reset(tokens[0])


def clear_context() -> None:
    """Reset all context variables."""
    _backend.set(None)
    _operation.set(None)
    _cache_key.set(None)
