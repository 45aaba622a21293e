# src/config/units.py — v1
"""Size strings used in configuration ("10MB", "2 GB", "4096")."""

from __future__ import annotations

import re

_MULTIPLIERS = {
    "": 1,
    "B": 1,
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
}

_SIZE_RE = re.compile(r"^(\d+)\s*(B|KB|MB|GB|TB)?$", re.IGNORECASE)


def parse_size(size_str: str) -> int:
    """Parse a size string into bytes.

    Supported suffixes: B, KB, MB, GB, TB (case-insensitive, binary
    multiples). A bare number is a byte count.
    """
    match = _SIZE_RE.match(size_str.strip())
    if not match:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    value = int(match.group(1))
    unit = (match.group(2) or "").upper()
    return value * _MULTIPLIERS[unit]
