"""
Duration strings for token lifetimes: "15m", "7d", "1h30m", "900" (seconds).
"""
from __future__ import annotations

import logging
import re
from datetime import timedelta

logger = logging.getLogger(__name__)

_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}

_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d)")


def parse_duration(value: str) -> timedelta:
    """Parse a duration string. Raises ValueError when it cannot be parsed."""
    if not isinstance(value, str):
        raise ValueError(f"duration must be a string, got {type(value).__name__}")
    raw = value.strip().lower()
    if not raw:
        raise ValueError("empty duration")
    if raw.isdigit():
        return timedelta(seconds=int(raw))

    total = timedelta()
    pos = 0
    for match in _PART.finditer(raw):
        if match.start() != pos:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    if pos != len(raw):
        raise ValueError(f"invalid duration: {value!r}")
    if total <= timedelta():
        raise ValueError(f"duration must be positive: {value!r}")
    return total


def duration_or_default(value, default: timedelta, name: str = "duration") -> timedelta:
    """parse_duration() that falls back to `default` when `value` is missing or garbled."""
    if value is None or value == "":
        return default
    if isinstance(value, timedelta):
        return value
    try:
        return parse_duration(value)
    except ValueError:
        logger.warning("Could not parse %s=%r, using default %s", name, value, default)
        return default
