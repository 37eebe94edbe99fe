"""Unix timestamp conversions.

All conversions go through datetime + zoneinfo. Timestamps are whole seconds
since 1970-01-01T00:00:00Z; negative values are dates before the epoch.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


class InvalidTimezoneError(ValueError):
    """The name does not resolve against the IANA timezone database."""

    def __init__(self, name: str):
        super().__init__(f"Invalid timezone: {name}")
        self.name = name


class InvalidTimestampError(ValueError):
    """The timestamp falls outside the representable calendar range."""

    def __init__(self, timestamp: int):
        super().__init__(f"Invalid timestamp: {timestamp}")
        self.timestamp = timestamp


def resolve_timezone(name: str) -> ZoneInfo:
    """Look up an IANA timezone by name (e.g. 'America/New_York')."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise InvalidTimezoneError(name) from exc


def _from_timestamp(timestamp: int, tz) -> datetime:
    try:
        return datetime.fromtimestamp(timestamp, tz=tz)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidTimestampError(timestamp) from exc


def to_timezone(timestamp: int, name: str) -> str:
    """Render a timestamp in the named timezone.

    Returns e.g. '1969-12-31 19:00:00 EST (-0500)' for (0, 'America/New_York').
    """
    dt = _from_timestamp(timestamp, resolve_timezone(name))
    return f"{dt.strftime(DISPLAY_FORMAT)} {dt.tzname()} ({dt.strftime('%z')})"


def to_readable(timestamp: int) -> str:
    """Render a timestamp in the process's local timezone as YYYY-MM-DD HH:MM:SS."""
    dt = _from_timestamp(timestamp, timezone.utc)
    try:
        local = dt.astimezone()
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidTimestampError(timestamp) from exc
    return local.strftime(DISPLAY_FORMAT)


def current_timestamp() -> int:
    """Current wall-clock time in whole seconds since the epoch."""
    return int(time.time())
