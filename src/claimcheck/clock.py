"""Time source and expiry metadata encoding.

The `_ValidUntilUtc` value is written as ``yyyy-MM-dd HH:mm:ss.ffffff Z``:
fixed width, lexically sortable, always UTC, microsecond precision.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

Clock = Callable[[], datetime]

VALID_UNTIL_FORMAT = "%Y-%m-%d %H:%M:%S.%f Z"

# Sentinel for "never expires"
INFINITE_TTL = timedelta.max

_MAX_UTC = datetime.max.replace(tzinfo=UTC)


def utc_now() -> datetime:
    """Return the current wall-clock time in UTC."""
    return datetime.now(UTC)


def fixed_clock(moment: datetime) -> Clock:
    """Return a clock that always reports ``moment``."""
    moment = _as_utc(moment)
    return lambda: moment


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to already be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def is_infinite(ttl: timedelta | None) -> bool:
    return ttl is None or ttl >= INFINITE_TTL


def valid_until(now: datetime, ttl: timedelta) -> datetime:
    """Compute the expiry moment, saturating at the largest representable time."""
    try:
        return _as_utc(now) + ttl
    except OverflowError:
        return _MAX_UTC


def format_valid_until(moment: datetime) -> str:
    """Format an expiry moment for the `_ValidUntilUtc` metadata entry."""
    return _as_utc(moment).strftime(VALID_UNTIL_FORMAT)


def parse_valid_until(value: str) -> datetime:
    """Parse a `_ValidUntilUtc` metadata value back into an aware datetime."""
    return datetime.strptime(value, VALID_UNTIL_FORMAT).replace(tzinfo=UTC)
