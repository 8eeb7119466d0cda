"""Utility functions for time handling.

All timestamps should be UTC and timezone-aware. The cloud API exchanges
them as ISO-8601 strings with millisecond precision and a "Z" suffix.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime; naive values are assumed UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_api_timestamp(dt: datetime) -> str:
    """Format a datetime the way the cloud sensor API expects (``...Z``)."""
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Args:
        value: String or datetime to coerce

    Returns:
        Datetime in timezone.utc or None if invalid
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    return ensure_utc(parsed)
