"""
Date/time helpers — framework-agnostic.

All "now" comparisons in the service use timezone-aware UTC wall-clock time.
MongoDB hands back naive datetimes unless the client is tz-aware, so every
stored timestamp passes through ``ensure_utc`` before arithmetic.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def whole_minutes_between(earlier: datetime, later: datetime) -> int:
    """Return the number of whole minutes elapsed from *earlier* to *later*.

    Partial minutes are floored, so 5m59s counts as 5.
    """
    delta = ensure_utc(later) - ensure_utc(earlier)
    return int(delta.total_seconds() // 60)


def combine_date_and_time(day: str, clock_time: str) -> Optional[datetime]:
    """Build a UTC datetime from ``YYYY-MM-DD`` and ``HH:MM`` strings.

    Returns:
        The combined datetime, or ``None`` if either part cannot be parsed.
    """
    try:
        parsed_day = date.fromisoformat(day)
        parsed_time = time.fromisoformat(clock_time)
    except (TypeError, ValueError):
        return None
    return datetime.combine(parsed_day, parsed_time, tzinfo=timezone.utc)
