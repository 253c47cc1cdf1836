"""Time utility helpers."""

from __future__ import annotations

import math
from datetime import UTC, datetime

SECONDS_PER_DAY = 24 * 60 * 60


class NaiveTimestampError(ValueError):
    """Raised when a timestamp without a UTC offset is not acceptable."""


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def parse_timestamp(value: str | datetime | None, assume_utc: bool = True) -> datetime | None:
    """Parse an ISO timestamp into an aware datetime.

    Naive values are read as UTC, or rejected with NaiveTimestampError when
    ``assume_utc`` is False. Empty input returns None; malformed strings raise
    ValueError.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        if not assume_utc:
            raise NaiveTimestampError(f"Timestamp {value!s} has no UTC offset")
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def require_timestamp(value: str | datetime | None) -> datetime:
    """Parse a timestamp that must be present."""
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError("Missing required timestamp value")
    return parsed


def days_between(start: datetime, end: datetime) -> float:
    """Return the fractional number of days from ``start`` to ``end``."""
    return (end - start).total_seconds() / SECONDS_PER_DAY


def days_left(end_date: str | datetime, now: datetime | None = None) -> int:
    """Whole days remaining until ``end_date``, rounded up."""
    end = require_timestamp(end_date)
    return math.ceil(days_between(now or now_utc(), end))


def format_relative_time(value: str | datetime | None, now: datetime | None = None) -> str:
    """Format a past timestamp as "Today", "Yesterday", "3 days ago", ..."""
    moment = parse_timestamp(value)
    if moment is None:
        return ""

    elapsed_days = math.floor(days_between(moment, now or now_utc()))
    if elapsed_days <= 0:
        return "Today"
    if elapsed_days == 1:
        return "Yesterday"
    if elapsed_days < 7:
        return f"{elapsed_days} days ago"
    if elapsed_days < 30:
        return f"{elapsed_days // 7} weeks ago"
    return f"{moment:%B} {moment.day}, {moment.year}"
