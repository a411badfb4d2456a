"""
House Cup — Day Keys.

All per-day logic uses a day key: a "YYYY-MM-DD" string in the household's
timezone. Once an instant has been resolved to a day key, nothing downstream
reasons about time-of-day or zones again.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DayKey = str

_DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DAY_LABELS = ["S", "M", "T", "W", "T", "F", "S"]


class CalendarValidationError(ValueError):
    """Raised on a malformed day key, weekday index or timezone name."""


def _zone(timezone: str) -> ZoneInfo:
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise CalendarValidationError(f"Unknown timezone: {timezone!r}") from exc


def validate_weekday(weekday: int) -> int:
    """Return the weekday index unchanged, or raise if it is not 0..6."""
    if isinstance(weekday, bool) or not isinstance(weekday, int) or not 0 <= weekday <= 6:
        raise CalendarValidationError(f"Weekday must be an integer 0-6, got {weekday!r}")
    return weekday


def parse_day_key(day_key: DayKey) -> date:
    """Parse a day key into a date.

    Raises CalendarValidationError on wrong format or out-of-range parts
    (e.g. "2026-02-30").
    """
    if not isinstance(day_key, str) or not _DAY_KEY_RE.match(day_key):
        raise CalendarValidationError(f"Day key must be YYYY-MM-DD, got {day_key!r}")
    try:
        return date.fromisoformat(day_key)
    except ValueError as exc:
        raise CalendarValidationError(f"Invalid day key {day_key!r}: {exc}") from exc


def format_day_key(moment: datetime, timezone: str) -> DayKey:
    """Resolve an instant to the day key it falls on in the given timezone.

    Naive datetimes are treated as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt_timezone.utc)
    return moment.astimezone(_zone(timezone)).date().isoformat()


def today_key(timezone: str, now: datetime | None = None) -> DayKey:
    """Return today's day key in the given timezone.

    Two households in different zones can legitimately have different
    "today" values at the same instant.
    """
    if now is None:
        now = datetime.now(dt_timezone.utc)
    return format_day_key(now, timezone)


def weekday_of(day_key: DayKey) -> int:
    """Day of week for a day key: 0 = Sunday ... 6 = Saturday."""
    return (parse_day_key(day_key).weekday() + 1) % 7


def add_days(day_key: DayKey, days: int) -> DayKey:
    return (parse_day_key(day_key) + timedelta(days=days)).isoformat()


def days_between(start_day_key: DayKey, end_day_key: DayKey) -> int:
    """Signed number of days from start to end."""
    return (parse_day_key(end_day_key) - parse_day_key(start_day_key)).days


def is_day_key_in_range(
    day_key: DayKey, start_day_key: DayKey, end_day_key: DayKey,
) -> bool:
    """Inclusive range check. Canonical day keys sort lexicographically."""
    return start_day_key <= day_key <= end_day_key


def day_keys_in_range(start_day_key: DayKey, end_day_key: DayKey) -> list[DayKey]:
    """All day keys from start to end inclusive (empty if end < start)."""
    start = parse_day_key(start_day_key)
    span = (parse_day_key(end_day_key) - start).days
    return [(start + timedelta(days=i)).isoformat() for i in range(span + 1)]


def day_label(day_key: DayKey) -> str:
    """Single-letter weekday label (S, M, T, W, T, F, S)."""
    return _DAY_LABELS[weekday_of(day_key)]


def format_day_key_range(start_day_key: DayKey, end_day_key: DayKey) -> str:
    """Human-readable range, e.g. "Jan 24 - Jan 30"."""
    start = parse_day_key(start_day_key)
    end = parse_day_key(end_day_key)
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}"
