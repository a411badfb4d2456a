"""
House Cup — Week Window.

Calculates challenge date boundaries from the household's timezone and
week start day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from src.core.day_key import (
    DayKey,
    add_days,
    day_keys_in_range,
    today_key,
    validate_weekday,
    weekday_of,
)

logger = logging.getLogger(__name__)


@dataclass
class WeekWindow:
    """A 7-day challenge window, inclusive on both ends."""

    start_day_key: DayKey
    end_day_key: DayKey
    day_keys: list[DayKey] = field(default_factory=list)


def week_window_containing(day_key: DayKey, week_start_day: int) -> WeekWindow:
    """Return the window that contains day_key and begins on week_start_day.

    Walks back from day_key to the nearest week_start_day (zero days when
    day_key already falls on it).
    """
    validate_weekday(week_start_day)
    days_back = (weekday_of(day_key) - week_start_day) % 7
    start = add_days(day_key, -days_back)
    end = add_days(start, 6)
    return WeekWindow(
        start_day_key=start,
        end_day_key=end,
        day_keys=day_keys_in_range(start, end),
    )


def current_week_window(
    timezone: str, week_start_day: int, now: datetime | None = None,
) -> WeekWindow:
    """Return the window containing today in the household's timezone."""
    today = today_key(timezone, now)
    window = week_window_containing(today, week_start_day)
    logger.debug(
        "Week window for %s (today %s, start day %d): %s..%s",
        timezone, today, week_start_day, window.start_day_key, window.end_day_key,
    )
    return window


def next_week_window(
    timezone: str, week_start_day: int, now: datetime | None = None,
) -> WeekWindow:
    current = current_week_window(timezone, week_start_day, now)
    return week_window_containing(add_days(current.end_day_key, 1), week_start_day)


def previous_week_window(
    timezone: str, week_start_day: int, now: datetime | None = None,
) -> WeekWindow:
    current = current_week_window(timezone, week_start_day, now)
    return week_window_containing(add_days(current.start_day_key, -1), week_start_day)


def is_in_current_week(
    day_key: DayKey, timezone: str, week_start_day: int, now: datetime | None = None,
) -> bool:
    current = current_week_window(timezone, week_start_day, now)
    return current.start_day_key <= day_key <= current.end_day_key
