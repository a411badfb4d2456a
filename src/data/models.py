"""
House Cup — Data Models.

Plain dataclasses for the household, its weekly challenge, recurring
templates, task instances and skip records, plus the pure predicates the
engine uses to reason about them.

Point maps are competitor id -> points. Reads go through points_for(), where
an absent competitor means 0.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from src.core.day_key import DayKey, day_keys_in_range

MIN_TASK_POINTS = 0
MAX_TASK_POINTS = 3

_DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass
class Competitor:
    """A household member competing for the weekly prize."""

    id: str
    name: str
    color: str = ""    # hex, e.g. "#9B7FD1"


@dataclass
class Household:
    """The two competitors plus the settings every date computation uses."""

    id: str
    competitors: list[Competitor] = field(default_factory=list)
    timezone: str = "America/New_York"  # IANA name
    week_start_day: int = 0             # 0 = Sunday ... 6 = Saturday


@dataclass
class Challenge:
    """One 7-day competition window.

    is_completed, winner_id and is_tie are set once the window has elapsed;
    after that the challenge and its tasks are frozen.
    """

    id: str
    household_id: str
    start_day_key: DayKey
    end_day_key: DayKey              # inclusive
    prize: str = ""
    winner_id: str | None = None
    is_tie: bool = False
    is_completed: bool = False
    created_at: str = ""


@dataclass
class RecurringTemplate:
    """A chore that repeats on fixed weekdays.

    An empty repeat_days means "does not repeat yet".
    """

    id: str
    household_id: str
    name: str
    repeat_days: tuple[int, ...] = ()   # 0 = Sunday ... 6 = Saturday
    created_at: str = ""
    updated_at: str = ""


@dataclass
class TaskInstance:
    """One concrete chore occurrence on one day.

    template_id is None for one-off tasks and for instances detached from
    their template.
    """

    id: str
    challenge_id: str
    day_key: DayKey
    name: str
    template_id: str | None = None
    original_name: str | None = None   # name when linked; used to detect renames
    points: dict[str, int] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""
    sort_order: int = 0


@dataclass(frozen=True)
class SkipRecord:
    """Permanent marker: never seed template_id on day_key again."""

    template_id: str
    day_key: DayKey


# ---------------------------------------------------------------------------
# Challenge helpers
# ---------------------------------------------------------------------------


def challenge_day_keys(challenge: Challenge) -> list[DayKey]:
    return day_keys_in_range(challenge.start_day_key, challenge.end_day_key)


# ---------------------------------------------------------------------------
# Template helpers
# ---------------------------------------------------------------------------


def should_repeat_on_day(template: RecurringTemplate, weekday: int) -> bool:
    return weekday in template.repeat_days


def repeat_description(template: RecurringTemplate) -> str:
    """Human-readable repeat pattern, e.g. "Weekdays" or "Mon, Wed, Fri"."""
    days = sorted(set(template.repeat_days))
    if not days:
        return "Does not repeat"
    if len(days) == 7:
        return "Every day"
    if days == [1, 2, 3, 4, 5]:
        return "Weekdays"
    if days == [0, 6]:
        return "Weekends"
    return ", ".join(_DAY_NAMES[d] for d in days)


# ---------------------------------------------------------------------------
# Task instance predicates
# ---------------------------------------------------------------------------


def is_template_linked(instance: TaskInstance) -> bool:
    return instance.template_id is not None


def points_for(instance: TaskInstance, competitor_id: str) -> int:
    """Points a competitor logged on this task; 0 when absent."""
    return instance.points.get(competitor_id, 0)


def has_points(instance: TaskInstance) -> bool:
    """True once anyone has scored on this task (it is historical)."""
    return any(p > 0 for p in instance.points.values())


def was_renamed(instance: TaskInstance) -> bool:
    if instance.template_id is None or instance.original_name is None:
        return False
    return instance.name != instance.original_name


def has_local_edits(instance: TaskInstance) -> bool:
    return has_points(instance) or was_renamed(instance)


def clamp_points(points: int) -> int:
    """Clamp a point value into [MIN_TASK_POINTS, MAX_TASK_POINTS]."""
    return max(MIN_TASK_POINTS, min(MAX_TASK_POINTS, int(points)))


# ---------------------------------------------------------------------------
# Skip record helpers
# ---------------------------------------------------------------------------


def skip_key(template_id: str, day_key: DayKey) -> tuple[str, DayKey]:
    return (template_id, day_key)


def has_skip_record(
    skip_records: list[SkipRecord], template_id: str, day_key: DayKey,
) -> bool:
    return any(
        sr.template_id == template_id and sr.day_key == day_key
        for sr in skip_records
    )


# ---------------------------------------------------------------------------
# Identity and timestamps
# ---------------------------------------------------------------------------


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    """Current UTC instant as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()
