"""Shared test fixtures and configuration.

Sets up fake environment variables before any src imports, and provides
common fixtures: a household, a Mon/Wed/Fri template and task builders.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("HOUSEHOLD_ID", "household-test")
os.environ.setdefault("HOUSEHOLD_TIMEZONE", "America/New_York")
os.environ.setdefault("WEEK_START_DAY", "0")
os.environ.setdefault("COMPETITOR_IDS", "A,B")

import pytest
from datetime import datetime, timezone

# Sun 2026-02-01 .. Sat 2026-02-07
WEEK = [
    "2026-02-01",
    "2026-02-02",
    "2026-02-03",
    "2026-02-04",
    "2026-02-05",
    "2026-02-06",
    "2026-02-07",
]

# Thursday 2026-02-05, 15:00 in New York
THURSDAY_NOON_UTC = datetime(2026, 2, 5, 20, 0, tzinfo=timezone.utc)


def make_task(
    task_id,
    day_key,
    name="Dishes",
    template_id="T1",
    points=None,
    challenge_id="challenge-1",
):
    """Build a TaskInstance with sensible defaults."""
    from src.data.models import TaskInstance

    return TaskInstance(
        id=task_id,
        challenge_id=challenge_id,
        day_key=day_key,
        name=name,
        template_id=template_id,
        original_name=name if template_id else None,
        points=dict(points or {}),
    )


@pytest.fixture
def week():
    return list(WEEK)


@pytest.fixture
def dishes_template():
    """T1: "Dishes" on Mon/Wed/Fri."""
    from src.data.models import RecurringTemplate

    return RecurringTemplate(
        id="T1", household_id="household-test", name="Dishes", repeat_days=(1, 3, 5),
    )


@pytest.fixture
def household():
    from src.data.models import Competitor, Household

    return Household(
        id="household-test",
        competitors=[Competitor(id="A", name="Pri"), Competitor(id="B", name="Matt")],
        timezone="America/New_York",
        week_start_day=0,
    )


@pytest.fixture
def session(household, dishes_template):
    """A session with an active Sun-start challenge for 2026-02-01..07."""
    from src.core.challenge_session import ChallengeSession

    s = ChallengeSession(household, templates=[dishes_template])
    s.start_challenge(prize="Sleep-in weekend", now=THURSDAY_NOON_UTC)
    return s
