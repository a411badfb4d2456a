"""House Cup scoring: point totals per competitor.

Totals are plain sums of stored values. Point values are clamped where they
are written (task_editor.set_points), not re-clamped here.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.day_key import DayKey
from src.data.models import MAX_TASK_POINTS, TaskInstance, points_for


@dataclass
class CompetitorScore:
    competitor_id: str
    total: int


@dataclass
class ChallengeScores:
    """Totals plus the winner determination for a finished week."""

    scores: list[CompetitorScore] = field(default_factory=list)
    winner_id: str | None = None
    is_tie: bool = False


def competitor_total(instances: list[TaskInstance], competitor_id: str) -> int:
    return sum(points_for(inst, competitor_id) for inst in instances)


def score_totals(
    instances: list[TaskInstance], competitor_ids: list[str],
) -> dict[str, int]:
    """Sum each competitor's points across the given instances."""
    return {cid: competitor_total(instances, cid) for cid in competitor_ids}


def challenge_scores(
    instances: list[TaskInstance], competitor_ids: list[str],
) -> ChallengeScores:
    """Totals for every competitor, with the winner or a tie.

    The highest total wins; equal top totals are a tie. A lone competitor
    wins by default, and with no competitors there is no winner.
    """
    scores = [
        CompetitorScore(competitor_id=cid, total=competitor_total(instances, cid))
        for cid in competitor_ids
    ]
    ranked = sorted(scores, key=lambda s: s.total, reverse=True)

    winner_id = None
    is_tie = False
    if len(ranked) == 1:
        winner_id = ranked[0].competitor_id
    elif len(ranked) >= 2:
        if ranked[0].total > ranked[1].total:
            winner_id = ranked[0].competitor_id
        else:
            is_tie = True

    return ChallengeScores(scores=scores, winner_id=winner_id, is_tie=is_tie)


def daily_scores(instances: list[TaskInstance], competitor_id: str) -> dict[DayKey, int]:
    """Points per day key for one competitor."""
    totals: dict[DayKey, int] = {}
    for inst in instances:
        totals[inst.day_key] = totals.get(inst.day_key, 0) + points_for(inst, competitor_id)
    return totals


def max_possible_points(task_count: int) -> int:
    return task_count * MAX_TASK_POINTS


def day_completion(instances: list[TaskInstance], competitor_id: str) -> int:
    """Percent (0-100) of the available points a competitor earned."""
    if not instances:
        return 0
    earned = competitor_total(instances, competitor_id)
    return round(earned / max_possible_points(len(instances)) * 100)
