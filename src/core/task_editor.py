"""
House Cup — Task Editor.

Edit, detach and delete single task instances without corrupting the
template they came from.

Every edit carries a scope chosen by the user:

  TODAY:  touch only this instance. A template-linked instance is detached
          first, and its (template, day) slot gets a skip record so seeding
          never refills it.
  FUTURE: touch the template and its unscored instances. Any instance on
          which someone has already scored is history and is left alone.

One-off instances (no template) are always edited in place, whatever the
scope. Points never propagate.

All functions return an EditResult delta and never mutate their inputs.
An unknown task or template id yields an empty result instead of raising:
ids can vanish between user intent and execution (another device deleted
the task), and a stale reference must not crash the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from src.core.day_key import DayKey, validate_weekday
from src.data.models import (
    RecurringTemplate,
    SkipRecord,
    TaskInstance,
    clamp_points,
    has_points,
    now_iso,
)

logger = logging.getLogger(__name__)


class EditScope(Enum):
    TODAY = "today"
    FUTURE = "future"


@dataclass
class EditResult:
    """State delta produced by an edit. The caller applies and persists it."""

    updated_tasks: list[TaskInstance] = field(default_factory=list)
    deleted_task_ids: list[str] = field(default_factory=list)
    new_skip_records: list[SkipRecord] = field(default_factory=list)
    template: RecurringTemplate | None = None   # updated template, if any
    deleted_template_id: str | None = None

    @property
    def is_noop(self) -> bool:
        return not (
            self.updated_tasks
            or self.deleted_task_ids
            or self.new_skip_records
            or self.template is not None
            or self.deleted_template_id is not None
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _find_task(tasks: list[TaskInstance], task_id: str) -> TaskInstance | None:
    for task in tasks:
        if task.id == task_id:
            return task
    logger.warning("Task %s not found; edit ignored", task_id)
    return None


def _find_template(
    templates: list[RecurringTemplate], template_id: str,
) -> RecurringTemplate | None:
    for template in templates:
        if template.id == template_id:
            return template
    logger.warning("Template %s not found; edit ignored", template_id)
    return None


def _unique_skips(
    candidates: list[SkipRecord], existing: list[SkipRecord],
) -> list[SkipRecord]:
    """Drop candidates already recorded (or repeated within candidates)."""
    seen = set(existing)
    fresh: list[SkipRecord] = []
    for sr in candidates:
        if sr not in seen:
            seen.add(sr)
            fresh.append(sr)
    return fresh


# ---------------------------------------------------------------------------
# Detach / delete primitives
# ---------------------------------------------------------------------------


def detach_instance(task: TaskInstance) -> tuple[TaskInstance, SkipRecord | None]:
    """Turn a template-linked instance into a standalone one-off.

    Points, name and history are kept; only template_id becomes None. The
    returned skip record is keyed by the *template's* id: seeding matches
    (template_id, day_key), so without it the now-vacant slot would be
    reseeded next to the detached task.

    One-off instances come back unchanged with no skip record.
    """
    if task.template_id is None:
        return task, None
    detached = replace(task, template_id=None, updated_at=now_iso())
    return detached, SkipRecord(task.template_id, task.day_key)


def delete_for_template_slot(task: TaskInstance) -> SkipRecord | None:
    """Skip record to write when deleting `task`; None for one-offs."""
    if task.template_id is None:
        return None
    return SkipRecord(task.template_id, task.day_key)


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------


def set_points(
    tasks: list[TaskInstance],
    task_id: str,
    competitor_id: str,
    points: int,
) -> EditResult:
    """Record a competitor's points on one instance, clamped to [0, 3].

    This is the write boundary for point values; scoring trusts what is
    stored here.
    """
    task = _find_task(tasks, task_id)
    if task is None:
        return EditResult()

    new_points = {**task.points, competitor_id: clamp_points(points)}
    updated = replace(task, points=new_points, updated_at=now_iso())
    logger.debug("Task %s: %s -> %d points", task_id, competitor_id, new_points[competitor_id])
    return EditResult(updated_tasks=[updated])


def rename_task(
    tasks: list[TaskInstance],
    templates: list[RecurringTemplate],
    task_id: str,
    new_name: str,
    scope: EditScope,
    skip_records: list[SkipRecord] | None = None,
) -> EditResult:
    """Rename an instance, or its template and unscored siblings.

    TODAY: detach the instance and rename only it.
    FUTURE: rename the template, this instance, and every other instance
    of the template with no points yet. Scored instances keep their name.
    """
    task = _find_task(tasks, task_id)
    if task is None:
        return EditResult()

    now = now_iso()

    if task.template_id is None:
        return EditResult(updated_tasks=[replace(task, name=new_name, updated_at=now)])

    if scope is EditScope.TODAY:
        detached, skip = detach_instance(task)
        return EditResult(
            updated_tasks=[replace(detached, name=new_name, updated_at=now)],
            new_skip_records=_unique_skips([skip], skip_records or []),
        )

    template = _find_template(templates, task.template_id)
    if template is None:
        return EditResult()

    result = EditResult(
        template=replace(template, name=new_name, updated_at=now),
    )
    for other in tasks:
        if other.template_id != template.id:
            continue
        if other.id != task.id and has_points(other):
            continue
        result.updated_tasks.append(
            replace(other, name=new_name, original_name=new_name, updated_at=now)
        )

    logger.debug(
        "Template %s renamed to %r; %d instances follow",
        template.id, new_name, len(result.updated_tasks),
    )
    return result


def reschedule_template(
    templates: list[RecurringTemplate],
    template_id: str,
    repeat_days: list[int] | tuple[int, ...],
) -> EditResult:
    """Change a template's repeat days.

    Only the template changes; materialized instances are never moved or
    removed as a side effect.
    """
    days = tuple(sorted({validate_weekday(d) for d in repeat_days}))
    template = _find_template(templates, template_id)
    if template is None:
        return EditResult()
    return EditResult(
        template=replace(template, repeat_days=days, updated_at=now_iso()),
    )


def delete_task(
    tasks: list[TaskInstance],
    task_id: str,
    scope: EditScope,
    skip_records: list[SkipRecord] | None = None,
) -> EditResult:
    """Delete an instance, or it and the template's unscored future.

    TODAY: delete only this instance.
    FUTURE: also delete every other instance of the template on or after
    this day that has no points. Scored instances are preserved.

    Each deleted template-linked slot gets a skip record.
    """
    task = _find_task(tasks, task_id)
    if task is None:
        return EditResult()

    doomed = [task]
    if scope is EditScope.FUTURE and task.template_id is not None:
        doomed.extend(
            other for other in tasks
            if other.id != task.id
            and other.template_id == task.template_id
            and other.day_key >= task.day_key
            and not has_points(other)
        )

    skips = [sr for sr in map(delete_for_template_slot, doomed) if sr is not None]
    return EditResult(
        deleted_task_ids=[t.id for t in doomed],
        new_skip_records=_unique_skips(skips, skip_records or []),
    )


def link_task_to_template(
    tasks: list[TaskInstance], task_id: str, template_id: str,
) -> EditResult:
    """Link an existing task (e.g. a one-off being made recurring).

    The linked task occupies its (template, day) slot, so seeding will not
    create a second copy on that day.
    """
    task = _find_task(tasks, task_id)
    if task is None:
        return EditResult()
    linked = replace(
        task, template_id=template_id, original_name=task.name, updated_at=now_iso(),
    )
    return EditResult(updated_tasks=[linked])


def retire_template(
    tasks: list[TaskInstance],
    templates: list[RecurringTemplate],
    template_id: str,
    week_day_keys: list[DayKey],
    skip_records: list[SkipRecord] | None = None,
) -> EditResult:
    """Remove a template without rewriting history.

    Within the current week, unscored instances are deleted and scored ones
    are detached into one-offs. Instances after the week are deleted.
    Instances before the week are untouched.
    """
    template = _find_template(templates, template_id)
    if template is None:
        return EditResult()

    week = set(week_day_keys)
    week_end = max(week_day_keys) if week_day_keys else ""
    result = EditResult(deleted_template_id=template_id)
    skips: list[SkipRecord] = []

    for task in tasks:
        if task.template_id != template_id:
            continue
        if task.day_key in week and has_points(task):
            detached, skip = detach_instance(task)
            result.updated_tasks.append(detached)
            skips.append(skip)
        elif task.day_key in week or (week_end and task.day_key > week_end):
            result.deleted_task_ids.append(task.id)
            skips.append(SkipRecord(template_id, task.day_key))

    result.new_skip_records = _unique_skips(skips, skip_records or [])
    logger.debug(
        "Retired template %s: %d deleted, %d detached",
        template_id, len(result.deleted_task_ids), len(result.updated_tasks),
    )
    return result
