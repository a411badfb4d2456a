"""
House Cup — Seeding.

Materializes TaskInstances from RecurringTemplates for a set of days.

Seeding is idempotent: for a fixed (templates, instances, skip records,
days) it may be called any number of times (app start, template added, day
boundary crossed) and never creates a (template, day) pair twice, nor one
that has a skip record. The guarantee lives entirely in seed_tasks; callers
do no deduplication of their own.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from src.core.day_key import DayKey, weekday_of
from src.data.models import (
    RecurringTemplate,
    SkipRecord,
    TaskInstance,
    has_local_edits,
    new_id,
    now_iso,
    should_repeat_on_day,
    skip_key,
)

logger = logging.getLogger(__name__)


@dataclass
class SeedResult:
    """Delta produced by a seeding run. Callers append `created`."""

    created: list[TaskInstance] = field(default_factory=list)
    skipped: int = 0   # slots suppressed by an existing instance or skip record


@dataclass
class ReconcileResult:
    """Changes to apply after a template's repeat days shrink."""

    removed: list[TaskInstance] = field(default_factory=list)
    detached: list[TaskInstance] = field(default_factory=list)
    new_skip_records: list[SkipRecord] = field(default_factory=list)


def seed_tasks(
    day_keys: list[DayKey],
    templates: list[RecurringTemplate],
    existing_instances: list[TaskInstance],
    skip_records: list[SkipRecord],
    challenge_id: str,
) -> SeedResult:
    """Create the instances missing for `day_keys`.

    For each day, for each template repeating on that weekday:
      1. a skip record for (template, day) exists -> skip
      2. an instance for (template, day) exists   -> skip
      3. otherwise create one, named after the template, with no points

    Only the newly created instances are returned.
    """
    skipped_slots = {skip_key(sr.template_id, sr.day_key) for sr in skip_records}
    materialized = {
        skip_key(inst.template_id, inst.day_key)
        for inst in existing_instances
        if inst.template_id is not None
    }

    # Seeded tasks go after whatever the user already has on that day
    max_sort_by_day: dict[DayKey, int] = {}
    for inst in existing_instances:
        current = max_sort_by_day.get(inst.day_key, -1)
        max_sort_by_day[inst.day_key] = max(current, inst.sort_order)

    now = now_iso()
    result = SeedResult()

    for day_key in day_keys:
        weekday = weekday_of(day_key)
        for template in templates:
            if not should_repeat_on_day(template, weekday):
                continue

            slot = skip_key(template.id, day_key)
            if slot in skipped_slots or slot in materialized:
                result.skipped += 1
                continue

            sort_order = max_sort_by_day.get(day_key, -1) + 1
            max_sort_by_day[day_key] = sort_order

            result.created.append(TaskInstance(
                id=new_id(),
                challenge_id=challenge_id,
                day_key=day_key,
                name=template.name,
                template_id=template.id,
                original_name=template.name,
                points={},
                created_at=now,
                updated_at=now,
                sort_order=sort_order,
            ))
            # Also guards against the same template listed twice
            materialized.add(slot)

    logger.debug(
        "Seeded challenge %s over %d days: %d created, %d skipped",
        challenge_id, len(day_keys), len(result.created), result.skipped,
    )
    return result


def reconcile_template_change(
    template: RecurringTemplate,
    old_repeat_days: list[int] | tuple[int, ...],
    new_repeat_days: list[int] | tuple[int, ...],
    instances: list[TaskInstance],
) -> ReconcileResult:
    """Work out what to do with instances whose weekday left the pattern.

    Untouched instances are listed for removal. Instances with local edits
    (points or a rename) are detached and get a skip record so they are not
    reseeded next to their detached copy.

    Opt-in only: a plain reschedule never moves or removes instances.
    """
    result = ReconcileResult()
    removed_days = set(old_repeat_days) - set(new_repeat_days)
    if not removed_days:
        return result

    now = now_iso()
    for inst in instances:
        if inst.template_id != template.id:
            continue
        if weekday_of(inst.day_key) not in removed_days:
            continue

        if has_local_edits(inst):
            result.detached.append(replace(inst, template_id=None, updated_at=now))
            result.new_skip_records.append(SkipRecord(template.id, inst.day_key))
        else:
            result.removed.append(inst)

    logger.debug(
        "Reconciled template %s: %d removed, %d detached",
        template.id, len(result.removed), len(result.detached),
    )
    return result
