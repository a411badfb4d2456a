"""
House Cup — Challenge Session.

The state owner for one household: the active challenge, recurring
templates, task instances and skip records. It calls the pure engine
(seeding, task_editor, scoring), applies each returned delta to its local
state optimistically, and records a persistence effect in an outbox.
flush() later writes the outbox to a ChallengeStorePort.

There is no rollback: if a store write fails the local state keeps the
change and the failure is logged. Conflicting writes from other devices are
resolved by the store (last write wins), not here.

Completed challenges are frozen: seeding and task edits against them are
logged and ignored. Task edits only see the active challenge's tasks, so a
rename or delete in a new week never reaches a finished one.

Shrinking a template's schedule leaves already seeded instances in place.
A caller that wants them gone calls seeding.reconcile_template_change and
feeds its result through the same store writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from src.core import scoring, seeding, task_editor
from src.core.day_key import DayKey, today_key, validate_weekday
from src.core.task_editor import EditResult, EditScope
from src.core.week_window import current_week_window
from src.data.models import (
    Challenge,
    Competitor,
    Household,
    RecurringTemplate,
    SkipRecord,
    TaskInstance,
    challenge_day_keys,
    clamp_points,
    new_id,
    now_iso,
)
from src.ports.store_port import StoreError

if TYPE_CHECKING:
    from src.config import Settings
    from src.ports.store_port import ChallengeStorePort

logger = logging.getLogger(__name__)


class EffectKind(Enum):
    SAVE_CHALLENGE = "save_challenge"
    SAVE_TASK = "save_task"
    DELETE_TASK = "delete_task"
    ADD_SKIP_RECORDS = "add_skip_records"
    SAVE_TEMPLATE = "save_template"
    DELETE_TEMPLATE = "delete_template"


@dataclass
class Effect:
    """A pending store write recorded after a local state change."""

    kind: EffectKind
    payload: object   # Challenge | TaskInstance | list[SkipRecord] | RecurringTemplate | str id


class ChallengeSession:
    """Owns one household's challenge state and its pending store writes."""

    def __init__(
        self,
        household: Household,
        templates: list[RecurringTemplate] | None = None,
        tasks: list[TaskInstance] | None = None,
        skip_records: list[SkipRecord] | None = None,
        challenge: Challenge | None = None,
    ) -> None:
        self.household = household
        self.templates: list[RecurringTemplate] = list(templates or [])
        self.tasks: list[TaskInstance] = list(tasks or [])
        self.skip_records: list[SkipRecord] = list(skip_records or [])
        self.challenge = challenge
        self.selected_day_key: DayKey = today_key(household.timezone)
        self.outbox: list[Effect] = []

    @property
    def competitor_ids(self) -> list[str]:
        return [c.id for c in self.household.competitors]

    # ------------------------------------------------------------------
    # Internal: state application
    # ------------------------------------------------------------------

    def _enqueue(self, kind: EffectKind, payload: object) -> None:
        self.outbox.append(Effect(kind=kind, payload=payload))

    def _apply(self, result: EditResult) -> EditResult:
        """Apply an engine delta locally and queue the matching writes."""
        if result.is_noop:
            return result

        if result.updated_tasks:
            by_id = {t.id: t for t in result.updated_tasks}
            self.tasks = [by_id.get(t.id, t) for t in self.tasks]
            for task in result.updated_tasks:
                self._enqueue(EffectKind.SAVE_TASK, task)

        if result.deleted_task_ids:
            doomed = set(result.deleted_task_ids)
            self.tasks = [t for t in self.tasks if t.id not in doomed]
            for task_id in result.deleted_task_ids:
                self._enqueue(EffectKind.DELETE_TASK, task_id)

        if result.new_skip_records:
            self.skip_records.extend(result.new_skip_records)
            self._enqueue(EffectKind.ADD_SKIP_RECORDS, list(result.new_skip_records))

        if result.template is not None:
            updated = result.template
            self.templates = [updated if t.id == updated.id else t for t in self.templates]
            self._enqueue(EffectKind.SAVE_TEMPLATE, updated)

        if result.deleted_template_id is not None:
            self.templates = [t for t in self.templates if t.id != result.deleted_template_id]
            self._enqueue(EffectKind.DELETE_TEMPLATE, result.deleted_template_id)

        return result

    def _is_active(self, action: str) -> bool:
        if self.challenge is None:
            logger.warning("No active challenge; %s ignored", action)
            return False
        if self.challenge.is_completed:
            logger.warning(
                "Challenge %s is completed and frozen; %s ignored",
                self.challenge.id, action,
            )
            return False
        return True

    def _challenge_tasks(self) -> list[TaskInstance]:
        if self.challenge is None:
            return []
        return [t for t in self.tasks if t.challenge_id == self.challenge.id]

    # ------------------------------------------------------------------
    # Challenge lifecycle
    # ------------------------------------------------------------------

    def start_challenge(
        self, prize: str = "", now: datetime | None = None,
    ) -> Challenge:
        """Create the challenge for the current week and seed it.

        If a challenge is still running it is returned unchanged: a household
        has at most one non-completed challenge.
        """
        if self.challenge is not None and not self.challenge.is_completed:
            return self.challenge

        tz = self.household.timezone
        window = current_week_window(tz, self.household.week_start_day, now)
        self.challenge = Challenge(
            id=new_id(),
            household_id=self.household.id,
            start_day_key=window.start_day_key,
            end_day_key=window.end_day_key,
            prize=prize,
            created_at=now_iso(),
        )
        self.selected_day_key = today_key(tz, now)
        self._enqueue(EffectKind.SAVE_CHALLENGE, self.challenge)
        logger.info(
            "Challenge %s started: %s..%s",
            self.challenge.id, window.start_day_key, window.end_day_key,
        )
        self.seed()
        return self.challenge

    def complete_challenge(self, now: datetime | None = None) -> bool:
        """Close the challenge once its window has elapsed.

        Returns True if the challenge was completed by this call.
        """
        if self.challenge is None or self.challenge.is_completed:
            return False
        today = today_key(self.household.timezone, now)
        if today <= self.challenge.end_day_key:
            return False

        result = scoring.challenge_scores(self._challenge_tasks(), self.competitor_ids)
        self.challenge = replace(
            self.challenge,
            is_completed=True,
            winner_id=result.winner_id,
            is_tie=result.is_tie,
        )
        self._enqueue(EffectKind.SAVE_CHALLENGE, self.challenge)
        logger.info(
            "Challenge %s completed: winner=%s tie=%s",
            self.challenge.id, result.winner_id, result.is_tie,
        )
        return True

    def update_boundaries(self, week_start_day: int, now: datetime | None = None) -> None:
        """Move the active challenge to the window for a new week start day.

        Existing tasks are not moved. Tasks whose day now falls outside the
        window stay attached to the challenge and are only logged.
        """
        validate_weekday(week_start_day)
        self.household = replace(self.household, week_start_day=week_start_day)
        if not self._is_active("boundary update"):
            return

        window = current_week_window(self.household.timezone, week_start_day, now)
        self.challenge = replace(
            self.challenge,
            start_day_key=window.start_day_key,
            end_day_key=window.end_day_key,
        )
        self._enqueue(EffectKind.SAVE_CHALLENGE, self.challenge)

        outside = [
            t for t in self._challenge_tasks()
            if not window.start_day_key <= t.day_key <= window.end_day_key
        ]
        if outside:
            logger.warning(
                "%d tasks fall outside the new window %s..%s",
                len(outside), window.start_day_key, window.end_day_key,
            )

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def seed(self) -> list[TaskInstance]:
        """Materialize missing template instances for the active week."""
        if not self._is_active("seeding"):
            return []
        result = seeding.seed_tasks(
            challenge_day_keys(self.challenge),
            self.templates,
            self.tasks,
            self.skip_records,
            self.challenge.id,
        )
        self.tasks.extend(result.created)
        for task in result.created:
            self._enqueue(EffectKind.SAVE_TASK, task)
        if result.created:
            logger.info("Seeded %d tasks into challenge %s", len(result.created), self.challenge.id)
        return result.created

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def add_task(
        self,
        name: str,
        points: dict[str, int] | None = None,
        template_id: str | None = None,
    ) -> TaskInstance | None:
        """Add a task on the selected day, appended after the day's others."""
        if not self._is_active("add task"):
            return None

        day = self.selected_day_key
        same_day = [t.sort_order for t in self.tasks if t.day_key == day]
        now = now_iso()
        task = TaskInstance(
            id=new_id(),
            challenge_id=self.challenge.id,
            day_key=day,
            name=name,
            template_id=template_id,
            original_name=name if template_id else None,
            points={cid: clamp_points(p) for cid, p in (points or {}).items()},
            created_at=now,
            updated_at=now,
            sort_order=max(same_day, default=-1) + 1,
        )
        self.tasks.append(task)
        self._enqueue(EffectKind.SAVE_TASK, task)
        logger.info("Task added: %r on %s", name, day)
        return task

    def set_points(self, task_id: str, competitor_id: str, points: int) -> EditResult:
        if not self._is_active("points update"):
            return EditResult()
        return self._apply(task_editor.set_points(
            self._challenge_tasks(), task_id, competitor_id, points,
        ))

    def rename_task(self, task_id: str, new_name: str, scope: EditScope) -> EditResult:
        if not self._is_active("rename"):
            return EditResult()
        return self._apply(task_editor.rename_task(
            self._challenge_tasks(), self.templates, task_id, new_name, scope, self.skip_records,
        ))

    def delete_task(self, task_id: str, scope: EditScope = EditScope.TODAY) -> EditResult:
        if not self._is_active("delete"):
            return EditResult()
        return self._apply(task_editor.delete_task(
            self._challenge_tasks(), task_id, scope, self.skip_records,
        ))

    def link_task_to_template(self, task_id: str, template_id: str) -> EditResult:
        if not self._is_active("link"):
            return EditResult()
        return self._apply(task_editor.link_task_to_template(
            self._challenge_tasks(), task_id, template_id,
        ))

    def tasks_for_day(self, day_key: DayKey) -> list[TaskInstance]:
        day_tasks = [t for t in self._challenge_tasks() if t.day_key == day_key]
        return sorted(day_tasks, key=lambda t: t.sort_order)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def add_template(self, name: str, repeat_days: list[int]) -> RecurringTemplate:
        """Create a template and seed it into the active week."""
        days = tuple(sorted({validate_weekday(d) for d in repeat_days}))
        now = now_iso()
        template = RecurringTemplate(
            id=new_id(),
            household_id=self.household.id,
            name=name,
            repeat_days=days,
            created_at=now,
            updated_at=now,
        )
        self.templates.append(template)
        self._enqueue(EffectKind.SAVE_TEMPLATE, template)
        logger.info("Template added: %r on days %s", name, list(days))
        if self.challenge is not None and not self.challenge.is_completed:
            self.seed()
        return template

    def reschedule_template(self, template_id: str, repeat_days: list[int]) -> EditResult:
        """Change a template's days, then seed any newly covered days."""
        result = self._apply(
            task_editor.reschedule_template(self.templates, template_id, repeat_days)
        )
        if not result.is_noop and self.challenge is not None and not self.challenge.is_completed:
            self.seed()
        return result

    def retire_template(self, template_id: str) -> EditResult:
        """Remove a template, keeping every scored instance as a one-off."""
        week = challenge_day_keys(self.challenge) if self.challenge else []
        return self._apply(task_editor.retire_template(
            self.tasks, self.templates, template_id, week, self.skip_records,
        ))

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def scores(self) -> scoring.ChallengeScores:
        return scoring.challenge_scores(self._challenge_tasks(), self.competitor_ids)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def flush(self, store: ChallengeStorePort) -> int:
        """Write queued effects to the store, in order.

        A StoreError is logged and that write dropped. Any other exception
        propagates and leaves the failed effect, and everything after it,
        queued for the next flush. Returns the number written.
        """
        attempted = written = 0
        while self.outbox:
            effect = self.outbox[0]
            try:
                await self._write(store, effect)
                written += 1
            except StoreError as exc:
                logger.error("Failed to sync %s: %s", effect.kind.value, exc)
            self.outbox.pop(0)
            attempted += 1
        if attempted:
            logger.info("Flushed %d/%d store writes", written, attempted)
        return written

    async def _write(self, store: ChallengeStorePort, effect: Effect) -> None:
        hid = self.household.id
        kind = effect.kind
        if kind is EffectKind.SAVE_CHALLENGE:
            await store.save_challenge(hid, effect.payload)
        elif kind is EffectKind.SAVE_TASK:
            await store.save_task(hid, effect.payload)
        elif kind is EffectKind.DELETE_TASK:
            await store.delete_task(hid, effect.payload)
        elif kind is EffectKind.ADD_SKIP_RECORDS:
            await store.add_skip_records(hid, effect.payload)
        elif kind is EffectKind.SAVE_TEMPLATE:
            await store.save_template(hid, effect.payload)
        elif kind is EffectKind.DELETE_TEMPLATE:
            await store.delete_template(hid, effect.payload)
        else:
            raise ValueError(f"Unknown effect kind: {kind!r}")


def create_session(settings: Settings | None = None) -> ChallengeSession:
    """Build a session for the configured household (composition root)."""
    if settings is None:
        from src.config import settings

    household = Household(
        id=settings.HOUSEHOLD_ID,
        competitors=[Competitor(id=cid, name=cid) for cid in settings.COMPETITOR_IDS],
        timezone=settings.HOUSEHOLD_TIMEZONE,
        week_start_day=settings.WEEK_START_DAY,
    )
    return ChallengeSession(household)
