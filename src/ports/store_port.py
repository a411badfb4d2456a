"""Challenge store port — abstract interface for persisting household state.

The session depends on this protocol, never on a specific backend. Writes
happen after the local state has already been updated optimistically.
"""

from __future__ import annotations

from typing import Protocol

from src.data.models import Challenge, RecurringTemplate, SkipRecord, TaskInstance


class StoreError(Exception):
    """Raised when any store backend operation fails."""


class ChallengeStorePort(Protocol):
    """Abstract persistence interface used by ChallengeSession.flush()."""

    async def save_challenge(self, household_id: str, challenge: Challenge) -> None: ...

    async def save_task(self, household_id: str, task: TaskInstance) -> None: ...

    async def delete_task(self, household_id: str, task_id: str) -> None: ...

    async def add_skip_records(
        self, household_id: str, skip_records: list[SkipRecord]
    ) -> None: ...

    async def save_template(
        self, household_id: str, template: RecurringTemplate
    ) -> None: ...

    async def delete_template(self, household_id: str, template_id: str) -> None: ...
