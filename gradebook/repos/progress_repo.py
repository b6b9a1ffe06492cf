from __future__ import annotations

import datetime
from collections.abc import Iterable
from typing import Protocol

from gradebook.models.progress import ActivityDay, ModuleProgress


class ProgressRepo(Protocol):
    """Module completion records and the per-day activity log."""

    async def get_module_progress(
        self, learner_id: int, module_id: int
    ) -> ModuleProgress | None: ...

    async def upsert_module_progress(self, record: ModuleProgress) -> None: ...

    async def count_completed_modules(
        self, learner_id: int, module_ids: Iterable[int]
    ) -> int: ...

    async def get_activity_day(
        self, learner_id: int, day: datetime.date
    ) -> ActivityDay | None: ...

    async def save_activity_day(self, entry: ActivityDay) -> None: ...

    async def list_activity(
        self, learner_id: int, since: datetime.date | None = None
    ) -> list[ActivityDay]:
        """Activity rows, most recent day first."""
        ...


class InMemoryProgressRepo:
    def __init__(self) -> None:
        self._modules: dict[tuple[int, int], ModuleProgress] = {}
        self._activity: dict[tuple[int, datetime.date], ActivityDay] = {}

    def clear(self) -> None:
        self._modules.clear()
        self._activity.clear()

    async def get_module_progress(
        self, learner_id: int, module_id: int
    ) -> ModuleProgress | None:
        return self._modules.get((learner_id, module_id))

    async def upsert_module_progress(self, record: ModuleProgress) -> None:
        self._modules[(record.learner_id, record.module_id)] = record

    async def count_completed_modules(
        self, learner_id: int, module_ids: Iterable[int]
    ) -> int:
        wanted = set(module_ids)
        return sum(
            1
            for (lid, mid), rec in self._modules.items()
            if lid == learner_id and mid in wanted and rec.status == "completed"
        )

    async def get_activity_day(
        self, learner_id: int, day: datetime.date
    ) -> ActivityDay | None:
        return self._activity.get((learner_id, day))

    async def save_activity_day(self, entry: ActivityDay) -> None:
        self._activity[(entry.learner_id, entry.activity_date)] = entry

    async def list_activity(
        self, learner_id: int, since: datetime.date | None = None
    ) -> list[ActivityDay]:
        rows = [
            e
            for (lid, day), e in self._activity.items()
            if lid == learner_id and (since is None or day >= since)
        ]
        return sorted(rows, key=lambda e: e.activity_date, reverse=True)
