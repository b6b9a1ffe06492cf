"""PostgreSQL implementation of ProgressRepo.

Both writes are INSERT ... ON CONFLICT DO UPDATE so concurrent
completions of the same module (or activity on the same day) never
collide on the primary key.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from gradebook.db.tables import ActivityLogRow, ModuleProgressRow
from gradebook.models.progress import ActivityDay, ModuleProgress


class PgProgressRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_module_progress(
        self, learner_id: int, module_id: int
    ) -> ModuleProgress | None:
        row = await self._session.get(ModuleProgressRow, (learner_id, module_id))
        if row is None:
            return None
        return ModuleProgress(
            learner_id=row.learner_id,
            module_id=row.module_id,
            status=row.status,
            started_at=row.started_at,
            completed_at=row.completed_at,
        )

    async def upsert_module_progress(self, record: ModuleProgress) -> None:
        values = {
            "status": record.status,
            "started_at": record.started_at,
            "completed_at": record.completed_at,
        }
        stmt = (
            insert(ModuleProgressRow)
            .values(learner_id=record.learner_id, module_id=record.module_id, **values)
            .on_conflict_do_update(
                index_elements=["learner_id", "module_id"], set_=values
            )
        )
        await self._session.execute(stmt)

    async def count_completed_modules(
        self, learner_id: int, module_ids: Iterable[int]
    ) -> int:
        stmt = select(func.count()).where(
            ModuleProgressRow.learner_id == learner_id,
            ModuleProgressRow.module_id.in_(list(module_ids)),
            ModuleProgressRow.status == "completed",
        )
        return (await self._session.execute(stmt)).scalar_one()

    async def get_activity_day(
        self, learner_id: int, day: datetime.date
    ) -> ActivityDay | None:
        row = await self._session.get(
            ActivityLogRow, (learner_id, day), populate_existing=True
        )
        if row is None:
            return None
        return _row_to_activity(row)

    async def save_activity_day(self, entry: ActivityDay) -> None:
        values = {
            "hours_spent": entry.hours_spent,
            "lessons_completed": entry.lessons_completed,
            "quizzes_taken": entry.quizzes_taken,
            "assignments_submitted": entry.assignments_submitted,
        }
        stmt = (
            insert(ActivityLogRow)
            .values(
                learner_id=entry.learner_id,
                activity_date=entry.activity_date,
                **values,
            )
            .on_conflict_do_update(
                index_elements=["learner_id", "activity_date"], set_=values
            )
        )
        await self._session.execute(stmt)

    async def list_activity(
        self, learner_id: int, since: datetime.date | None = None
    ) -> list[ActivityDay]:
        stmt = select(ActivityLogRow).where(ActivityLogRow.learner_id == learner_id)
        if since is not None:
            stmt = stmt.where(ActivityLogRow.activity_date >= since)
        stmt = stmt.order_by(ActivityLogRow.activity_date.desc())
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_activity(r) for r in rows]


def _row_to_activity(row: ActivityLogRow) -> ActivityDay:
    return ActivityDay(
        learner_id=row.learner_id,
        activity_date=row.activity_date,
        hours_spent=row.hours_spent,
        lessons_completed=row.lessons_completed,
        quizzes_taken=row.quizzes_taken,
        assignments_submitted=row.assignments_submitted,
    )
