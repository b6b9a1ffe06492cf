"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gradebook.db.tables import EnrollmentRow
from gradebook.models.progress import Enrollment


class PgEnrollmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, learner_id: int, course_id: int) -> Enrollment | None:
        row = await self._session.get(EnrollmentRow, (learner_id, course_id))
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def add(self, enrollment: Enrollment) -> None:
        self._session.add(
            EnrollmentRow(
                learner_id=enrollment.learner_id,
                course_id=enrollment.course_id,
                status=enrollment.status,
                progress_percent=enrollment.progress_percent,
                enrolled_at=enrollment.enrolled_at,
                last_accessed_at=enrollment.last_accessed_at,
                completed_at=enrollment.completed_at,
            )
        )
        await self._session.flush()

    async def save(self, enrollment: Enrollment) -> None:
        stmt = (
            update(EnrollmentRow)
            .where(
                EnrollmentRow.learner_id == enrollment.learner_id,
                EnrollmentRow.course_id == enrollment.course_id,
            )
            .values(
                status=enrollment.status,
                progress_percent=enrollment.progress_percent,
                last_accessed_at=enrollment.last_accessed_at,
                completed_at=enrollment.completed_at,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise KeyError("enrollment not found")

    async def list_for_learner(self, learner_id: int) -> list[Enrollment]:
        stmt = select(EnrollmentRow).where(EnrollmentRow.learner_id == learner_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        learner_id=row.learner_id,
        course_id=row.course_id,
        status=row.status,
        progress_percent=row.progress_percent,
        enrolled_at=row.enrolled_at,
        last_accessed_at=row.last_accessed_at,
        completed_at=row.completed_at,
    )
