"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gradebook.db.tables import (
    AssignmentRow,
    CourseModuleRow,
    CourseRow,
    QuizRow,
    TestRow,
)
from gradebook.models.course import Assignment, Course, CourseModule, Quiz, Test


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_course(self, course_id: int) -> Course | None:
        row = await self._session.get(CourseRow, course_id)
        if row is None:
            return None
        return Course(id=row.id, title=row.title, instructor_id=row.instructor_id)

    async def get_module(self, module_id: int) -> CourseModule | None:
        row = await self._session.get(CourseModuleRow, module_id)
        if row is None:
            return None
        return _row_to_module(row)

    async def list_modules(self, course_id: int) -> list[CourseModule]:
        stmt = (
            select(CourseModuleRow)
            .where(CourseModuleRow.course_id == course_id)
            .order_by(CourseModuleRow.position, CourseModuleRow.id)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_module(r) for r in rows]

    async def list_quizzes(self, module_ids: Iterable[int]) -> list[Quiz]:
        stmt = select(QuizRow).where(QuizRow.module_id.in_(list(module_ids)))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            Quiz(
                id=r.id,
                module_id=r.module_id,
                title=r.title,
                total_points=r.total_points,
            )
            for r in rows
        ]

    async def list_assignments(self, module_ids: Iterable[int]) -> list[Assignment]:
        stmt = select(AssignmentRow).where(
            AssignmentRow.module_id.in_(list(module_ids))
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            Assignment(
                id=r.id,
                module_id=r.module_id,
                title=r.title,
                max_points=r.max_points,
            )
            for r in rows
        ]

    async def list_tests(self, module_ids: Iterable[int]) -> list[Test]:
        stmt = select(TestRow).where(TestRow.module_id.in_(list(module_ids)))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_test(r) for r in rows]

    async def get_test(self, test_id: int) -> Test | None:
        row = await self._session.get(TestRow, test_id)
        if row is None:
            return None
        return _row_to_test(row)

    async def set_results_published(self, test_id: int, published: bool) -> Test | None:
        stmt = (
            update(TestRow)
            .where(TestRow.id == test_id)
            .values(results_published=published)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        # The identity map may hold a stale row from an earlier get_test().
        row = await self._session.get(TestRow, test_id, populate_existing=True)
        return _row_to_test(row) if row is not None else None


def _row_to_module(row: CourseModuleRow) -> CourseModule:
    return CourseModule(
        id=row.id,
        course_id=row.course_id,
        position=row.position,
        title=row.title,
        is_mandatory=row.is_mandatory,
    )


def _row_to_test(row: TestRow) -> Test:
    return Test(
        id=row.id,
        module_id=row.module_id,
        title=row.title,
        total_marks=row.total_marks,
        results_published=row.results_published,
    )
