"""PostgreSQL implementation of SubmissionRepo.

Each lookup is a single ORDER BY ... LIMIT 1 query; the ordering is the
tie-break contract (see the InMemory implementation for the same rules).
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gradebook.db.tables import (
    AssignmentSubmissionRow,
    QuizAttemptRow,
    TestSubmissionRow,
)
from gradebook.models.submission import (
    AssignmentSubmission,
    QuizAttempt,
    TestSubmission,
)
from gradebook.repos.submission_repo import (
    ASSIGNMENT_COUNTED_STATUSES,
    QUIZ_COUNTED_STATUSES,
    TEST_COUNTED_STATUSES,
)


class PgSubmissionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def best_quiz_attempt(
        self, learner_id: int, quiz_id: int
    ) -> QuizAttempt | None:
        stmt = (
            select(QuizAttemptRow)
            .where(
                QuizAttemptRow.learner_id == learner_id,
                QuizAttemptRow.quiz_id == quiz_id,
                QuizAttemptRow.status.in_(QUIZ_COUNTED_STATUSES),
            )
            .order_by(
                QuizAttemptRow.score.desc(),
                QuizAttemptRow.completed_at.desc().nulls_last(),
            )
            .limit(1)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return QuizAttempt(
            id=row.id,
            quiz_id=row.quiz_id,
            learner_id=row.learner_id,
            status=row.status,
            score=row.score,
            points_earned=row.points_earned,
            completed_at=row.completed_at,
        )

    async def assignment_submission(
        self, learner_id: int, assignment_id: int
    ) -> AssignmentSubmission | None:
        stmt = (
            select(AssignmentSubmissionRow)
            .where(
                AssignmentSubmissionRow.learner_id == learner_id,
                AssignmentSubmissionRow.assignment_id == assignment_id,
                AssignmentSubmissionRow.status.in_(ASSIGNMENT_COUNTED_STATUSES),
            )
            .order_by(AssignmentSubmissionRow.id)
            .limit(1)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return AssignmentSubmission(
            id=row.id,
            assignment_id=row.assignment_id,
            learner_id=row.learner_id,
            status=row.status,
            marks_obtained=row.marks_obtained,
            submitted_at=row.submitted_at,
        )

    async def best_test_submission(
        self, learner_id: int, test_id: int
    ) -> TestSubmission | None:
        stmt = (
            select(TestSubmissionRow)
            .where(
                TestSubmissionRow.learner_id == learner_id,
                TestSubmissionRow.test_id == test_id,
                TestSubmissionRow.submission_status.in_(TEST_COUNTED_STATUSES),
                TestSubmissionRow.total_score.is_not(None),
            )
            .order_by(
                TestSubmissionRow.total_score.desc(),
                TestSubmissionRow.submitted_at.desc().nulls_last(),
            )
            .limit(1)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return TestSubmission(
            id=row.id,
            test_id=row.test_id,
            learner_id=row.learner_id,
            submission_status=row.submission_status,
            total_score=row.total_score,
            submitted_at=row.submitted_at,
        )
