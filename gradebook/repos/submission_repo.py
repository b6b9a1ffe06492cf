from __future__ import annotations

from typing import Protocol

from gradebook.models.submission import (
    AssignmentSubmission,
    QuizAttempt,
    TestSubmission,
)

# Statuses that make a record count toward a grade.
QUIZ_COUNTED_STATUSES = frozenset({"completed"})
ASSIGNMENT_COUNTED_STATUSES = frozenset({"submitted", "graded"})
TEST_COUNTED_STATUSES = frozenset({"submitted", "late"})


class SubmissionRepo(Protocol):
    """Picks the one score record per learner+activity that counts."""

    async def best_quiz_attempt(
        self, learner_id: int, quiz_id: int
    ) -> QuizAttempt | None: ...

    async def assignment_submission(
        self, learner_id: int, assignment_id: int
    ) -> AssignmentSubmission | None: ...

    async def best_test_submission(
        self, learner_id: int, test_id: int
    ) -> TestSubmission | None: ...


class InMemorySubmissionRepo:
    def __init__(self) -> None:
        self._quiz_attempts: list[QuizAttempt] = []
        self._assignment_submissions: list[AssignmentSubmission] = []
        self._test_submissions: list[TestSubmission] = []

    def clear(self) -> None:
        self._quiz_attempts.clear()
        self._assignment_submissions.clear()
        self._test_submissions.clear()

    def add_quiz_attempt(self, attempt: QuizAttempt) -> None:
        self._quiz_attempts.append(attempt)

    def add_assignment_submission(self, submission: AssignmentSubmission) -> None:
        self._assignment_submissions.append(submission)

    def add_test_submission(self, submission: TestSubmission) -> None:
        self._test_submissions.append(submission)

    async def best_quiz_attempt(
        self, learner_id: int, quiz_id: int
    ) -> QuizAttempt | None:
        candidates = [
            a
            for a in self._quiz_attempts
            if a.learner_id == learner_id
            and a.quiz_id == quiz_id
            and a.status in QUIZ_COUNTED_STATUSES
        ]
        if not candidates:
            return None
        # Highest score wins; equal scores go to the most recent attempt.
        return max(candidates, key=lambda a: (a.score, a.completed_at or 0))

    async def assignment_submission(
        self, learner_id: int, assignment_id: int
    ) -> AssignmentSubmission | None:
        candidates = [
            s
            for s in self._assignment_submissions
            if s.learner_id == learner_id
            and s.assignment_id == assignment_id
            and s.status in ASSIGNMENT_COUNTED_STATUSES
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda s: s.id)

    async def best_test_submission(
        self, learner_id: int, test_id: int
    ) -> TestSubmission | None:
        candidates = [
            s
            for s in self._test_submissions
            if s.learner_id == learner_id
            and s.test_id == test_id
            and s.submission_status in TEST_COUNTED_STATUSES
            and s.total_score is not None
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda s: (s.total_score, s.submitted_at or 0))
