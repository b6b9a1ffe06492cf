"""Per-learner score records, one kind per gradable activity.

These are written by the quiz, assignment and test workflows; the grading
engine only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class QuizAttempt:
    id: int
    quiz_id: int
    learner_id: int
    status: str = "in_progress"  # in_progress|completed
    score: float = 0.0  # percentage, used to rank attempts
    points_earned: float | None = None
    completed_at: int | None = None


@dataclass(frozen=True, slots=True)
class AssignmentSubmission:
    id: int
    assignment_id: int
    learner_id: int
    status: str = "draft"  # draft|submitted|graded
    marks_obtained: float | None = None
    submitted_at: int | None = None


@dataclass(frozen=True, slots=True)
class TestSubmission:
    __test__ = False  # not a pytest test class

    id: int
    test_id: int
    learner_id: int
    submission_status: str = "in_progress"  # in_progress|submitted|late
    total_score: float | None = None
    submitted_at: int | None = None
