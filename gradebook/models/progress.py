from __future__ import annotations

import datetime
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Enrollment:
    """One learner in one course.

    progress_percent is a projection recomputed from ModuleProgress rows;
    it is never incremented in place.
    """

    learner_id: int
    course_id: int
    status: str = "active"  # active|completed
    progress_percent: float = 0.0
    enrolled_at: int = 0
    last_accessed_at: int | None = None
    completed_at: int | None = None


@dataclass(frozen=True, slots=True)
class ModuleProgress:
    learner_id: int
    module_id: int
    status: str = "not_started"  # not_started|in_progress|completed
    started_at: int | None = None
    completed_at: int | None = None


@dataclass(frozen=True, slots=True)
class ActivityDay:
    """Aggregated learner activity for one calendar day (UTC)."""

    learner_id: int
    activity_date: datetime.date
    hours_spent: float = 0.0
    lessons_completed: int = 0
    quizzes_taken: int = 0
    assignments_submitted: int = 0
