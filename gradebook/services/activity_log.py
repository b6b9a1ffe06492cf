"""Per-day learner activity log.

One row per learner per UTC calendar day.  Each logged activity finds
or creates today's row and bumps the counter for its kind:

  lesson      lessons_completed += 1, plus hours
  quiz        quizzes_taken += 1, plus hours
  assignment  assignments_submitted += 1
  time        hours only

Hours are round(minutes / 60, 2); non-positive durations add nothing.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

from gradebook.models.progress import ActivityDay
from gradebook.repos.progress_repo import ProgressRepo
from gradebook.services.locks import KeyedLock
from gradebook.services.streak import utc_today

logger = logging.getLogger(__name__)

ACTIVITY_KINDS = frozenset({"lesson", "quiz", "assignment", "time"})
_TIMED_KINDS = frozenset({"lesson", "quiz", "time"})


@dataclass(frozen=True, slots=True)
class ActivitySummary:
    period_days: int
    total_hours: float
    total_lessons: int
    total_quizzes: int
    total_assignments: int
    average_daily_hours: float
    most_active_day: datetime.date | None


def _hours(duration_minutes: int) -> float:
    if duration_minutes <= 0:
        return 0.0
    return round(duration_minutes / 60, 2)


class ActivityLog:
    def __init__(
        self,
        progress: ProgressRepo,
        lock: KeyedLock,
        *,
        today: Callable[[], datetime.date] = utc_today,
    ) -> None:
        self._progress = progress
        self._lock = lock
        self._today = today

    async def log_activity(
        self, learner_id: int, kind: str, duration_minutes: int = 0
    ) -> ActivityDay:
        if kind not in ACTIVITY_KINDS:
            raise ValueError(f"unknown activity kind: {kind!r}")

        day = self._today()
        async with self._lock.hold(f"activity:{learner_id}:{day.isoformat()}"):
            entry = await self._progress.get_activity_day(learner_id, day)
            if entry is None:
                entry = ActivityDay(learner_id=learner_id, activity_date=day)

            if kind == "lesson":
                entry = replace(entry, lessons_completed=entry.lessons_completed + 1)
            elif kind == "quiz":
                entry = replace(entry, quizzes_taken=entry.quizzes_taken + 1)
            elif kind == "assignment":
                entry = replace(
                    entry, assignments_submitted=entry.assignments_submitted + 1
                )

            if kind in _TIMED_KINDS:
                hours = _hours(duration_minutes)
                if hours:
                    entry = replace(
                        entry, hours_spent=round(entry.hours_spent + hours, 2)
                    )

            await self._progress.save_activity_day(entry)

        logger.debug(
            "Activity logged learner=%s kind=%s minutes=%d",
            learner_id,
            kind,
            duration_minutes,
        )
        return entry

    async def activity_summary(
        self, learner_id: int, days: int = 30
    ) -> ActivitySummary:
        """Totals over the last ``days`` calendar days, today included."""
        since = self._today() - datetime.timedelta(days=days - 1)
        entries = await self._progress.list_activity(learner_id, since=since)

        total_hours = sum(e.hours_spent for e in entries)
        busiest = max(entries, key=lambda e: e.hours_spent, default=None)
        return ActivitySummary(
            period_days=days,
            total_hours=round(total_hours, 2),
            total_lessons=sum(e.lessons_completed for e in entries),
            total_quizzes=sum(e.quizzes_taken for e in entries),
            total_assignments=sum(e.assignments_submitted for e in entries),
            average_daily_hours=(
                round(total_hours / len(entries), 2) if entries else 0.0
            ),
            most_active_day=busiest.activity_date if busiest else None,
        )
