"""Consecutive-day activity streaks.

compute_streak() is a single backward walk over the learner's activity
days, most recent first.  A run is a sequence of consecutive calendar
days.  The run that starts today, or yesterday when nothing has been
logged yet today, is the live run and its length is the current streak.
A learner whose last activity was two or more days ago has no live run:
current_streak is 0 while longest_streak keeps the historical best.

Only days with time spent count.  A day holding nothing but an
assignment submission, or a lesson completed with no duration, does not
extend a streak.
"""

from __future__ import annotations

import datetime
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from gradebook.repos.progress_repo import ProgressRepo

_ONE_DAY = datetime.timedelta(days=1)


@dataclass(frozen=True, slots=True)
class Streak:
    current_streak: int
    longest_streak: int
    last_activity_date: datetime.date | None
    is_active_today: bool = False


def compute_streak(
    days: Sequence[datetime.date], today: datetime.date
) -> Streak:
    """Walk ``days`` (distinct, descending) backwards from ``today``."""
    if not days:
        return Streak(current_streak=0, longest_streak=0, last_activity_date=None)

    current = 0
    longest = 0
    run = 0
    expected = today
    live = True

    for day in days:
        if day == expected or (run == 0 and day == today - _ONE_DAY):
            run += 1
        else:
            longest = max(longest, run)
            run = 1
            live = False
        if live:
            current = run
        expected = day - _ONE_DAY

    longest = max(longest, run)
    return Streak(
        current_streak=current,
        longest_streak=longest,
        last_activity_date=days[0],
        is_active_today=days[0] == today,
    )


def utc_today() -> datetime.date:
    return datetime.datetime.now(datetime.UTC).date()


class StreakService:
    def __init__(
        self,
        progress: ProgressRepo,
        *,
        today: Callable[[], datetime.date] = utc_today,
    ) -> None:
        self._progress = progress
        self._today = today

    async def streak_for(self, learner_id: int) -> Streak:
        entries = await self._progress.list_activity(learner_id)
        days = [e.activity_date for e in entries if e.hours_spent > 0]
        return compute_streak(days, self._today())
