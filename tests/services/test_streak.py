from __future__ import annotations

import asyncio
import datetime

from gradebook.models.progress import ActivityDay
from gradebook.repos.progress_repo import InMemoryProgressRepo
from gradebook.services.streak import StreakService, compute_streak

TODAY = datetime.date(2024, 3, 15)


def _days(*offsets: int) -> list[datetime.date]:
    """Dates ``offset`` days before TODAY, most recent first."""
    return [TODAY - datetime.timedelta(days=n) for n in sorted(offsets)]


def test_no_activity_means_no_streak() -> None:
    streak = compute_streak([], TODAY)
    assert streak.current_streak == 0
    assert streak.longest_streak == 0
    assert streak.last_activity_date is None


def test_run_ending_today_is_current() -> None:
    streak = compute_streak(_days(0, 1, 3), TODAY)
    assert streak.current_streak == 2
    assert streak.longest_streak == 2
    assert streak.last_activity_date == TODAY


def test_run_ending_yesterday_is_still_live() -> None:
    streak = compute_streak(_days(1, 2), TODAY)
    assert streak.current_streak == 2
    assert streak.longest_streak == 2


def test_stale_activity_breaks_current_streak() -> None:
    streak = compute_streak(_days(3), TODAY)
    assert streak.current_streak == 0
    assert streak.longest_streak == 1
    assert streak.last_activity_date == TODAY - datetime.timedelta(days=3)


def test_longest_streak_can_be_historical() -> None:
    streak = compute_streak(_days(0, 5, 6, 7, 8), TODAY)
    assert streak.current_streak == 1
    assert streak.longest_streak == 4


def test_single_day_today() -> None:
    streak = compute_streak(_days(0), TODAY)
    assert streak.current_streak == 1
    assert streak.longest_streak == 1


def test_current_never_exceeds_longest() -> None:
    for offsets in [(0,), (1, 2, 3), (0, 2, 3, 4), (4, 5), (0, 1, 2, 9, 10)]:
        streak = compute_streak(_days(*offsets), TODAY)
        assert 0 <= streak.current_streak <= streak.longest_streak


def test_streak_service_reads_activity_log() -> None:
    repo = InMemoryProgressRepo()
    for day in _days(0, 1, 2):
        asyncio.run(
            repo.save_activity_day(
                ActivityDay(
                    learner_id=3,
                    activity_date=day,
                    lessons_completed=1,
                    hours_spent=0.5,
                )
            )
        )
    asyncio.run(
        repo.save_activity_day(ActivityDay(learner_id=4, activity_date=TODAY))
    )

    streak = asyncio.run(StreakService(repo, today=lambda: TODAY).streak_for(3))

    assert streak.current_streak == 3
    assert streak.longest_streak == 3
    assert streak.is_active_today is True


def test_is_active_today_only_when_latest_day_is_today() -> None:
    assert compute_streak(_days(0, 1), TODAY).is_active_today is True
    assert compute_streak(_days(1, 2), TODAY).is_active_today is False
    assert compute_streak([], TODAY).is_active_today is False


def test_days_without_time_spent_do_not_count() -> None:
    repo = InMemoryProgressRepo()
    asyncio.run(
        repo.save_activity_day(
            ActivityDay(
                learner_id=3,
                activity_date=TODAY,
                assignments_submitted=1,
                hours_spent=0,
            )
        )
    )

    streak = asyncio.run(StreakService(repo, today=lambda: TODAY).streak_for(3))

    assert streak.current_streak == 0
    assert streak.longest_streak == 0
    assert streak.last_activity_date is None
    assert streak.is_active_today is False


def test_zero_hour_day_breaks_a_run() -> None:
    repo = InMemoryProgressRepo()
    for offset, hours in [(0, 1.0), (1, 0.0), (2, 0.75), (3, 0.25)]:
        asyncio.run(
            repo.save_activity_day(
                ActivityDay(
                    learner_id=3,
                    activity_date=TODAY - datetime.timedelta(days=offset),
                    lessons_completed=1,
                    hours_spent=hours,
                )
            )
        )

    streak = asyncio.run(StreakService(repo, today=lambda: TODAY).streak_for(3))

    assert streak.current_streak == 1
    assert streak.longest_streak == 2
