"""Learner progress endpoints.

Module completion drives everything downstream:
  POST /v1/progress/modules/{module_id}/complete
  -> record the module as completed, log a lesson for today
  -> recompute course progress
  -> on first reaching 100%: mark the enrollment completed,
     issue the certificate, enqueue notifications
"""

from __future__ import annotations

import datetime
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from gradebook.api.dependencies import (
    get_activity_log,
    get_streak_service,
    get_tracker,
    require_user,
)
from gradebook.models.principal import Principal
from gradebook.services.activity_log import ActivityLog
from gradebook.services.progress_tracker import (
    CourseModuleNotFoundError,
    NotEnrolledError,
    ProgressResult,
    ProgressTracker,
)
from gradebook.services.streak import StreakService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/progress", tags=["progress"])


class ModuleCompletionIn(BaseModel):
    duration_minutes: int = Field(default=0, ge=0)


class ProgressOut(BaseModel):
    course_id: int
    progress_percent: float
    completed: bool


class StreakOut(BaseModel):
    current_streak: int
    longest_streak: int
    last_activity_date: datetime.date | None
    is_active_today: bool


class StatisticsOut(BaseModel):
    total_courses: int
    completed_courses: int
    active_courses: int
    average_progress: float
    certificates_earned: int


class ActivitySummaryOut(BaseModel):
    period_days: int
    total_hours: float
    total_lessons: int
    total_quizzes: int
    total_assignments: int
    average_daily_hours: float
    most_active_day: datetime.date | None


class SummaryOut(BaseModel):
    statistics: StatisticsOut
    activity: ActivitySummaryOut


def _progress_out(result: ProgressResult) -> ProgressOut:
    return ProgressOut(
        course_id=result.course_id,
        progress_percent=result.progress_percent,
        completed=result.completed,
    )


@router.post("/modules/{module_id}/complete", response_model=ProgressOut)
async def complete_module(
    module_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    tracker: Annotated[ProgressTracker, Depends(get_tracker)],
    body: ModuleCompletionIn | None = None,
) -> ProgressOut:
    duration = body.duration_minutes if body else 0
    try:
        result = await tracker.complete_module(principal.user_id, module_id, duration)
    except CourseModuleNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Module not found",
        ) from None
    except NotEnrolledError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enrolled in this course",
        ) from None
    return _progress_out(result)


@router.post("/courses/{course_id}/recompute", response_model=ProgressOut)
async def recompute_course_progress(
    course_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    tracker: Annotated[ProgressTracker, Depends(get_tracker)],
) -> ProgressOut:
    result = await tracker.recompute_progress(principal.user_id, course_id)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Enrollment not found",
        )
    return _progress_out(result)


@router.get("/streak", response_model=StreakOut)
async def get_streak(
    principal: Annotated[Principal, Depends(require_user)],
    streaks: Annotated[StreakService, Depends(get_streak_service)],
) -> StreakOut:
    streak = await streaks.streak_for(principal.user_id)
    return StreakOut(
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        last_activity_date=streak.last_activity_date,
        is_active_today=streak.is_active_today,
    )


@router.get("/summary", response_model=SummaryOut)
async def get_summary(
    principal: Annotated[Principal, Depends(require_user)],
    tracker: Annotated[ProgressTracker, Depends(get_tracker)],
    activity: Annotated[ActivityLog, Depends(get_activity_log)],
) -> SummaryOut:
    stats = await tracker.learner_statistics(principal.user_id)
    summary = await activity.activity_summary(principal.user_id)
    return SummaryOut(
        statistics=StatisticsOut(
            total_courses=stats.total_courses,
            completed_courses=stats.completed_courses,
            active_courses=stats.active_courses,
            average_progress=stats.average_progress,
            certificates_earned=stats.certificates_earned,
        ),
        activity=ActivitySummaryOut(
            period_days=summary.period_days,
            total_hours=summary.total_hours,
            total_lessons=summary.total_lessons,
            total_quizzes=summary.total_quizzes,
            total_assignments=summary.total_assignments,
            average_daily_hours=summary.average_daily_hours,
            most_active_day=summary.most_active_day,
        ),
    )
