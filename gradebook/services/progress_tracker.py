"""Course progress recomputation and completion detection.

Progress is a projection: the share of required modules the learner has
completed, recomputed from scratch on every call.  Required means the
modules flagged mandatory, or every module when none is flagged.  A
course without modules is at 0%.

Recomputing is idempotent, and because nothing is incremented progress
can go down when completion records disappear.  Completion fires only on
the edge old < 100 <= new: the enrollment is marked completed, its
progress pinned to exactly 100.00, and the certificate is issued with
notifications.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from gradebook.core.metrics import COURSE_COMPLETIONS
from gradebook.models.progress import ModuleProgress
from gradebook.repos.certificate_repo import CertificateRepo
from gradebook.repos.course_repo import CourseRepo
from gradebook.repos.enrollment_repo import EnrollmentRepo
from gradebook.repos.progress_repo import ProgressRepo
from gradebook.services.activity_log import ActivityLog
from gradebook.services.certificate_issuer import CertificateIssuer
from gradebook.services.grade_aggregator import round2
from gradebook.services.locks import KeyedLock

logger = logging.getLogger(__name__)

COMPLETE_PERCENT = 100.0


class CourseModuleNotFoundError(Exception):
    """The module does not exist."""


class NotEnrolledError(Exception):
    """The learner is not enrolled in the module's course."""


@dataclass(frozen=True, slots=True)
class ProgressResult:
    course_id: int
    progress_percent: float
    completed: bool


@dataclass(frozen=True, slots=True)
class LearnerStatistics:
    total_courses: int
    completed_courses: int
    active_courses: int
    average_progress: float
    certificates_earned: int


def enrollment_lock_key(learner_id: int, course_id: int) -> str:
    return f"enrollment:{learner_id}:{course_id}"


class ProgressTracker:
    def __init__(
        self,
        *,
        courses: CourseRepo,
        enrollments: EnrollmentRepo,
        progress: ProgressRepo,
        certificates: CertificateRepo,
        issuer: CertificateIssuer,
        activity: ActivityLog,
        lock: KeyedLock,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._courses = courses
        self._enrollments = enrollments
        self._progress = progress
        self._certificates = certificates
        self._issuer = issuer
        self._activity = activity
        self._lock = lock
        self._clock = clock

    async def recompute_progress(
        self, learner_id: int, course_id: int
    ) -> ProgressResult | None:
        """Recompute and persist progress; None when not enrolled."""
        async with self._lock.hold(enrollment_lock_key(learner_id, course_id)):
            enrollment = await self._enrollments.get(learner_id, course_id)
            if enrollment is None:
                return None

            new_percent = await self._progress_percent(learner_id, course_id)
            now = int(self._clock())
            crossed = (
                enrollment.progress_percent < COMPLETE_PERCENT
                and new_percent >= COMPLETE_PERCENT
            )

            if crossed:
                enrollment = replace(
                    enrollment,
                    status="completed",
                    progress_percent=COMPLETE_PERCENT,
                    completed_at=now,
                    last_accessed_at=now,
                )
            else:
                enrollment = replace(
                    enrollment, progress_percent=new_percent, last_accessed_at=now
                )
            await self._enrollments.save(enrollment)

        if crossed:
            COURSE_COMPLETIONS.inc()
            logger.info(
                "Course completed by learner=%s course=%s",
                learner_id,
                course_id,
                extra={"learner_id": learner_id, "course_id": course_id},
            )
            await self._issuer.issue_or_update(course_id, learner_id, notify=True)

        return ProgressResult(
            course_id=course_id,
            progress_percent=enrollment.progress_percent,
            completed=enrollment.progress_percent >= COMPLETE_PERCENT,
        )

    async def complete_module(
        self, learner_id: int, module_id: int, duration_minutes: int = 0
    ) -> ProgressResult:
        """Mark a module completed, log the lesson, recompute the course."""
        module = await self._courses.get_module(module_id)
        if module is None:
            raise CourseModuleNotFoundError(module_id)

        enrollment = await self._enrollments.get(learner_id, module.course_id)
        if enrollment is None:
            logger.warning(
                "Module completion refused: learner=%s not enrolled in course=%s",
                learner_id,
                module.course_id,
            )
            raise NotEnrolledError(module.course_id)

        now = int(self._clock())
        existing = await self._progress.get_module_progress(learner_id, module_id)
        started_at = existing.started_at if existing and existing.started_at else now
        await self._progress.upsert_module_progress(
            ModuleProgress(
                learner_id=learner_id,
                module_id=module_id,
                status="completed",
                started_at=started_at,
                completed_at=now,
            )
        )
        await self._activity.log_activity(learner_id, "lesson", duration_minutes)

        result = await self.recompute_progress(learner_id, module.course_id)
        if result is None:
            # Enrollment removed between the check above and the recompute.
            raise NotEnrolledError(module.course_id)
        return result

    async def learner_statistics(self, learner_id: int) -> LearnerStatistics:
        enrollments = await self._enrollments.list_for_learner(learner_id)
        completed = sum(1 for e in enrollments if e.status == "completed")
        average = (
            round2(sum(e.progress_percent for e in enrollments) / len(enrollments))
            if enrollments
            else 0.0
        )
        return LearnerStatistics(
            total_courses=len(enrollments),
            completed_courses=completed,
            active_courses=len(enrollments) - completed,
            average_progress=average,
            certificates_earned=await self._certificates.count_for_learner(
                learner_id
            ),
        )

    async def _progress_percent(self, learner_id: int, course_id: int) -> float:
        modules = await self._courses.list_modules(course_id)
        if not modules:
            return 0.0
        required = [m for m in modules if m.is_mandatory] or modules
        completed = await self._progress.count_completed_modules(
            learner_id, [m.id for m in required]
        )
        return round2(completed / len(required) * 100)
