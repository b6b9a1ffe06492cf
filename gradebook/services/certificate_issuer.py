"""Certificate issuance: create once, recompute in place forever after.

issue_or_update() is safe to call speculatively from any trigger point.
Without an enrollment it does nothing and returns None ("not eligible
yet").  Otherwise it recomputes the full breakdown and the publication
gate and upserts the one certificate for the learner+course.  The
certificate number and issued_at are set on creation and never change.

Concurrency: the whole read-compute-write runs under the
``certificate:{learner}:{course}`` lock, and handing out a new number
runs under the global ``certificate-number`` lock.  Certificate rows are
read and written through ``certificate_scope``, one unit of work that
must be committed by the time it exits.  With Postgres that is its own
session, so the row is committed while the lock is still held and the
next holder's snapshot starts after it.  A certificate written this way
stays committed even if the caller's request later rolls back; the next
call recomputes it.  The unique constraints on (learner_id, course_id)
and certificate_number stay as the backstop.
"""

from __future__ import annotations

import datetime
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import replace

from gradebook.core.metrics import CERTIFICATES_ISSUED
from gradebook.models.certificate import Certificate
from gradebook.repos.certificate_repo import CertificateRepo
from gradebook.repos.course_repo import CourseRepo
from gradebook.repos.enrollment_repo import EnrollmentRepo
from gradebook.services.grade_aggregator import (
    DEFAULT_ASSIGNMENT_WEIGHT,
    DEFAULT_QUIZ_WEIGHT,
    DEFAULT_TEST_WEIGHT,
    GradeAggregator,
)
from gradebook.services.locks import KeyedLock
from gradebook.services.notifier import Notifier

logger = logging.getLogger(__name__)

CERTIFICATE_NUMBER_LOCK = "certificate-number"
_SEQUENCE_DIGITS = 5

CertificateScope = Callable[[], AbstractAsyncContextManager[CertificateRepo]]


def certificate_lock_key(learner_id: int, course_id: int) -> str:
    return f"certificate:{learner_id}:{course_id}"


def format_certificate_number(year: int, sequence: int) -> str:
    return f"CERT-{year}-{sequence:0{_SEQUENCE_DIGITS}d}"


def next_sequence(latest_number: str | None) -> int:
    """1 + the trailing 5-digit sequence of the latest number, or 1."""
    if latest_number is None:
        return 1
    return int(latest_number[-_SEQUENCE_DIGITS:]) + 1


async def _next_number(certificates: CertificateRepo, year: int) -> str:
    latest = await certificates.latest_number_for_year(year)
    return format_certificate_number(year, next_sequence(latest))


@asynccontextmanager
async def _borrowed(certificates: CertificateRepo) -> AsyncIterator[CertificateRepo]:
    # In-memory writes are visible immediately; nothing to commit.
    yield certificates


class CertificateIssuer:
    def __init__(
        self,
        *,
        aggregator: GradeAggregator,
        certificates: CertificateRepo,
        enrollments: EnrollmentRepo,
        courses: CourseRepo,
        lock: KeyedLock,
        notifier: Notifier,
        clock: Callable[[], float] = time.time,
        certificate_scope: CertificateScope | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._certificates = certificates
        self._enrollments = enrollments
        self._courses = courses
        self._lock = lock
        self._notifier = notifier
        self._clock = clock
        self._certificate_scope = certificate_scope

    def _open_certificates(self) -> AbstractAsyncContextManager[CertificateRepo]:
        if self._certificate_scope is None:
            return _borrowed(self._certificates)
        return self._certificate_scope()

    async def issue_or_update(
        self, course_id: int, learner_id: int, *, notify: bool = False
    ) -> Certificate | None:
        """Create or recompute the learner's certificate for the course.

        notify=True is the course-completion pathway: it also enqueues
        the course_completed and certificate_issued notifications.
        Publication-state refreshes pass notify=False.
        """
        async with self._lock.hold(certificate_lock_key(learner_id, course_id)):
            enrollment = await self._enrollments.get(learner_id, course_id)
            if enrollment is None:
                logger.info(
                    "No enrollment for learner=%s course=%s; certificate skipped",
                    learner_id,
                    course_id,
                )
                return None

            can_view = await self._aggregator.all_tests_published(course_id)
            breakdown = await self._aggregator.compute_breakdown(
                course_id,
                learner_id,
                DEFAULT_QUIZ_WEIGHT,
                DEFAULT_ASSIGNMENT_WEIGHT,
                DEFAULT_TEST_WEIGHT,
            )
            now = int(self._clock())
            completed_at = enrollment.completed_at or now

            async with self._open_certificates() as certificates:
                existing = await certificates.get_for(learner_id, course_id)
                if existing is not None:
                    certificate = replace(
                        existing,
                        quiz_weight=DEFAULT_QUIZ_WEIGHT,
                        assignment_weight=DEFAULT_ASSIGNMENT_WEIGHT,
                        test_weight=DEFAULT_TEST_WEIGHT,
                        final_grade=breakdown.final_grade,
                        letter_grade=breakdown.letter_grade,
                        status=breakdown.status,
                        completed_at=completed_at,
                        can_view=can_view,
                    )
                    await certificates.update(certificate)
                    outcome = "updated"

            if existing is None:
                async with self._lock.hold(CERTIFICATE_NUMBER_LOCK):
                    async with self._open_certificates() as certificates:
                        number = await _next_number(certificates, self._year(now))
                        certificate = await certificates.add(
                            Certificate(
                                id=0,
                                learner_id=learner_id,
                                course_id=course_id,
                                certificate_number=number,
                                issued_at=now,
                                quiz_weight=DEFAULT_QUIZ_WEIGHT,
                                assignment_weight=DEFAULT_ASSIGNMENT_WEIGHT,
                                test_weight=DEFAULT_TEST_WEIGHT,
                                final_grade=breakdown.final_grade,
                                letter_grade=breakdown.letter_grade,
                                status=breakdown.status,
                                completed_at=completed_at,
                                can_view=can_view,
                            )
                        )
                outcome = "created"

        CERTIFICATES_ISSUED.labels(outcome=outcome).inc()
        logger.info(
            "Certificate %s %s: final=%.2f letter=%s status=%s can_view=%s",
            certificate.certificate_number,
            outcome,
            certificate.final_grade,
            certificate.letter_grade,
            certificate.status,
            certificate.can_view,
            extra={
                "learner_id": learner_id,
                "course_id": course_id,
                "certificate_number": certificate.certificate_number,
            },
        )

        if notify:
            course = await self._courses.get_course(course_id)
            await self._notifier.course_completed(
                learner_id, course_id, course.title if course else None
            )
            await self._notifier.certificate_issued(learner_id, certificate)

        return certificate

    async def refresh_course(self, course_id: int) -> bool:
        """Re-evaluate every certificate of a course after a publication change.

        Returns the course's new can_view value.  No notifications.
        """
        can_view = await self._aggregator.all_tests_published(course_id)
        async with self._open_certificates() as repo:
            certificates = await repo.list_for_course(course_id)
        for certificate in certificates:
            await self.issue_or_update(course_id, certificate.learner_id)
        logger.info(
            "Refreshed %d certificate(s) for course=%s can_view=%s",
            len(certificates),
            course_id,
            can_view,
        )
        return can_view

    async def next_certificate_number(self, year: int) -> str:
        """Next CERT-YYYY-NNNNN for the year; the sequence restarts each year.

        Callers that insert the result must hold CERTIFICATE_NUMBER_LOCK.
        """
        return await _next_number(self._certificates, year)

    @staticmethod
    def _year(timestamp: int) -> int:
        return datetime.datetime.fromtimestamp(timestamp, datetime.UTC).year
