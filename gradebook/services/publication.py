"""Publishing and unpublishing a test's results.

The flag gates certificate visibility for the whole course, so every
change is followed by a refresh of that course's certificates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gradebook.models.principal import Principal
from gradebook.repos.course_repo import CourseRepo
from gradebook.services.certificate_issuer import CertificateIssuer

logger = logging.getLogger(__name__)


class TestNotFoundError(Exception):
    __test__ = False


class NotCourseInstructorError(Exception):
    """The caller does not teach the course that owns the test."""


@dataclass(frozen=True, slots=True)
class PublicationResult:
    test_id: int
    course_id: int
    results_published: bool
    can_view: bool


class ResultsPublisher:
    def __init__(self, courses: CourseRepo, issuer: CertificateIssuer) -> None:
        self._courses = courses
        self._issuer = issuer

    async def set_results_published(
        self, principal: Principal, test_id: int, published: bool
    ) -> PublicationResult:
        test = await self._courses.get_test(test_id)
        if test is None:
            raise TestNotFoundError(test_id)

        module = await self._courses.get_module(test.module_id)
        course = await self._courses.get_course(module.course_id) if module else None
        if course is None:
            # A test whose module or course is gone is as good as missing.
            raise TestNotFoundError(test_id)

        if (
            not principal.is_platform_admin()
            and course.instructor_id != principal.user_id
        ):
            logger.warning(
                "Publication refused: user=%s does not teach course=%s",
                principal.user_id,
                course.id,
            )
            raise NotCourseInstructorError(course.id)

        await self._courses.set_results_published(test_id, published)
        can_view = await self._issuer.refresh_course(course.id)
        logger.info(
            "Test %s results %s by user=%s",
            test_id,
            "published" if published else "unpublished",
            principal.user_id,
            extra={"course_id": course.id},
        )
        return PublicationResult(
            test_id=test_id,
            course_id=course.id,
            results_published=published,
            can_view=can_view,
        )
