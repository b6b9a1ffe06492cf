from __future__ import annotations

import asyncio

import pytest

from gradebook.models.course import Course, CourseModule, Test
from gradebook.models.principal import Principal
from gradebook.models.progress import Enrollment
from gradebook.repos.certificate_repo import InMemoryCertificateRepo
from gradebook.repos.course_repo import InMemoryCourseRepo
from gradebook.repos.enrollment_repo import InMemoryEnrollmentRepo
from gradebook.repos.submission_repo import InMemorySubmissionRepo
from gradebook.services.certificate_issuer import CertificateIssuer
from gradebook.services.grade_aggregator import GradeAggregator
from gradebook.services.locks import InMemoryKeyedLock
from gradebook.services.notifier import Notifier
from gradebook.services.publication import (
    NotCourseInstructorError,
    ResultsPublisher,
    TestNotFoundError,
)
from gradebook.services.task_queue import InMemoryTaskQueue

INSTRUCTOR = Principal(user_id=50, roles=frozenset({"instructor"}))
OTHER_INSTRUCTOR = Principal(user_id=51, roles=frozenset({"instructor"}))
ADMIN = Principal(user_id=1, roles=frozenset({"admin"}))


@pytest.fixture
def courses() -> InMemoryCourseRepo:
    repo = InMemoryCourseRepo()
    repo.add_course(Course(id=1, title="Physics", instructor_id=50))
    repo.add_module(CourseModule(id=10, course_id=1, position=0, title="M"))
    repo.add_test(Test(id=300, module_id=10, title="Midterm", total_marks=50))
    repo.add_test(Test(id=301, module_id=10, title="Final", total_marks=50))
    return repo


@pytest.fixture
def certificates() -> InMemoryCertificateRepo:
    return InMemoryCertificateRepo()


@pytest.fixture
def publisher(
    courses: InMemoryCourseRepo, certificates: InMemoryCertificateRepo
) -> ResultsPublisher:
    enrollments = InMemoryEnrollmentRepo()
    asyncio.run(enrollments.add(Enrollment(learner_id=8, course_id=1)))
    issuer = CertificateIssuer(
        aggregator=GradeAggregator(courses, InMemorySubmissionRepo()),
        certificates=certificates,
        enrollments=enrollments,
        courses=courses,
        lock=InMemoryKeyedLock(),
        notifier=Notifier(InMemoryTaskQueue()),
    )
    asyncio.run(issuer.issue_or_update(1, 8))
    return ResultsPublisher(courses, issuer)


def test_publishing_one_of_two_tests_keeps_certificates_hidden(
    publisher: ResultsPublisher, certificates: InMemoryCertificateRepo
) -> None:
    result = asyncio.run(publisher.set_results_published(INSTRUCTOR, 300, True))

    assert result.results_published is True
    assert result.course_id == 1
    assert result.can_view is False
    assert asyncio.run(certificates.get_for(8, 1)).can_view is False


def test_publishing_last_test_reveals_certificates(
    publisher: ResultsPublisher, certificates: InMemoryCertificateRepo
) -> None:
    asyncio.run(publisher.set_results_published(INSTRUCTOR, 300, True))
    result = asyncio.run(publisher.set_results_published(INSTRUCTOR, 301, True))

    assert result.can_view is True
    assert asyncio.run(certificates.get_for(8, 1)).can_view is True


def test_unpublishing_hides_certificates_again(
    publisher: ResultsPublisher, certificates: InMemoryCertificateRepo
) -> None:
    asyncio.run(publisher.set_results_published(INSTRUCTOR, 300, True))
    asyncio.run(publisher.set_results_published(INSTRUCTOR, 301, True))

    result = asyncio.run(publisher.set_results_published(INSTRUCTOR, 301, False))

    assert result.results_published is False
    assert result.can_view is False
    assert asyncio.run(certificates.get_for(8, 1)).can_view is False


def test_admin_may_publish_any_course(publisher: ResultsPublisher) -> None:
    result = asyncio.run(publisher.set_results_published(ADMIN, 300, True))
    assert result.results_published is True


def test_other_instructor_is_refused(
    publisher: ResultsPublisher, courses: InMemoryCourseRepo
) -> None:
    with pytest.raises(NotCourseInstructorError):
        asyncio.run(publisher.set_results_published(OTHER_INSTRUCTOR, 300, True))

    assert asyncio.run(courses.get_test(300)).results_published is False


def test_unknown_test_raises(publisher: ResultsPublisher) -> None:
    with pytest.raises(TestNotFoundError):
        asyncio.run(publisher.set_results_published(INSTRUCTOR, 999, True))
