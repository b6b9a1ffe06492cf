from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from gradebook import worker
from gradebook.api import dependencies
from gradebook.main import app
from gradebook.models.course import Assignment, Course, CourseModule, Quiz, Test
from gradebook.models.progress import Enrollment
from gradebook.services import token_service
from gradebook.services.locks import keyed_lock
from gradebook.services.task_queue import task_queue

# Ensure repo root is on sys.path so `import gradebook` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

INSTRUCTOR_ID = 900
LEARNER_ID = 1


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    """Clear the in-memory stores behind the API between tests."""
    dependencies.course_repo.clear()
    dependencies.submission_repo.clear()
    dependencies.enrollment_repo.clear()
    dependencies.progress_repo.clear()
    dependencies.certificate_repo.clear()
    worker.notification_store.clear()


@pytest.fixture(autouse=True)
def reset_task_queue() -> None:
    """Clear task queues between tests."""
    if hasattr(task_queue, "clear"):
        task_queue.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_locks() -> None:
    if hasattr(keyed_lock, "clear"):
        keyed_lock.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(user_id: int = LEARNER_ID, roles: list[str] | None = None) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=str(user_id), roles=roles)


def auth(user_id: int = LEARNER_ID, roles: list[str] | None = None) -> dict:
    return {"Authorization": f"Bearer {mint_token(user_id, roles)}"}


@pytest.fixture
def token() -> str:
    """Token for the default learner."""
    return mint_token()


@pytest.fixture
def instructor_token() -> str:
    return mint_token(user_id=INSTRUCTOR_ID, roles=["instructor"])


@pytest.fixture
def admin_token() -> str:
    return mint_token(user_id=999, roles=["admin"])


# ---------------------------------------------------------------------------
# Catalog seeding
# ---------------------------------------------------------------------------


def seed_course(
    course_id: int = 1,
    *,
    module_ids: tuple[int, ...] = (10, 11),
    mandatory: tuple[int, ...] = (),
    title: str = "Intro to Statistics",
    instructor_id: int = INSTRUCTOR_ID,
) -> Course:
    """Put a course and its modules into the API's in-memory catalog."""
    course = Course(id=course_id, title=title, instructor_id=instructor_id)
    dependencies.course_repo.add_course(course)
    for position, module_id in enumerate(module_ids):
        dependencies.course_repo.add_module(
            CourseModule(
                id=module_id,
                course_id=course_id,
                position=position,
                title=f"Module {module_id}",
                is_mandatory=module_id in mandatory,
            )
        )
    return course


def seed_activities(
    module_id: int = 10,
    *,
    quiz_id: int = 100,
    assignment_id: int = 200,
    test_id: int = 300,
    published: bool = False,
) -> None:
    """One quiz (10 pts), one assignment (20 pts) and one test (100 marks)."""
    dependencies.course_repo.add_quiz(
        Quiz(id=quiz_id, module_id=module_id, title="Quiz", total_points=10)
    )
    dependencies.course_repo.add_assignment(
        Assignment(
            id=assignment_id, module_id=module_id, title="Essay", max_points=20
        )
    )
    dependencies.course_repo.add_test(
        Test(
            id=test_id,
            module_id=module_id,
            title="Final",
            total_marks=100,
            results_published=published,
        )
    )


def enroll(learner_id: int = LEARNER_ID, course_id: int = 1) -> Enrollment:
    enrollment = Enrollment(learner_id=learner_id, course_id=course_id)
    asyncio.run(dependencies.enrollment_repo.add(enrollment))
    return enrollment
