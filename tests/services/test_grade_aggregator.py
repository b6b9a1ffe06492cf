from __future__ import annotations

import asyncio

import pytest

from gradebook.models.course import Assignment, Course, CourseModule, Quiz, Test
from gradebook.models.grading import GradeBreakdown
from gradebook.models.submission import (
    AssignmentSubmission,
    QuizAttempt,
    TestSubmission,
)
from gradebook.repos.course_repo import InMemoryCourseRepo
from gradebook.repos.submission_repo import InMemorySubmissionRepo
from gradebook.services.grade_aggregator import (
    GradeAggregator,
    letter_grade,
    pass_status,
    round2,
)

LEARNER = 7
COURSE = 1


def _catalog(
    *,
    quiz_points: float | None = 10,
    assignment_points: float | None = 20,
    test_marks: float | None = 100,
) -> tuple[InMemoryCourseRepo, InMemorySubmissionRepo]:
    courses = InMemoryCourseRepo()
    courses.add_course(Course(id=COURSE, title="Algebra"))
    courses.add_module(CourseModule(id=10, course_id=COURSE, position=0, title="M1"))
    courses.add_quiz(Quiz(id=100, module_id=10, title="Q", total_points=quiz_points))
    courses.add_assignment(
        Assignment(id=200, module_id=10, title="A", max_points=assignment_points)
    )
    courses.add_test(Test(id=300, module_id=10, title="T", total_marks=test_marks))
    return courses, InMemorySubmissionRepo()


def _breakdown(
    courses: InMemoryCourseRepo,
    submissions: InMemorySubmissionRepo,
    *weights: float,
) -> GradeBreakdown:
    aggregator = GradeAggregator(courses, submissions)
    return asyncio.run(aggregator.compute_breakdown(COURSE, LEARNER, *weights))


def _quiz(attempt_id: int, score: float, points: float | None, **kw) -> QuizAttempt:
    kw.setdefault("status", "completed")
    return QuizAttempt(
        id=attempt_id,
        quiz_id=100,
        learner_id=LEARNER,
        score=score,
        points_earned=points,
        **kw,
    )


# ---- rounding and thresholds ----


def test_round2_rounds_half_up() -> None:
    assert round2(2.675) == 2.68
    assert round2(0.125) == 0.13
    assert round2(89.998) == 90.0
    assert round2(1.004) == 1.0


@pytest.mark.parametrize(
    ("grade", "letter"),
    [
        (100.0, "A"),
        (90.0, "A"),
        (89.99, "B"),
        (80.0, "B"),
        (79.99, "C"),
        (70.0, "C"),
        (69.99, "D"),
        (60.0, "D"),
        (59.99, "F"),
        (0.0, "F"),
    ],
)
def test_letter_grade_boundaries(grade: float, letter: str) -> None:
    assert letter_grade(grade) == letter


def test_pass_status_threshold() -> None:
    assert pass_status(60.0) == "pass"
    assert pass_status(59.99) == "fail"


# ---- breakdown ----


def test_full_marks_with_partial_test_rounds_up_to_a() -> None:
    courses, subs = _catalog()
    subs.add_quiz_attempt(_quiz(1, score=100, points=10, completed_at=5))
    subs.add_assignment_submission(
        AssignmentSubmission(
            id=1, assignment_id=200, learner_id=LEARNER, status="graded",
            marks_obtained=20,
        )
    )
    subs.add_test_submission(
        TestSubmission(
            id=1, test_id=300, learner_id=LEARNER, submission_status="submitted",
            total_score=83.33,
        )
    )

    result = _breakdown(courses, subs)

    assert result.quizzes.percentage == 100.0
    assert result.quizzes.weighted_score == 15.0
    assert result.assignments.weighted_score == 25.0
    assert result.tests.percentage == 83.33
    assert result.tests.weighted_score == 50.0
    assert result.final_grade == 90.0
    assert result.letter_grade == "A"
    assert result.status == "pass"


def test_final_grade_is_weighted_sum_of_percentages() -> None:
    courses, subs = _catalog()
    subs.add_quiz_attempt(_quiz(1, score=70, points=7))
    subs.add_assignment_submission(
        AssignmentSubmission(
            id=1, assignment_id=200, learner_id=LEARNER, status="submitted",
            marks_obtained=13,
        )
    )
    subs.add_test_submission(
        TestSubmission(
            id=1, test_id=300, learner_id=LEARNER, submission_status="late",
            total_score=81,
        )
    )

    result = _breakdown(courses, subs)

    # 0.15 * 70 + 0.25 * 65 + 0.60 * 81
    assert result.final_grade == 75.35
    assert result.letter_grade == "C"
    assert result.status == "pass"


def test_no_records_scores_zero_but_counts_activities() -> None:
    courses, subs = _catalog()

    result = _breakdown(courses, subs)

    assert result.quizzes.count == 1
    assert result.quizzes.max_score == 10.0
    assert result.quizzes.percentage == 0.0
    assert result.final_grade == 0.0
    assert result.letter_grade == "F"
    assert result.status == "fail"


def test_course_without_activities_is_all_zero() -> None:
    courses = InMemoryCourseRepo()
    courses.add_course(Course(id=COURSE, title="Empty"))

    result = _breakdown(courses, InMemorySubmissionRepo())

    for score in (result.quizzes, result.assignments, result.tests):
        assert score.count == 0
        assert score.max_score == 0.0
        assert score.percentage == 0.0
    assert result.final_grade == 0.0


def test_null_max_counts_activity_with_zero_max() -> None:
    courses, subs = _catalog(quiz_points=None)
    subs.add_quiz_attempt(_quiz(1, score=100, points=4))

    result = _breakdown(courses, subs)

    assert result.quizzes.count == 1
    assert result.quizzes.max_score == 0.0
    assert result.quizzes.total_score == 4.0
    assert result.quizzes.percentage == 0.0


def test_best_completed_quiz_attempt_counts() -> None:
    courses, subs = _catalog()
    subs.add_quiz_attempt(_quiz(1, score=50, points=5, completed_at=1))
    subs.add_quiz_attempt(_quiz(2, score=90, points=9, completed_at=2))
    subs.add_quiz_attempt(_quiz(3, score=100, points=10, status="in_progress"))

    result = _breakdown(courses, subs)

    assert result.quizzes.total_score == 9.0


def test_equal_quiz_scores_prefer_most_recent_attempt() -> None:
    courses, subs = _catalog()
    subs.add_quiz_attempt(_quiz(1, score=80, points=6, completed_at=100))
    subs.add_quiz_attempt(_quiz(2, score=80, points=8, completed_at=200))

    result = _breakdown(courses, subs)

    assert result.quizzes.total_score == 8.0


def test_draft_assignment_ignored_and_ungraded_adds_nothing() -> None:
    courses, subs = _catalog()
    courses.add_assignment(Assignment(id=201, module_id=10, title="B", max_points=20))
    subs.add_assignment_submission(
        AssignmentSubmission(
            id=1, assignment_id=200, learner_id=LEARNER, status="draft",
            marks_obtained=20,
        )
    )
    subs.add_assignment_submission(
        AssignmentSubmission(
            id=2, assignment_id=201, learner_id=LEARNER, status="submitted",
            marks_obtained=None,
        )
    )

    result = _breakdown(courses, subs)

    assert result.assignments.count == 2
    assert result.assignments.max_score == 40.0
    assert result.assignments.total_score == 0.0


def test_test_submission_picks_highest_counted_score() -> None:
    courses, subs = _catalog()
    for sub_id, status, score in [
        (1, "in_progress", 99),
        (2, "submitted", None),
        (3, "submitted", 55),
        (4, "late", 72),
    ]:
        subs.add_test_submission(
            TestSubmission(
                id=sub_id, test_id=300, learner_id=LEARNER,
                submission_status=status, total_score=score,
            )
        )

    result = _breakdown(courses, subs)

    assert result.tests.total_score == 72.0


def test_other_learners_records_are_ignored() -> None:
    courses, subs = _catalog()
    subs.add_quiz_attempt(
        QuizAttempt(
            id=1, quiz_id=100, learner_id=LEARNER + 1, status="completed",
            score=100, points_earned=10,
        )
    )

    result = _breakdown(courses, subs)

    assert result.quizzes.total_score == 0.0


def test_weights_are_not_normalized() -> None:
    courses, subs = _catalog()
    subs.add_quiz_attempt(_quiz(1, score=100, points=10))
    subs.add_assignment_submission(
        AssignmentSubmission(
            id=1, assignment_id=200, learner_id=LEARNER, status="graded",
            marks_obtained=20,
        )
    )
    subs.add_test_submission(
        TestSubmission(
            id=1, test_id=300, learner_id=LEARNER, submission_status="submitted",
            total_score=100,
        )
    )

    result = _breakdown(courses, subs, 1.0, 1.0, 1.0)

    assert result.final_grade == 300.0
    assert result.letter_grade == "A"
    assert result.quizzes.weight == 1.0


# ---- publication gate ----


def test_all_tests_published_is_vacuous_without_tests() -> None:
    courses = InMemoryCourseRepo()
    courses.add_course(Course(id=COURSE, title="No tests"))
    courses.add_module(CourseModule(id=10, course_id=COURSE, position=0, title="M"))
    aggregator = GradeAggregator(courses, InMemorySubmissionRepo())

    assert asyncio.run(aggregator.all_tests_published(COURSE)) is True


def test_all_tests_published_needs_every_test() -> None:
    courses, subs = _catalog()
    courses.add_test(
        Test(id=301, module_id=10, title="T2", total_marks=50, results_published=True)
    )
    aggregator = GradeAggregator(courses, subs)

    assert asyncio.run(aggregator.all_tests_published(COURSE)) is False

    asyncio.run(courses.set_results_published(300, True))
    assert asyncio.run(aggregator.all_tests_published(COURSE)) is True
