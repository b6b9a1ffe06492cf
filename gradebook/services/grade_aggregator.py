"""Weighted grade aggregation over quizzes, assignments and tests.

For each activity type independently:

  max     = sum of the activity maxima (null/zero max adds 0, still counted)
  earned  = sum of the learner's chosen score per activity (0 if none)
  percent = earned / max * 100, or 0 when max is 0
  weighted = percent * weight

final = quiz.weighted + assignment.weighted + test.weighted

Every reported number is rounded half-up to 2 decimals on its own, and
the letter grade and pass/fail come from the rounded final grade.  So
quiz=100%, assignment=100%, test=83.33% with the default weights gives
15 + 25 + 49.998 = 89.998, reported as 90.00, which is an A.

Weights are taken as given.  Nothing checks that they sum to 1.
"""

from __future__ import annotations

import logging
import time
from decimal import ROUND_HALF_UP, Decimal

from gradebook.core.metrics import GRADE_COMPUTE_DURATION
from gradebook.models.grading import ActivityScore, GradeBreakdown
from gradebook.repos.course_repo import CourseRepo
from gradebook.repos.submission_repo import SubmissionRepo

logger = logging.getLogger(__name__)

DEFAULT_QUIZ_WEIGHT = 0.15
DEFAULT_ASSIGNMENT_WEIGHT = 0.25
DEFAULT_TEST_WEIGHT = 0.60

PASSING_GRADE = 60.0

# Closed thresholds, checked top-down.
_LETTER_THRESHOLDS = (
    (90.0, "A"),
    (80.0, "B"),
    (70.0, "C"),
    (60.0, "D"),
)

_TWO_PLACES = Decimal("0.01")


def round2(value: float) -> float:
    """Round half-up to 2 decimals on the decimal representation.

    float round() is banker's rounding on the binary value, so
    round(2.675, 2) == 2.67; this returns 2.68.
    """
    return float(Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def letter_grade(final_grade: float) -> str:
    for threshold, letter in _LETTER_THRESHOLDS:
        if final_grade >= threshold:
            return letter
    return "F"


def pass_status(final_grade: float) -> str:
    return "pass" if final_grade >= PASSING_GRADE else "fail"


def _activity_score(
    earned: float, max_score: float, weight: float, count: int
) -> tuple[ActivityScore, float]:
    """Rounded score for reporting, plus the unrounded weighted value."""
    percentage = (earned / max_score * 100) if max_score > 0 else 0.0
    weighted = percentage * weight
    score = ActivityScore(
        total_score=round2(earned),
        max_score=round2(max_score),
        percentage=round2(percentage),
        weight=weight,
        weighted_score=round2(weighted),
        count=count,
    )
    return score, weighted


class GradeAggregator:
    """Computes a learner's grade breakdown for one course.

    Stateless apart from its repositories; the caller decides which
    transaction (and so which snapshot) those repositories read from.
    """

    def __init__(self, courses: CourseRepo, submissions: SubmissionRepo) -> None:
        self._courses = courses
        self._submissions = submissions

    async def compute_breakdown(
        self,
        course_id: int,
        learner_id: int,
        quiz_weight: float = DEFAULT_QUIZ_WEIGHT,
        assignment_weight: float = DEFAULT_ASSIGNMENT_WEIGHT,
        test_weight: float = DEFAULT_TEST_WEIGHT,
    ) -> GradeBreakdown:
        """Full breakdown in one pass.

        Does not check enrollment: a learner with no records simply
        scores 0 everywhere.
        """
        start = time.perf_counter()

        modules = await self._courses.list_modules(course_id)
        module_ids = [m.id for m in modules]

        quizzes, quiz_weighted = await self._quiz_score(
            learner_id, module_ids, quiz_weight
        )
        assignments, assignment_weighted = await self._assignment_score(
            learner_id, module_ids, assignment_weight
        )
        tests, test_weighted = await self._test_score(
            learner_id, module_ids, test_weight
        )

        final = round2(quiz_weighted + assignment_weighted + test_weighted)
        breakdown = GradeBreakdown(
            quizzes=quizzes,
            assignments=assignments,
            tests=tests,
            final_grade=final,
            letter_grade=letter_grade(final),
            status=pass_status(final),
        )

        GRADE_COMPUTE_DURATION.observe(time.perf_counter() - start)
        logger.debug(
            "Breakdown computed course=%s learner=%s final=%.2f letter=%s",
            course_id,
            learner_id,
            final,
            breakdown.letter_grade,
        )
        return breakdown

    async def all_tests_published(self, course_id: int) -> bool:
        """True iff every test in the course has published results.

        Vacuously true for a course without tests.
        """
        modules = await self._courses.list_modules(course_id)
        tests = await self._courses.list_tests([m.id for m in modules])
        return all(t.results_published for t in tests)

    async def _quiz_score(
        self, learner_id: int, module_ids: list[int], weight: float
    ) -> tuple[ActivityScore, float]:
        quizzes = await self._courses.list_quizzes(module_ids)
        earned = 0.0
        max_score = 0.0
        for quiz in quizzes:
            max_score += quiz.total_points or 0
            attempt = await self._submissions.best_quiz_attempt(learner_id, quiz.id)
            if attempt is not None:
                earned += attempt.points_earned or 0
        return _activity_score(earned, max_score, weight, len(quizzes))

    async def _assignment_score(
        self, learner_id: int, module_ids: list[int], weight: float
    ) -> tuple[ActivityScore, float]:
        assignments = await self._courses.list_assignments(module_ids)
        earned = 0.0
        max_score = 0.0
        for assignment in assignments:
            max_score += assignment.max_points or 0
            submission = await self._submissions.assignment_submission(
                learner_id, assignment.id
            )
            if submission is not None and submission.marks_obtained is not None:
                earned += submission.marks_obtained
        return _activity_score(earned, max_score, weight, len(assignments))

    async def _test_score(
        self, learner_id: int, module_ids: list[int], weight: float
    ) -> tuple[ActivityScore, float]:
        tests = await self._courses.list_tests(module_ids)
        earned = 0.0
        max_score = 0.0
        for test in tests:
            max_score += test.total_marks or 0
            submission = await self._submissions.best_test_submission(
                learner_id, test.id
            )
            if submission is not None:
                earned += submission.total_score or 0
        return _activity_score(earned, max_score, weight, len(tests))
