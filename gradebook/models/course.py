from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Course:
    id: int
    title: str
    instructor_id: int | None = None


@dataclass(frozen=True, slots=True)
class CourseModule:
    id: int
    course_id: int
    position: int
    title: str
    is_mandatory: bool = False


# --- Gradable activities ---
# All three hang off a module; the course is reached through module.course_id.
# A null max (total_points / max_points / total_marks) counts as 0.


@dataclass(frozen=True, slots=True)
class Quiz:
    id: int
    module_id: int
    title: str
    total_points: float | None = None


@dataclass(frozen=True, slots=True)
class Assignment:
    id: int
    module_id: int
    title: str
    max_points: float | None = None


@dataclass(frozen=True, slots=True)
class Test:
    """Timed test.  Results stay hidden from learners until published."""

    __test__ = False  # not a pytest test class

    id: int
    module_id: int
    title: str
    total_marks: float | None = None
    results_published: bool = False
