from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Protocol

from gradebook.models.course import Assignment, Course, CourseModule, Quiz, Test


class CourseRepo(Protocol):
    """Read side of the course catalog, plus the one flag we own on tests."""

    async def get_course(self, course_id: int) -> Course | None: ...
    async def get_module(self, module_id: int) -> CourseModule | None: ...
    async def list_modules(self, course_id: int) -> list[CourseModule]: ...
    async def list_quizzes(self, module_ids: Iterable[int]) -> list[Quiz]: ...
    async def list_assignments(self, module_ids: Iterable[int]) -> list[Assignment]: ...
    async def list_tests(self, module_ids: Iterable[int]) -> list[Test]: ...
    async def get_test(self, test_id: int) -> Test | None: ...
    async def set_results_published(
        self, test_id: int, published: bool
    ) -> Test | None: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._courses: dict[int, Course] = {}
        self._modules: dict[int, CourseModule] = {}
        self._quizzes: dict[int, Quiz] = {}
        self._assignments: dict[int, Assignment] = {}
        self._tests: dict[int, Test] = {}

    def clear(self) -> None:
        self._courses.clear()
        self._modules.clear()
        self._quizzes.clear()
        self._assignments.clear()
        self._tests.clear()

    # --- seeding (the catalog is owned elsewhere; these exist for dev/tests) ---

    def add_course(self, course: Course) -> None:
        if course.id in self._courses:
            raise ValueError("course already exists")
        self._courses[course.id] = course

    def add_module(self, module: CourseModule) -> None:
        if module.course_id not in self._courses:
            raise KeyError("course not found")
        self._modules[module.id] = module

    def add_quiz(self, quiz: Quiz) -> None:
        self._quizzes[quiz.id] = quiz

    def add_assignment(self, assignment: Assignment) -> None:
        self._assignments[assignment.id] = assignment

    def add_test(self, test: Test) -> None:
        self._tests[test.id] = test

    # --- CourseRepo ---

    async def get_course(self, course_id: int) -> Course | None:
        return self._courses.get(course_id)

    async def get_module(self, module_id: int) -> CourseModule | None:
        return self._modules.get(module_id)

    async def list_modules(self, course_id: int) -> list[CourseModule]:
        modules = [m for m in self._modules.values() if m.course_id == course_id]
        return sorted(modules, key=lambda m: (m.position, m.id))

    async def list_quizzes(self, module_ids: Iterable[int]) -> list[Quiz]:
        wanted = set(module_ids)
        return [q for q in self._quizzes.values() if q.module_id in wanted]

    async def list_assignments(self, module_ids: Iterable[int]) -> list[Assignment]:
        wanted = set(module_ids)
        return [a for a in self._assignments.values() if a.module_id in wanted]

    async def list_tests(self, module_ids: Iterable[int]) -> list[Test]:
        wanted = set(module_ids)
        return [t for t in self._tests.values() if t.module_id in wanted]

    async def get_test(self, test_id: int) -> Test | None:
        return self._tests.get(test_id)

    async def set_results_published(self, test_id: int, published: bool) -> Test | None:
        test = self._tests.get(test_id)
        if test is None:
            return None
        updated = replace(test, results_published=published)
        self._tests[test_id] = updated
        return updated
