from __future__ import annotations

from typing import Protocol

from gradebook.models.progress import Enrollment


class EnrollmentRepo(Protocol):
    async def get(self, learner_id: int, course_id: int) -> Enrollment | None: ...
    async def add(self, enrollment: Enrollment) -> None: ...
    async def save(self, enrollment: Enrollment) -> None: ...
    async def list_for_learner(self, learner_id: int) -> list[Enrollment]: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[int, int], Enrollment] = {}

    def clear(self) -> None:
        self._store.clear()

    async def get(self, learner_id: int, course_id: int) -> Enrollment | None:
        return self._store.get((learner_id, course_id))

    async def add(self, enrollment: Enrollment) -> None:
        key = (enrollment.learner_id, enrollment.course_id)
        if key in self._store:
            raise ValueError("already enrolled")
        self._store[key] = enrollment

    async def save(self, enrollment: Enrollment) -> None:
        key = (enrollment.learner_id, enrollment.course_id)
        if key not in self._store:
            raise KeyError("enrollment not found")
        self._store[key] = enrollment

    async def list_for_learner(self, learner_id: int) -> list[Enrollment]:
        return [e for (lid, _), e in self._store.items() if lid == learner_id]
