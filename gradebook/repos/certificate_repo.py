from __future__ import annotations

import datetime
from dataclasses import replace
from typing import Protocol

from gradebook.models.certificate import Certificate


class CertificateRepo(Protocol):
    async def get_for(self, learner_id: int, course_id: int) -> Certificate | None: ...
    async def get_by_id(self, certificate_id: int) -> Certificate | None: ...

    async def add(self, certificate: Certificate) -> Certificate:
        """Insert and return the stored row (with its assigned id)."""
        ...

    async def update(self, certificate: Certificate) -> None: ...

    async def latest_number_for_year(self, year: int) -> str | None:
        """Highest certificate_number among certificates issued in `year`."""
        ...

    async def list_for_course(self, course_id: int) -> list[Certificate]: ...
    async def count_for_learner(self, learner_id: int) -> int: ...


def _issued_year(certificate: Certificate) -> int:
    return datetime.datetime.fromtimestamp(certificate.issued_at, datetime.UTC).year


class InMemoryCertificateRepo:
    def __init__(self) -> None:
        self._by_id: dict[int, Certificate] = {}
        self._next_id = 1

    def clear(self) -> None:
        self._by_id.clear()
        self._next_id = 1

    async def get_for(self, learner_id: int, course_id: int) -> Certificate | None:
        for cert in self._by_id.values():
            if cert.learner_id == learner_id and cert.course_id == course_id:
                return cert
        return None

    async def get_by_id(self, certificate_id: int) -> Certificate | None:
        return self._by_id.get(certificate_id)

    async def add(self, certificate: Certificate) -> Certificate:
        # Mirror the table's unique constraints.
        if await self.get_for(certificate.learner_id, certificate.course_id):
            raise ValueError("certificate already exists for learner and course")
        if any(
            c.certificate_number == certificate.certificate_number
            for c in self._by_id.values()
        ):
            raise ValueError("certificate number already exists")

        stored = replace(certificate, id=self._next_id)
        self._by_id[stored.id] = stored
        self._next_id += 1
        return stored

    async def update(self, certificate: Certificate) -> None:
        if certificate.id not in self._by_id:
            raise KeyError("certificate not found")
        self._by_id[certificate.id] = certificate

    async def latest_number_for_year(self, year: int) -> str | None:
        numbers = [
            c.certificate_number
            for c in self._by_id.values()
            if _issued_year(c) == year
        ]
        return max(numbers, default=None)

    async def list_for_course(self, course_id: int) -> list[Certificate]:
        return [c for c in self._by_id.values() if c.course_id == course_id]

    async def count_for_learner(self, learner_id: int) -> int:
        return sum(1 for c in self._by_id.values() if c.learner_id == learner_id)
