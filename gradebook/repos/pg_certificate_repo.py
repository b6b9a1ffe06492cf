"""PostgreSQL implementation of CertificateRepo."""

from __future__ import annotations

import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gradebook.db.tables import CertificateRow
from gradebook.models.certificate import Certificate


def _year_bounds(year: int) -> tuple[int, int]:
    start = datetime.datetime(year, 1, 1, tzinfo=datetime.UTC)
    end = datetime.datetime(year + 1, 1, 1, tzinfo=datetime.UTC)
    return int(start.timestamp()), int(end.timestamp())


class PgCertificateRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for(self, learner_id: int, course_id: int) -> Certificate | None:
        stmt = select(CertificateRow).where(
            CertificateRow.learner_id == learner_id,
            CertificateRow.course_id == course_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_certificate(row)

    async def get_by_id(self, certificate_id: int) -> Certificate | None:
        row = await self._session.get(CertificateRow, certificate_id)
        if row is None:
            return None
        return _row_to_certificate(row)

    async def add(self, certificate: Certificate) -> Certificate:
        row = CertificateRow(
            learner_id=certificate.learner_id,
            course_id=certificate.course_id,
            certificate_number=certificate.certificate_number,
            quiz_weight=certificate.quiz_weight,
            assignment_weight=certificate.assignment_weight,
            test_weight=certificate.test_weight,
            final_grade=certificate.final_grade,
            letter_grade=certificate.letter_grade,
            status=certificate.status,
            completed_at=certificate.completed_at,
            issued_at=certificate.issued_at,
            can_view=certificate.can_view,
        )
        self._session.add(row)
        # Flush so the unique constraints fire here and the id is assigned.
        await self._session.flush()
        return _row_to_certificate(row)

    async def update(self, certificate: Certificate) -> None:
        # certificate_number and issued_at are immutable; never written here.
        stmt = (
            update(CertificateRow)
            .where(CertificateRow.id == certificate.id)
            .values(
                quiz_weight=certificate.quiz_weight,
                assignment_weight=certificate.assignment_weight,
                test_weight=certificate.test_weight,
                final_grade=certificate.final_grade,
                letter_grade=certificate.letter_grade,
                status=certificate.status,
                completed_at=certificate.completed_at,
                can_view=certificate.can_view,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise KeyError("certificate not found")

    async def latest_number_for_year(self, year: int) -> str | None:
        start, end = _year_bounds(year)
        stmt = select(func.max(CertificateRow.certificate_number)).where(
            CertificateRow.issued_at >= start,
            CertificateRow.issued_at < end,
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_course(self, course_id: int) -> list[Certificate]:
        stmt = (
            select(CertificateRow)
            .where(CertificateRow.course_id == course_id)
            .order_by(CertificateRow.id)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_certificate(r) for r in rows]

    async def count_for_learner(self, learner_id: int) -> int:
        stmt = select(func.count()).where(CertificateRow.learner_id == learner_id)
        return (await self._session.execute(stmt)).scalar_one()


def _row_to_certificate(row: CertificateRow) -> Certificate:
    return Certificate(
        id=row.id,
        learner_id=row.learner_id,
        course_id=row.course_id,
        certificate_number=row.certificate_number,
        issued_at=row.issued_at,
        quiz_weight=row.quiz_weight,
        assignment_weight=row.assignment_weight,
        test_weight=row.test_weight,
        final_grade=row.final_grade,
        letter_grade=row.letter_grade,
        status=row.status,
        completed_at=row.completed_at,
        can_view=row.can_view,
    )
