"""Certificate endpoints for learners.

A certificate is only disclosed once every test in its course has
published results (can_view).  "Does not exist" is a 404; "exists but
is still gated" is a distinct 403, so clients can tell a learner to
wait rather than that nothing was earned.

The grade breakdown is recomputed on each read with the weights stored
on the certificate, so it always reflects the current scores.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from gradebook.api.dependencies import Repos, get_aggregator, get_repos, require_user
from gradebook.models.certificate import Certificate
from gradebook.models.principal import Principal
from gradebook.services.grade_aggregator import GradeAggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/certificates", tags=["certificates"])

NOT_AVAILABLE_DETAIL = (
    "Certificate not available yet. All test results must be published first."
)


class ActivityScoreOut(BaseModel):
    total_score: float
    max_score: float
    percentage: float
    weight: float
    weighted_score: float
    count: int


class GradeBreakdownOut(BaseModel):
    quizzes: ActivityScoreOut
    assignments: ActivityScoreOut
    tests: ActivityScoreOut
    final_grade: float
    letter_grade: str
    status: str


class CertificateOut(BaseModel):
    id: int
    course_id: int
    course_title: str | None
    learner_id: int
    certificate_number: str
    final_grade: float
    letter_grade: str
    status: str
    completed_at: int | None
    issued_at: int
    can_view: bool
    grade_breakdown: GradeBreakdownOut


async def _disclose(
    certificate: Certificate,
    repos: Repos,
    aggregator: GradeAggregator,
) -> CertificateOut:
    if not certificate.can_view:
        logger.info(
            "Certificate %s withheld: unpublished test results",
            certificate.certificate_number,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=NOT_AVAILABLE_DETAIL,
        )

    breakdown = await aggregator.compute_breakdown(
        certificate.course_id,
        certificate.learner_id,
        certificate.quiz_weight,
        certificate.assignment_weight,
        certificate.test_weight,
    )
    course = await repos.courses.get_course(certificate.course_id)
    return CertificateOut(
        id=certificate.id,
        course_id=certificate.course_id,
        course_title=course.title if course else None,
        learner_id=certificate.learner_id,
        certificate_number=certificate.certificate_number,
        final_grade=certificate.final_grade,
        letter_grade=certificate.letter_grade,
        status=certificate.status,
        completed_at=certificate.completed_at,
        issued_at=certificate.issued_at,
        can_view=True,
        grade_breakdown=GradeBreakdownOut(**breakdown.to_dict()),
    )


@router.get("/courses/{course_id}", response_model=CertificateOut)
async def get_certificate_for_course(
    course_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
    aggregator: Annotated[GradeAggregator, Depends(get_aggregator)],
) -> CertificateOut:
    certificate = await repos.certificates.get_for(principal.user_id, course_id)
    if certificate is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Certificate not found for this course",
        )
    return await _disclose(certificate, repos, aggregator)


@router.get("/{certificate_id}", response_model=CertificateOut)
async def get_certificate(
    certificate_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
    aggregator: Annotated[GradeAggregator, Depends(get_aggregator)],
) -> CertificateOut:
    certificate = await repos.certificates.get_by_id(certificate_id)
    # Someone else's certificate is reported exactly like a missing one.
    if certificate is None or certificate.learner_id != principal.user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Certificate not found",
        )
    return await _disclose(certificate, repos, aggregator)
