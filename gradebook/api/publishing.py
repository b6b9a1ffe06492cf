"""Instructor endpoint for publishing test results.

POST /v1/tests/{test_id}/publish  {"published": true|false}
  -> flip results_published on the test
  -> re-evaluate every certificate in the test's course (can_view and
     grades), without notifications
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from gradebook.api.dependencies import get_publisher, require_any_role
from gradebook.models.principal import Principal
from gradebook.services.publication import (
    NotCourseInstructorError,
    ResultsPublisher,
    TestNotFoundError,
)

router = APIRouter(prefix="/v1/tests", tags=["tests"])

_require_staff = require_any_role({"instructor", "admin"})


class PublishIn(BaseModel):
    published: bool = True


class PublishOut(BaseModel):
    test_id: int
    course_id: int
    results_published: bool
    can_view: bool


@router.post("/{test_id}/publish", response_model=PublishOut)
async def publish_test_results(
    test_id: int,
    principal: Annotated[Principal, Depends(_require_staff)],
    publisher: Annotated[ResultsPublisher, Depends(get_publisher)],
    body: PublishIn | None = None,
) -> PublishOut:
    published = body.published if body else True
    try:
        result = await publisher.set_results_published(principal, test_id, published)
    except TestNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Test not found",
        ) from None
    except NotCourseInstructorError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not teach this course",
        ) from None
    return PublishOut(
        test_id=result.test_id,
        course_id=result.course_id,
        results_published=result.results_published,
        can_view=result.can_view,
    )
