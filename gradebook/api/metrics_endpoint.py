"""Prometheus scrape endpoint.

Plain-text exposition format, not JSON.  Besides the HTTP series it
carries grade_compute_seconds, certificates_issued_total,
course_completions_total, notifications_enqueued_total and
task_queue_depth.

Metric data reveals request rates and error patterns; in production,
expose it only to the Prometheus server.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
