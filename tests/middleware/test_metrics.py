"""HTTP and grading metrics, asserted as deltas.

Counters in the default registry survive between tests, so each test
reads a sample before acting and compares afterwards.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import auth, enroll, seed_course


def _sample(name: str, **labels: str) -> float:
    return REGISTRY.get_sample_value(name, labels=labels) or 0.0


def test_completion_is_counted_under_its_route_template(client: TestClient) -> None:
    seed_course(module_ids=(10, 11))
    enroll()
    labels = {
        "method": "POST",
        "endpoint": "/v1/progress/modules/{module_id}/complete",
    }
    before_count = _sample("http_requests_total", status_code="200", **labels)
    before_timed = _sample("http_request_duration_seconds_count", **labels)

    client.post("/v1/progress/modules/10/complete", headers=auth())
    client.post("/v1/progress/modules/11/complete", headers=auth())

    assert _sample("http_requests_total", status_code="200", **labels) == (
        before_count + 2
    )
    assert _sample("http_request_duration_seconds_count", **labels) == (
        before_timed + 2
    )
    assert _sample(
        "http_requests_total",
        method="POST",
        endpoint="/v1/progress/modules/10/complete",
        status_code="200",
    ) == 0.0


def test_rejected_certificate_lookups_share_one_series(client: TestClient) -> None:
    labels = {
        "method": "GET",
        "endpoint": "/v1/certificates/{certificate_id}",
        "status_code": "401",
    }
    before = _sample("http_requests_total", **labels)

    client.get("/v1/certificates/123")
    client.get("/v1/certificates/456")

    assert _sample("http_requests_total", **labels) == before + 2


def test_unmatched_path_keeps_raw_path_label(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/v1/nowhere", "status_code": "404"}
    before = _sample("http_requests_total", **labels)

    client.get("/v1/nowhere")

    assert _sample("http_requests_total", **labels) == before + 1


def test_course_completion_moves_grading_counters(client: TestClient) -> None:
    seed_course(module_ids=(10,))
    enroll()
    completions = _sample("course_completions_total")
    created = _sample("certificates_issued_total", outcome="created")
    completed_events = _sample("notifications_enqueued_total", type="course_completed")
    breakdowns = _sample("grade_compute_seconds_count")

    client.post("/v1/progress/modules/10/complete", headers=auth())

    assert _sample("course_completions_total") == completions + 1
    assert _sample("certificates_issued_total", outcome="created") == created + 1
    assert (
        _sample("notifications_enqueued_total", type="course_completed")
        == completed_events + 1
    )
    assert _sample("grade_compute_seconds_count") >= breakdowns + 1


def test_scrapes_are_not_counted(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _sample("http_requests_total", **labels)

    resp = client.get("/metrics")
    client.get("/metrics")

    assert resp.status_code == 200
    assert "certificates_issued_total" in resp.text
    assert _sample("http_requests_total", **labels) == before
