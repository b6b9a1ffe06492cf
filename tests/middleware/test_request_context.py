"""X-Request-ID on gradebook responses, including refusals."""

from __future__ import annotations

import asyncio
import uuid

from fastapi.testclient import TestClient

from gradebook.api import dependencies
from tests.conftest import auth, enroll, seed_activities, seed_course


def _hidden_certificate() -> None:
    """A certificate whose course still has an unpublished test."""
    seed_course()
    seed_activities(published=False)
    enroll()
    issuer = dependencies.build_issuer(dependencies.in_memory_repos())
    asyncio.run(issuer.issue_or_update(1, 1))


def test_completion_response_gets_a_generated_uuid(client: TestClient) -> None:
    seed_course(module_ids=(10, 11))
    enroll()

    resp = client.post("/v1/progress/modules/10/complete", headers=auth())

    assert resp.status_code == 200
    uuid.UUID(resp.headers["x-request-id"])


def test_hidden_certificate_403_echoes_request_id(client: TestClient) -> None:
    _hidden_certificate()

    resp = client.get(
        "/v1/certificates/courses/1",
        headers={**auth(), "X-Request-ID": "support-ticket-4411"},
    )

    assert resp.status_code == 403
    assert resp.headers["x-request-id"] == "support-ticket-4411"


def test_publish_refusal_carries_request_id(client: TestClient) -> None:
    _hidden_certificate()

    resp = client.post(
        "/v1/tests/300/publish",
        headers={**auth(roles=["learner"]), "X-Request-ID": "pub-1"},
    )

    assert resp.status_code == 403
    assert resp.headers["x-request-id"] == "pub-1"


def test_unauthenticated_streak_still_gets_an_id(client: TestClient) -> None:
    resp = client.get("/v1/progress/streak")

    assert resp.status_code == 401
    assert resp.headers.get("x-request-id")


def test_each_request_gets_its_own_id(client: TestClient) -> None:
    first = client.get("/health").headers["x-request-id"]
    second = client.get("/health").headers["x-request-id"]

    assert first != second
