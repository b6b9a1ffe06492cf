from __future__ import annotations

import asyncio
import logging

import pytest

from gradebook.models.certificate import Certificate
from gradebook.services.notifier import NOTIFICATIONS_QUEUE, Notifier
from gradebook.services.task_queue import InMemoryTaskQueue


def test_course_completed_payload() -> None:
    queue = InMemoryTaskQueue()
    notifier = Notifier(queue, clock=lambda: 1000)

    asyncio.run(notifier.course_completed(3, 12, "Databases"))

    task = asyncio.run(queue.dequeue(NOTIFICATIONS_QUEUE))
    assert task.payload == {
        "user_id": 3,
        "type": "course_completed",
        "title": "Course completed",
        "message": "Congratulations! You have completed Databases.",
        "related_id": 12,
        "related_type": "course",
        "created_at": 1000,
    }


def test_course_completed_without_title_names_the_course_id() -> None:
    queue = InMemoryTaskQueue()

    asyncio.run(Notifier(queue).course_completed(3, 12))

    task = asyncio.run(queue.dequeue(NOTIFICATIONS_QUEUE))
    assert "course 12" in task.payload["message"]


def test_certificate_issued_payload() -> None:
    queue = InMemoryTaskQueue()
    cert = Certificate(
        id=77, learner_id=3, course_id=12,
        certificate_number="CERT-2024-00005", issued_at=1000,
    )

    asyncio.run(Notifier(queue, clock=lambda: 1000).certificate_issued(3, cert))

    task = asyncio.run(queue.dequeue(NOTIFICATIONS_QUEUE))
    assert task.payload["type"] == "certificate_issued"
    assert task.payload["related_id"] == 77
    assert task.payload["related_type"] == "certificate"
    assert "CERT-2024-00005" in task.payload["message"]


class _FailingQueue(InMemoryTaskQueue):
    async def enqueue(self, queue: str, payload: dict):
        raise ConnectionError("queue unavailable")


def test_enqueue_failure_is_logged_not_raised(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.ERROR, logger="gradebook.services.notifier"):
        asyncio.run(Notifier(_FailingQueue()).course_completed(3, 12))

    assert "Failed to enqueue course_completed notification" in caplog.text
