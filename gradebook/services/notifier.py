"""Learner notifications: decide and enqueue, never deliver.

Events go onto the "notifications" queue; the worker persists them.
Enqueueing is fire-and-forget: a broken queue must never undo a
completed course or an issued certificate, so failures are logged and
swallowed here.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from gradebook.core.metrics import NOTIFICATIONS_ENQUEUED
from gradebook.models.certificate import Certificate
from gradebook.models.notification import Notification
from gradebook.services.task_queue import TaskQueue

logger = logging.getLogger(__name__)

NOTIFICATIONS_QUEUE = "notifications"


class Notifier:
    def __init__(
        self,
        queue: TaskQueue,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._queue = queue
        self._clock = clock

    async def course_completed(
        self, learner_id: int, course_id: int, course_title: str | None = None
    ) -> None:
        title = course_title or f"course {course_id}"
        await self._send(
            Notification(
                user_id=learner_id,
                type="course_completed",
                title="Course completed",
                message=f"Congratulations! You have completed {title}.",
                related_id=course_id,
                related_type="course",
                created_at=int(self._clock()),
            )
        )

    async def certificate_issued(
        self, learner_id: int, certificate: Certificate
    ) -> None:
        await self._send(
            Notification(
                user_id=learner_id,
                type="certificate_issued",
                title="Certificate issued",
                message=(
                    f"Your certificate {certificate.certificate_number} "
                    "is ready."
                ),
                related_id=certificate.id,
                related_type="certificate",
                created_at=int(self._clock()),
            )
        )

    async def _send(self, notification: Notification) -> None:
        try:
            task = await self._queue.enqueue(
                NOTIFICATIONS_QUEUE, notification.to_payload()
            )
        except Exception:
            logger.exception(
                "Failed to enqueue %s notification for user=%s",
                notification.type,
                notification.user_id,
            )
            return
        NOTIFICATIONS_ENQUEUED.labels(type=notification.type).inc()
        logger.info(
            "Enqueued %s notification task=%s for user=%s",
            notification.type,
            task.id,
            notification.user_id,
        )
