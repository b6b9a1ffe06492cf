"""Background worker process.

RUN:  python -m gradebook.worker

Same image as the API, different command:
  api:    uvicorn gradebook.main:app --host 0.0.0.0 --port 8000
  worker: python -m gradebook.worker

The loop polls every registered queue in turn, hands each task to its
handler and logs the outcome.  A failing task is logged and dropped;
the loop keeps going.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from gradebook.core.config import SETTINGS
from gradebook.core.logging import setup_logging
from gradebook.db.engine import async_session_factory, session_scope
from gradebook.models.notification import Notification
from gradebook.repos.notification_repo import InMemoryNotificationRepo
from gradebook.repos.pg_notification_repo import PgNotificationRepo
from gradebook.services.notifier import NOTIFICATIONS_QUEUE
from gradebook.services.task_queue import task_queue

TaskHandler = Callable[[dict], Coroutine[Any, Any, None]]

logger = logging.getLogger("gradebook.worker")

# Used when DATABASE_URL is unset (local runs and tests).
notification_store = InMemoryNotificationRepo()


# ---------------------------------------------------------------------------
# Handler registry
# ---------------------------------------------------------------------------

HANDLERS: dict[str, TaskHandler] = {}


def register_handler(queue: str):
    """Decorator: register a coroutine as the handler for a queue."""

    def decorator(func):
        HANDLERS[queue] = func
        return func

    return decorator


# ---------------------------------------------------------------------------
# Task handlers
# ---------------------------------------------------------------------------


@register_handler(NOTIFICATIONS_QUEUE)
async def handle_notification(payload: dict) -> None:
    """Store a learner notification for the UI to pick up."""
    notification = Notification.from_payload(payload)

    if async_session_factory is None:
        await notification_store.add(notification)
    else:
        async with session_scope() as session:
            await PgNotificationRepo(session).add(notification)

    logger.info(
        "Stored %s notification for user=%s related=%s:%s",
        notification.type,
        notification.user_id,
        notification.related_type,
        notification.related_id,
    )


# ---------------------------------------------------------------------------
# Main worker loop
# ---------------------------------------------------------------------------


async def process_one(queue_name: str, timeout: int = 1) -> bool:
    """Dequeue and handle at most one task; True if one was taken."""
    task = await task_queue.dequeue(queue_name, timeout=timeout)
    if task is None:
        return False

    handler = HANDLERS[queue_name]
    try:
        await handler(task.payload)
        logger.info("Task %s on [%s] completed", task.id, queue_name)
    except Exception:
        logger.exception("Task %s on [%s] failed", task.id, queue_name)
    return True


async def run_worker() -> None:
    """Poll all registered queues and dispatch tasks to handlers."""
    queues = list(HANDLERS.keys())
    logger.info("Worker started, listening on queues: %s", queues)

    while True:
        for queue_name in queues:
            await process_one(queue_name)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
