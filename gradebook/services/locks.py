"""Per-key mutual exclusion for read-compute-write sequences.

Certificate issuance reads the current certificate, computes a fresh
breakdown and writes the result back.  Two concurrent issuances for the
same learner+course must not interleave, and new certificate numbers
must be handed out one at a time.  Callers wrap those sections in
``async with lock.hold(key):``.

Same shape as the task queue: a Protocol, an in-process implementation
for dev/tests, and a Redis implementation shared by every API instance
and the worker.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol, runtime_checkable

from gradebook.core.config import SETTINGS
from gradebook.db.redis import redis_pool

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyedLock(Protocol):
    def hold(self, key: str) -> AbstractAsyncContextManager[None]: ...


class InMemoryKeyedLock:
    """One asyncio.Lock per key; only serializes within this process.

    A key's lock is dropped once its last holder or waiter leaves, so
    per-day activity keys don't accumulate.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def clear(self) -> None:
        self._locks.clear()
        self._users.clear()

    def is_held(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._users.get(key, 1) - 1
            if remaining:
                self._users[key] = remaining
            else:
                self._users.pop(key, None)
                self._locks.pop(key, None)


class RedisKeyedLock:
    """redis-py Lock per key.

    timeout bounds how long a crashed holder can keep the key;
    blocking_timeout bounds how long a caller waits before LockError.
    """

    _PREFIX = "lock:"

    def __init__(self, redis_client, timeout: int) -> None:
        self._redis = redis_client
        self._timeout = timeout

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._redis.lock(
            f"{self._PREFIX}{key}",
            timeout=self._timeout,
            blocking_timeout=self._timeout,
        )
        async with lock:
            logger.debug("Lock acquired: %s", key)
            yield


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

if redis_pool is not None:
    keyed_lock: KeyedLock = RedisKeyedLock(redis_pool, SETTINGS.lock_timeout_seconds)
else:
    keyed_lock = InMemoryKeyedLock()
