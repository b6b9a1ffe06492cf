from __future__ import annotations

from typing import Protocol

from gradebook.models.notification import Notification


class NotificationRepo(Protocol):
    async def add(self, notification: Notification) -> None: ...
    async def list_for_user(self, user_id: int) -> list[Notification]: ...


class InMemoryNotificationRepo:
    def __init__(self) -> None:
        self._store: list[Notification] = []

    def clear(self) -> None:
        self._store.clear()

    async def add(self, notification: Notification) -> None:
        self._store.append(notification)

    async def list_for_user(self, user_id: int) -> list[Notification]:
        return [n for n in self._store if n.user_id == user_id]
