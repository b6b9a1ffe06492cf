"""PostgreSQL implementation of NotificationRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gradebook.db.tables import NotificationRow
from gradebook.models.notification import Notification


class PgNotificationRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, notification: Notification) -> None:
        self._session.add(NotificationRow(**notification.to_payload()))
        await self._session.flush()

    async def list_for_user(self, user_id: int) -> list[Notification]:
        stmt = (
            select(NotificationRow)
            .where(NotificationRow.user_id == user_id)
            .order_by(NotificationRow.created_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            Notification(
                user_id=r.user_id,
                type=r.type,
                title=r.title,
                message=r.message,
                related_id=r.related_id,
                related_type=r.related_type,
                created_at=r.created_at,
            )
            for r in rows
        ]
