from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Notification, NotificationType
from app.repos.base import fetch_page
from app.schemas.common import PageParams


class NotificationRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, notification: Notification) -> Notification:
        self.db.add(notification)
        await self.db.flush()
        return notification

    async def add_all(self, notifications: List[Notification]) -> None:
        if notifications:
            self.db.add_all(notifications)
            await self.db.flush()

    async def get(self, notification_id: int) -> Optional[Notification]:
        return await self.db.get(Notification, notification_id)

    async def list_for(
        self,
        recipient_id: int,
        params: PageParams,
        unread_only: bool = False,
        type: Optional[NotificationType] = None,
    ) -> Tuple[List[Notification], int]:
        stmt = select(Notification).where(Notification.recipient_id == recipient_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        if type is not None:
            stmt = stmt.where(Notification.type == type)
        stmt = stmt.order_by(desc(Notification.created_at), desc(Notification.id))
        return await fetch_page(self.db, stmt, params)

    async def unread_count(self, recipient_id: int) -> int:
        return int(await self.db.scalar(
            select(func.count(Notification.id)).where(
                Notification.recipient_id == recipient_id, Notification.is_read.is_(False)
            )
        ) or 0)

    async def mark_all_read(self, recipient_id: int, when: datetime) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.recipient_id == recipient_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=when)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def delete(self, notification: Notification) -> None:
        await self.db.delete(notification)
        await self.db.flush()

    async def delete_read_before(self, cutoff: datetime) -> int:
        """Delete notifications that were read before ``cutoff``, however old they are."""
        result = await self.db.execute(
            delete(Notification)
            .where(Notification.is_read.is_(True), Notification.read_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def delete_unread_before(self, cutoff: datetime) -> int:
        result = await self.db.execute(
            delete(Notification)
            .where(Notification.is_read.is_(False), Notification.created_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
