"""Notification outbox: persistence, recipient-side reads and the event producers.

Producers (``notify_*``) only add rows to the caller's session; the caller's
``transaction`` decides whether they are committed together with the event
that triggered them.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ForbiddenError, NotificationNotFoundError, UserNotFoundError
from app.db import transaction, utcnow
from app.metrics.prometheus import (
    notification_purge_duration,
    track_duration,
    track_notification,
    track_purge,
)
from app.models import Notification, NotificationEntityType, NotificationType, Prompt, User
from app.repos.notification_repo import NotificationRepo
from app.repos.user_repo import UserRepo
from app.schemas.common import Page, PageParams
from app.schemas.notification import NotificationOut

log = logging.getLogger(__name__)

TITLE_PREVIEW_LENGTH = 100


def star_string(score: int) -> str:
    return "★" * score + "☆" * (5 - score)


def _preview(title: str) -> str:
    return title[:TITLE_PREVIEW_LENGTH]


class NotificationService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationRepo(db)
        self.users = UserRepo(db)

    # ── persistence ──────────────────────────────────────────────────────────
    async def create_notification(
        self,
        recipient_id: int,
        type: NotificationType,
        title: str,
        message: str,
        sender: Optional[User] = None,
        entity_type: Optional[NotificationEntityType] = None,
        entity_id: Optional[int] = None,
    ) -> Notification:
        """Add a notification to the current unit of work; the caller commits."""
        if await self.users.get_user_by_id(recipient_id) is None:
            raise UserNotFoundError("Recipient not found")
        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender.id if sender else None,
            sender=sender,
            type=type,
            title=title,
            message=message,
            entity_type=entity_type,
            entity_id=entity_id,
            is_read=False,
        )
        await self.notifications.add(notification)
        track_notification(type)
        return notification

    async def create_system_announcement(self, recipient_id: int, title: str, message: str) -> Notification:
        async with transaction(self.db):
            notification = await self.create_notification(
                recipient_id, NotificationType.SYSTEM_ANNOUNCEMENT, title, message
            )
        log.info("System announcement %s sent to user %s", notification.id, recipient_id)
        return notification

    # ── producers ────────────────────────────────────────────────────────────
    async def notify_user_followed(self, follower: User, followed_id: int) -> Notification:
        return await self.create_notification(
            followed_id,
            NotificationType.USER_FOLLOWED,
            "New follower",
            f"{follower.nickname} started following you",
            sender=follower,
            entity_type=NotificationEntityType.USER,
            entity_id=follower.id,
        )

    async def notify_new_prompt(self, author: User, prompt: Prompt, follower_ids: Iterable[int]) -> int:
        """Fan a new public prompt out to the author's followers."""
        recipients = [follower_id for follower_id in follower_ids if follower_id != author.id]
        if not recipients:
            return 0
        title = _preview(prompt.title)
        await self.notifications.add_all([
            Notification(
                recipient_id=recipient_id,
                sender_id=author.id,
                sender=author,
                type=NotificationType.NEW_PROMPT_FROM_FOLLOWED,
                title=f"New prompt from {author.nickname}",
                message=f"{author.nickname} published a new prompt: {title}",
                entity_type=NotificationEntityType.PROMPT,
                entity_id=prompt.id,
                is_read=False,
            )
            for recipient_id in recipients
        ])
        track_notification(NotificationType.NEW_PROMPT_FROM_FOLLOWED, len(recipients))
        return len(recipients)

    async def notify_prompt_liked(self, liker: User, prompt: Prompt) -> Optional[Notification]:
        if liker.id == prompt.author_id:
            return None
        return await self.create_notification(
            prompt.author_id,
            NotificationType.PROMPT_LIKED,
            "Your prompt was liked",
            f"{liker.nickname} liked your prompt: {_preview(prompt.title)}",
            sender=liker,
            entity_type=NotificationEntityType.PROMPT,
            entity_id=prompt.id,
        )

    async def notify_prompt_rated(self, rater: User, prompt: Prompt, score: int) -> Optional[Notification]:
        if rater.id == prompt.author_id:
            return None
        return await self.create_notification(
            prompt.author_id,
            NotificationType.PROMPT_RATED,
            "Your prompt was rated",
            f'{rater.nickname} rated your prompt "{_preview(prompt.title)}" {star_string(score)}',
            sender=rater,
            entity_type=NotificationEntityType.RATING,
            entity_id=prompt.id,
        )

    async def notify_prompt_bookmarked(self, bookmarker: User, prompt: Prompt) -> Optional[Notification]:
        if bookmarker.id == prompt.author_id:
            return None
        return await self.create_notification(
            prompt.author_id,
            NotificationType.PROMPT_BOOKMARKED,
            "Your prompt was bookmarked",
            f"{bookmarker.nickname} bookmarked your prompt: {_preview(prompt.title)}",
            sender=bookmarker,
            entity_type=NotificationEntityType.BOOKMARK,
            entity_id=prompt.id,
        )

    # ── recipient operations ─────────────────────────────────────────────────
    async def list_notifications(
        self,
        user_id: int,
        params: PageParams,
        unread_only: bool = False,
        type: Optional[NotificationType] = None,
    ) -> Page[NotificationOut]:
        items, total = await self.notifications.list_for(user_id, params, unread_only=unread_only, type=type)
        return Page[NotificationOut].build(
            [NotificationOut.model_validate(n) for n in items], total, params
        )

    async def _get_owned(self, notification_id: int, user_id: int) -> Notification:
        notification = await self.notifications.get(notification_id)
        if notification is None:
            raise NotificationNotFoundError()
        if notification.recipient_id != user_id:
            log.warning("User %s tried to access notification %s", user_id, notification_id)
            raise ForbiddenError("Cannot access another user's notification")
        return notification

    async def mark_as_read(self, notification_id: int, user_id: int) -> NotificationOut:
        async with transaction(self.db):
            notification = await self._get_owned(notification_id, user_id)
            notification.mark_as_read(utcnow())
            await self.db.flush()
        return NotificationOut.model_validate(notification)

    async def mark_all_as_read(self, user_id: int) -> int:
        async with transaction(self.db):
            updated = await self.notifications.mark_all_read(user_id, utcnow())
        log.info("Marked %s notifications read for user %s", updated, user_id)
        return updated

    async def delete_notification(self, notification_id: int, user_id: int) -> None:
        async with transaction(self.db):
            notification = await self._get_owned(notification_id, user_id)
            await self.notifications.delete(notification)
        log.info("Notification %s deleted by user %s", notification_id, user_id)

    async def unread_count(self, user_id: int) -> int:
        return await self.notifications.unread_count(user_id)

    async def cleanup_old_notifications(self) -> int:
        """Delete notifications read longer ago than read retention, and unread ones older than unread retention."""
        now = utcnow()
        read_cutoff = now - timedelta(days=settings.notification_read_retention_days)
        unread_cutoff = now - timedelta(days=settings.notification_unread_retention_days)
        async with transaction(self.db):
            with track_duration(notification_purge_duration):
                read_deleted = await self.notifications.delete_read_before(read_cutoff)
                unread_deleted = await self.notifications.delete_unread_before(unread_cutoff)
        track_purge(read_deleted, unread_deleted)
        log.info("Notification cleanup removed %s read and %s unread", read_deleted, unread_deleted)
        return read_deleted + unread_deleted
