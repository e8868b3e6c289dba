"""User-to-user follow graph.

The ``follower_count``/``following_count`` columns on ``users`` are moved in the
same transaction as the edge they count.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AlreadyFollowingError, NotFollowingError, UserNotFoundError
from app.db import transaction
from app.metrics.prometheus import track_engagement
from app.models import User, UserFollow
from app.repos.follow_repo import FollowRepo
from app.repos.user_repo import UserRepo
from app.schemas.common import Page, PageParams
from app.schemas.follow import FollowEntryOut, FollowStatusOut
from app.services.notifications import NotificationService
from app.services.policy import Interaction, ensure_allowed

__all__ = ["FollowService"]

log = logging.getLogger(__name__)


class FollowService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.follows = FollowRepo(db)
        self.users = UserRepo(db)
        self.notifications = NotificationService(db)

    async def _require_user(self, user_id: int, label: str = "User") -> User:
        user = await self.users.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"{label} not found")
        return user

    async def follow_user(self, follower_id: int, following_id: int) -> None:
        """Make ``follower_id`` follow ``following_id``."""
        ensure_allowed(Interaction.FOLLOW, follower_id, following_id)
        async with transaction(self.db):
            follower = await self._require_user(follower_id, "Follower")
            await self._require_user(following_id)
            if await self.follows.exists(follower_id, following_id):
                raise AlreadyFollowingError()
            try:
                await self.follows.add(follower_id, following_id)
            except IntegrityError as exc:
                raise AlreadyFollowingError() from exc
            await self.users.adjust_follow_counts(follower_id, following_id, 1)
            await self.notifications.notify_user_followed(follower, following_id)
        track_engagement("follow", "add")
        log.info("User %s followed user %s", follower_id, following_id)

    async def unfollow_user(self, follower_id: int, following_id: int) -> None:
        async with transaction(self.db):
            follow = await self.follows.get(follower_id, following_id)
            if follow is None:
                raise NotFollowingError()
            await self.follows.delete(follow)
            await self.users.adjust_follow_counts(follower_id, following_id, -1)
        track_engagement("follow", "remove")
        log.info("User %s unfollowed user %s", follower_id, following_id)

    async def follow_status(self, requester_id: int, target_id: int) -> FollowStatusOut:
        return FollowStatusOut(
            is_following=await self.follows.exists(requester_id, target_id),
            is_followed_by=await self.follows.exists(target_id, requester_id),
        )

    async def _entries(
        self, rows: List[Tuple[User, UserFollow]], requester_id: Optional[int]
    ) -> List[FollowEntryOut]:
        user_ids = [user.id for user, _ in rows]
        prompt_counts = await self.users.public_prompt_counts(user_ids)
        followed = (
            await self.follows.followed_among(requester_id, user_ids) if requester_id is not None else set()
        )
        return [
            FollowEntryOut(
                id=user.id,
                nickname=user.nickname,
                follower_count=user.follower_count,
                following_count=user.following_count,
                prompt_count=prompt_counts.get(user.id, 0),
                is_following=user.id in followed,
                followed_at=edge.created_at,
            )
            for user, edge in rows
        ]

    async def list_followers(
        self, user_id: int, params: PageParams, requester_id: Optional[int] = None
    ) -> Page[FollowEntryOut]:
        await self._require_user(user_id)
        rows, total = await self.follows.followers_page(user_id, params)
        return Page[FollowEntryOut].build(await self._entries(rows, requester_id), total, params)

    async def list_following(
        self, user_id: int, params: PageParams, requester_id: Optional[int] = None
    ) -> Page[FollowEntryOut]:
        await self._require_user(user_id)
        rows, total = await self.follows.following_page(user_id, params)
        return Page[FollowEntryOut].build(await self._entries(rows, requester_id), total, params)
