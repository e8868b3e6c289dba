from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, PromptNotFoundError, UserNotFoundError
from app.db import transaction
from app.metrics.prometheus import track_engagement
from app.repos.engagement_repo import LikeRepo
from app.repos.prompt_repo import PromptRepo
from app.repos.user_repo import UserRepo
from app.schemas.prompt import LikeToggleOut
from app.services.notifications import NotificationService
from app.services.policy import Interaction, ensure_allowed

log = logging.getLogger(__name__)


class LikeService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.likes = LikeRepo(db)
        self.prompts = PromptRepo(db)
        self.users = UserRepo(db)
        self.notifications = NotificationService(db)

    async def toggle_like(self, prompt_id: int, user_id: int) -> LikeToggleOut:
        """Like the prompt, or undo an existing like; existence of the row is the state."""
        async with transaction(self.db):
            prompt = await self.prompts.get(prompt_id)
            if prompt is None:
                raise PromptNotFoundError(f"Prompt not found with id: {prompt_id}")
            user = await self.users.get_user_by_id(user_id)
            if user is None:
                raise UserNotFoundError()
            ensure_allowed(Interaction.LIKE, user.id, prompt.author_id)
            existing = await self.likes.get_for(prompt.id, user.id)
            if existing is not None:
                await self.likes.delete(existing)
                await self.prompts.adjust_like_count(prompt, -1)
                liked = False
            else:
                try:
                    await self.likes.add(prompt.id, user.id)
                except IntegrityError as exc:
                    raise ConflictError("Prompt already liked") from exc
                await self.prompts.adjust_like_count(prompt, 1)
                await self.notifications.notify_prompt_liked(user, prompt)
                liked = True
        track_engagement("like", "add" if liked else "remove")
        log.info("User %s %s prompt %s", user_id, "liked" if liked else "unliked", prompt_id)
        return LikeToggleOut(liked=liked, like_count=prompt.like_count)
