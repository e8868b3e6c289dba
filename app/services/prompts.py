from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ForbiddenError,
    InvalidCategoryError,
    PromptNotFoundError,
    UserNotFoundError,
)
from app.db import transaction
from app.metrics.prometheus import track_engagement
from app.models import Prompt
from app.repos.engagement_repo import BookmarkRepo, FolderRepo, LikeRepo, RatingRepo
from app.repos.filters import PromptFilter
from app.repos.follow_repo import FollowRepo
from app.repos.prompt_repo import PromptRepo
from app.repos.user_repo import UserRepo
from app.schemas.common import Page, PageParams
from app.schemas.prompt import CategoryOut, PromptIn, PromptOut, PromptSummaryOut
from app.services.notifications import NotificationService

log = logging.getLogger(__name__)

CATEGORIES = {
    "coding": "Programming and code snippets",
    "writing": "Creative writing and content",
    "analysis": "Data analysis and research",
    "design": "Design and UI/UX",
    "marketing": "Marketing and sales",
    "education": "Teaching and learning",
    "productivity": "Productivity and automation",
    "other": "Miscellaneous",
}


def validate_category(category: Optional[str]) -> None:
    if category is not None and category not in CATEGORIES:
        raise InvalidCategoryError(
            f"Invalid category: {category}. Valid categories are: {', '.join(CATEGORIES)}"
        )


def list_categories() -> List[CategoryOut]:
    return [
        CategoryOut(id=category, name=category.capitalize(), description=description)
        for category, description in CATEGORIES.items()
    ]


async def summarize(db: AsyncSession, prompts: Sequence[Prompt], caller_id: Optional[int]) -> List[PromptSummaryOut]:
    """Prompt summaries annotated with the caller's like and rating state."""
    liked, scores = set(), {}
    if caller_id is not None and prompts:
        ids = [p.id for p in prompts]
        liked = await LikeRepo(db).liked_prompt_ids(caller_id, ids)
        scores = await RatingRepo(db).scores_by_user(caller_id, ids)
    summaries = []
    for prompt in prompts:
        summary = PromptSummaryOut.model_validate(prompt)
        summary.is_liked = prompt.id in liked
        summary.user_rating = scores.get(prompt.id)
        summaries.append(summary)
    return summaries


class PromptService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.prompts = PromptRepo(db)
        self.users = UserRepo(db)
        self.follows = FollowRepo(db)
        self.notifications = NotificationService(db)

    async def require_prompt(self, prompt_id: int) -> Prompt:
        prompt = await self.prompts.get(prompt_id)
        if prompt is None:
            raise PromptNotFoundError(f"Prompt not found with id: {prompt_id}")
        return prompt

    async def _require_authored(self, prompt_id: int, caller_id: int, action: str) -> Prompt:
        prompt = await self.require_prompt(prompt_id)
        if prompt.author_id != caller_id:
            raise ForbiddenError(f"You can only {action} your own prompts")
        return prompt

    async def _detail(self, prompt: Prompt, caller_id: Optional[int]) -> PromptOut:
        out = PromptOut.model_validate(prompt)
        if caller_id is not None:
            out.is_liked = await LikeRepo(self.db).get_for(prompt.id, caller_id) is not None
            out.is_bookmarked = await BookmarkRepo(self.db).get_for(prompt.id, caller_id) is not None
            rating = await RatingRepo(self.db).get_for(prompt.id, caller_id)
            out.user_rating = rating.score if rating else None
        return out

    async def create_prompt(self, author_id: int, prompt_in: PromptIn) -> PromptOut:
        validate_category(prompt_in.category)
        async with transaction(self.db):
            author = await self.users.get_user_by_id(author_id)
            if author is None:
                raise UserNotFoundError()
            prompt = await self.prompts.add(Prompt(
                author_id=author.id,
                author=author,
                title=prompt_in.title,
                description=prompt_in.description,
                content=prompt_in.content,
                category=prompt_in.category,
                tags=list(prompt_in.tags),
                is_public=prompt_in.is_public,
            ))
            fanned_out = 0
            if prompt.is_public:
                follower_ids = await self.follows.follower_ids(author.id)
                fanned_out = await self.notifications.notify_new_prompt(author, prompt, follower_ids)
        log.info("Prompt %s created by user %s (%s followers notified)", prompt.id, author_id, fanned_out)
        return await self._detail(prompt, author_id)

    async def get_prompt(self, prompt_id: int, caller_id: Optional[int] = None) -> PromptOut:
        async with transaction(self.db):
            prompt = await self.require_prompt(prompt_id)
            if not prompt.is_public and prompt.author_id != caller_id:
                raise ForbiddenError("This prompt is private")
            await self.prompts.increment_view_count(prompt)
        return await self._detail(prompt, caller_id)

    async def update_prompt(self, prompt_id: int, caller_id: int, prompt_in: PromptIn) -> PromptOut:
        validate_category(prompt_in.category)
        async with transaction(self.db):
            prompt = await self._require_authored(prompt_id, caller_id, "edit")
            prompt.title = prompt_in.title
            prompt.description = prompt_in.description
            prompt.content = prompt_in.content
            prompt.category = prompt_in.category
            prompt.tags = list(prompt_in.tags)
            prompt.is_public = prompt_in.is_public
            await self.db.flush()
        log.info("Prompt %s updated by user %s", prompt_id, caller_id)
        return await self._detail(prompt, caller_id)

    async def delete_prompt(self, prompt_id: int, caller_id: int) -> None:
        async with transaction(self.db):
            prompt = await self._require_authored(prompt_id, caller_id, "delete")
            folder_ids = await self.prompts.delete_with_dependents(prompt)
            await FolderRepo(self.db).refresh_counts(folder_ids)
        track_engagement("prompt", "delete")
        log.info("Prompt %s deleted by user %s", prompt_id, caller_id)

    async def list_prompts(
        self,
        params: PageParams,
        search: Optional[str] = None,
        category: Optional[str] = None,
        author_id: Optional[int] = None,
        caller_id: Optional[int] = None,
    ) -> Page[PromptSummaryOut]:
        if category:
            validate_category(category)
        prompt_filter = PromptFilter(
            search=search,
            category=category or None,
            author_ids=[author_id] if author_id is not None else None,
        )
        items, total = await self.prompts.list(prompt_filter, params)
        return Page[PromptSummaryOut].build(await summarize(self.db, items, caller_id), total, params)
