from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.repos.filters import PromptFilter
from app.repos.follow_repo import FollowRepo
from app.repos.prompt_repo import PromptRepo
from app.schemas.common import Page, PageParams
from app.schemas.prompt import PromptSummaryOut
from app.services.prompts import summarize

log = logging.getLogger(__name__)


class FeedService:
    """Public prompts by the authors a user follows, newest first. Read-only."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.follows = FollowRepo(db)
        self.prompts = PromptRepo(db)

    async def get_feed(self, user_id: int, params: PageParams) -> Page[PromptSummaryOut]:
        following_ids = await self.follows.following_ids(user_id)
        if not following_ids:
            log.debug("User %s follows nobody; returning empty feed", user_id)
            return Page[PromptSummaryOut].empty(params)
        items, total = await self.prompts.list(PromptFilter(author_ids=following_ids), params)
        return Page[PromptSummaryOut].build(await summarize(self.db, items, user_id), total, params)
