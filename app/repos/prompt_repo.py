from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import (
    Notification,
    NotificationEntityType,
    Prompt,
    PromptBookmark,
    PromptLike,
    PromptRating,
)
from app.repos.base import fetch_page
from app.repos.filters import PromptFilter
from app.schemas.common import PageParams

PROMPT_ENTITY_TYPES = (
    NotificationEntityType.PROMPT,
    NotificationEntityType.RATING,
    NotificationEntityType.BOOKMARK,
)


class PromptRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, prompt_id: int) -> Optional[Prompt]:
        return await self.db.get(Prompt, prompt_id)

    async def add(self, prompt: Prompt) -> Prompt:
        self.db.add(prompt)
        await self.db.flush()
        return prompt

    async def _increment(self, prompt: Prompt, column, delta: int) -> None:
        # counters are not edits, so updated_at is left as it was
        stmt = update(Prompt).where(Prompt.id == prompt.id).values(
            {column: column + delta, Prompt.updated_at: Prompt.updated_at}
        )
        if delta < 0:
            stmt = stmt.where(column > 0)
        await self.db.execute(stmt.execution_options(synchronize_session=False))
        await self.db.refresh(prompt, [column.key])

    async def increment_view_count(self, prompt: Prompt) -> None:
        await self._increment(prompt, Prompt.view_count, 1)

    async def adjust_like_count(self, prompt: Prompt, delta: int) -> None:
        await self._increment(prompt, Prompt.like_count, delta)

    async def adjust_bookmark_count(self, prompt: Prompt, delta: int) -> None:
        await self._increment(prompt, Prompt.bookmark_count, delta)

    async def set_rating_aggregate(self, prompt: Prompt, average: float, count: int) -> None:
        await self.db.execute(
            update(Prompt)
            .where(Prompt.id == prompt.id)
            .values(average_rating=average, rating_count=count, updated_at=Prompt.updated_at)
            .execution_options(synchronize_session=False)
        )
        await self.db.refresh(prompt, ["average_rating", "rating_count"])

    async def delete_with_dependents(self, prompt: Prompt) -> List[int]:
        """Delete a prompt and every row that points at it.

        Returns the ids of bookmark folders that lost bookmarks so their counts
        can be refreshed.
        """
        folder_ids = (await self.db.scalars(
            select(PromptBookmark.folder_id)
            .where(PromptBookmark.prompt_id == prompt.id, PromptBookmark.folder_id.is_not(None))
            .distinct()
        )).all()
        for model in (PromptLike, PromptBookmark, PromptRating):
            await self.db.execute(delete(model).where(model.prompt_id == prompt.id))
        await self.db.execute(
            delete(Notification).where(
                Notification.entity_type.in_(PROMPT_ENTITY_TYPES),
                Notification.entity_id == prompt.id,
            )
        )
        await self.db.delete(prompt)
        await self.db.flush()
        return list(folder_ids)

    async def list(self, prompt_filter: PromptFilter, params: PageParams) -> Tuple[List[Prompt], int]:
        stmt = prompt_filter.apply(select(Prompt)).order_by(desc(Prompt.created_at), desc(Prompt.id))
        return await fetch_page(self.db, stmt, params)

    async def popular_bookmarked(
        self, since: Optional[datetime], params: PageParams
    ) -> Tuple[List[Prompt], int]:
        bookmark_counts = select(
            PromptBookmark.prompt_id.label("prompt_id"),
            func.count(PromptBookmark.id).label("bookmarks"),
        )
        if since is not None:
            bookmark_counts = bookmark_counts.where(PromptBookmark.created_at >= since)
        bookmark_counts = bookmark_counts.group_by(PromptBookmark.prompt_id).subquery()
        stmt = (
            select(Prompt)
            .join(bookmark_counts, bookmark_counts.c.prompt_id == Prompt.id)
            .where(Prompt.is_public.is_(True))
            .order_by(desc(bookmark_counts.c.bookmarks), desc(Prompt.created_at), desc(Prompt.id))
        )
        return await fetch_page(self.db, stmt, params)
