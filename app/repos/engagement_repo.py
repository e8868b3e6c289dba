from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import BookmarkFolder, Prompt, PromptBookmark, PromptLike, PromptRating
from app.repos.base import fetch_page
from app.repos.filters import BookmarkFilter
from app.schemas.common import PageParams


class RatingRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for(self, prompt_id: int, user_id: int) -> Optional[PromptRating]:
        return await self.db.scalar(
            select(PromptRating).where(PromptRating.prompt_id == prompt_id, PromptRating.user_id == user_id)
        )

    async def exists_for(self, prompt_id: int, user_id: int) -> bool:
        found = await self.db.scalar(
            select(PromptRating.id).where(PromptRating.prompt_id == prompt_id, PromptRating.user_id == user_id)
        )
        return found is not None

    async def add(self, rating: PromptRating) -> PromptRating:
        self.db.add(rating)
        await self.db.flush()
        return rating

    async def delete(self, rating: PromptRating) -> None:
        await self.db.delete(rating)
        await self.db.flush()

    async def aggregate(self, prompt_id: int) -> Tuple[float, int]:
        """Return ``(average, count)``; the average is 0.0 when there are no ratings."""
        row = (await self.db.execute(
            select(func.avg(PromptRating.score), func.count(PromptRating.id))
            .where(PromptRating.prompt_id == prompt_id)
        )).one()
        average, count = row
        return (round(float(average), 2) if average is not None else 0.0), int(count)

    async def distribution(self, prompt_id: int) -> Dict[int, int]:
        rows = await self.db.execute(
            select(PromptRating.score, func.count(PromptRating.id))
            .where(PromptRating.prompt_id == prompt_id)
            .group_by(PromptRating.score)
        )
        counts = dict(rows.all())
        return {score: int(counts.get(score, 0)) for score in range(1, 6)}

    async def scores_by_user(self, user_id: int, prompt_ids: Iterable[int]) -> Dict[int, int]:
        ids = list(prompt_ids)
        if not ids:
            return {}
        rows = await self.db.execute(
            select(PromptRating.prompt_id, PromptRating.score)
            .where(PromptRating.user_id == user_id, PromptRating.prompt_id.in_(ids))
        )
        return dict(rows.all())

    async def list_for_prompt(
        self, prompt_id: int, params: PageParams, with_comment_only: bool = False
    ) -> Tuple[List[PromptRating], int]:
        stmt = select(PromptRating).where(PromptRating.prompt_id == prompt_id)
        if with_comment_only:
            stmt = stmt.where(PromptRating.comment.is_not(None))
        stmt = stmt.order_by(desc(PromptRating.created_at), desc(PromptRating.id))
        return await fetch_page(self.db, stmt, params)


class LikeRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for(self, prompt_id: int, user_id: int) -> Optional[PromptLike]:
        return await self.db.scalar(
            select(PromptLike).where(PromptLike.prompt_id == prompt_id, PromptLike.user_id == user_id)
        )

    async def add(self, prompt_id: int, user_id: int) -> PromptLike:
        like = PromptLike(prompt_id=prompt_id, user_id=user_id)
        self.db.add(like)
        await self.db.flush()
        return like

    async def delete(self, like: PromptLike) -> None:
        await self.db.delete(like)
        await self.db.flush()

    async def liked_prompt_ids(self, user_id: int, prompt_ids: Iterable[int]) -> Set[int]:
        ids = list(prompt_ids)
        if not ids:
            return set()
        rows = await self.db.scalars(
            select(PromptLike.prompt_id).where(PromptLike.user_id == user_id, PromptLike.prompt_id.in_(ids))
        )
        return set(rows.all())


class BookmarkRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for(self, prompt_id: int, user_id: int) -> Optional[PromptBookmark]:
        return await self.db.scalar(
            select(PromptBookmark).where(PromptBookmark.prompt_id == prompt_id, PromptBookmark.user_id == user_id)
        )

    async def get_owned(self, bookmark_id: int, user_id: int) -> Optional[PromptBookmark]:
        return await self.db.scalar(
            select(PromptBookmark).where(PromptBookmark.id == bookmark_id, PromptBookmark.user_id == user_id)
        )

    async def add(self, prompt: Prompt, user_id: int) -> PromptBookmark:
        bookmark = PromptBookmark(prompt_id=prompt.id, prompt=prompt, user_id=user_id, folder_id=None, folder=None)
        self.db.add(bookmark)
        await self.db.flush()
        return bookmark

    async def delete(self, bookmark: PromptBookmark) -> None:
        await self.db.delete(bookmark)
        await self.db.flush()

    async def list(self, bookmark_filter: BookmarkFilter, params: PageParams) -> Tuple[List[PromptBookmark], int]:
        stmt = bookmark_filter.apply(select(PromptBookmark)).order_by(
            desc(PromptBookmark.created_at), desc(PromptBookmark.id)
        )
        return await fetch_page(self.db, stmt, params)

    async def detach_folder(self, folder_id: int) -> int:
        """Move every bookmark of a folder to "no folder"."""
        members = (await self.db.scalars(
            select(PromptBookmark).where(PromptBookmark.folder_id == folder_id)
        )).unique().all()
        for bookmark in members:
            bookmark.folder = None
        await self.db.flush()
        return len(members)


class FolderRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_for_user(self, user_id: int) -> int:
        return int(await self.db.scalar(
            select(func.count(BookmarkFolder.id)).where(BookmarkFolder.user_id == user_id)
        ) or 0)

    async def get_owned(self, folder_id: int, user_id: int) -> Optional[BookmarkFolder]:
        return await self.db.scalar(
            select(BookmarkFolder).where(BookmarkFolder.id == folder_id, BookmarkFolder.user_id == user_id)
        )

    async def get_by_name(self, user_id: int, name: str) -> Optional[BookmarkFolder]:
        return await self.db.scalar(
            select(BookmarkFolder).where(BookmarkFolder.user_id == user_id, BookmarkFolder.name == name)
        )

    async def list_for_user(self, user_id: int) -> List[BookmarkFolder]:
        rows = await self.db.scalars(
            select(BookmarkFolder)
            .where(BookmarkFolder.user_id == user_id)
            .order_by(desc(BookmarkFolder.created_at), desc(BookmarkFolder.id))
        )
        return list(rows.all())

    async def add(self, folder: BookmarkFolder) -> BookmarkFolder:
        self.db.add(folder)
        await self.db.flush()
        return folder

    async def delete(self, folder: BookmarkFolder) -> None:
        await self.db.delete(folder)
        await self.db.flush()

    async def refresh_counts(self, folder_ids: Iterable[Optional[int]]) -> None:
        """Recompute ``bookmark_count`` from the bookmarks each folder holds."""
        for folder_id in {f for f in folder_ids if f is not None}:
            member_count = (
                select(func.count(PromptBookmark.id))
                .where(PromptBookmark.folder_id == folder_id)
                .scalar_subquery()
            )
            await self.db.execute(
                update(BookmarkFolder)
                .where(BookmarkFolder.id == folder_id)
                .values(bookmark_count=member_count)
                .execution_options(synchronize_session=False)
            )
            folder = await self.db.get(BookmarkFolder, folder_id)
            if folder is not None:
                await self.db.refresh(folder, ["bookmark_count"])
