from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    BookmarkFolderLimitExceededError,
    BookmarkFolderNotFoundError,
    BookmarkNotFoundError,
    ConflictError,
    FolderNameAlreadyExistsError,
    InvalidInputError,
    PromptNotFoundError,
    UserNotFoundError,
)
from app.db import transaction, utcnow
from app.metrics.prometheus import track_engagement
from app.models import BookmarkFolder
from app.repos.engagement_repo import BookmarkRepo, FolderRepo
from app.repos.filters import BookmarkFilter
from app.repos.prompt_repo import PromptRepo
from app.repos.user_repo import UserRepo
from app.schemas.bookmark import (
    BookmarkFolderIn,
    BookmarkFolderOut,
    BookmarkOut,
    BookmarkStatusOut,
    BookmarkToggleOut,
    MoveBookmarkOut,
)
from app.schemas.common import Page, PageParams
from app.schemas.prompt import PromptSummaryOut
from app.services.notifications import NotificationService
from app.services.policy import Interaction, ensure_allowed
from app.services.prompts import summarize

log = logging.getLogger(__name__)

TIMEFRAMES = {"week": timedelta(days=7), "month": timedelta(days=30), "all": None}


class BookmarkService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookmarks = BookmarkRepo(db)
        self.folders = FolderRepo(db)
        self.prompts = PromptRepo(db)
        self.users = UserRepo(db)
        self.notifications = NotificationService(db)

    # ── bookmarks ────────────────────────────────────────────────────────────
    async def toggle_bookmark(self, prompt_id: int, user_id: int) -> BookmarkToggleOut:
        async with transaction(self.db):
            prompt = await self.prompts.get(prompt_id)
            if prompt is None:
                raise PromptNotFoundError(f"Prompt not found with id: {prompt_id}")
            user = await self.users.get_user_by_id(user_id)
            if user is None:
                raise UserNotFoundError()
            ensure_allowed(Interaction.BOOKMARK, user.id, prompt.author_id)
            existing = await self.bookmarks.get_for(prompt.id, user.id)
            if existing is not None:
                folder_id = existing.folder_id
                await self.bookmarks.delete(existing)
                await self.prompts.adjust_bookmark_count(prompt, -1)
                await self.folders.refresh_counts([folder_id])
                bookmarked = False
            else:
                try:
                    await self.bookmarks.add(prompt, user.id)
                except IntegrityError as exc:
                    raise ConflictError("Prompt already bookmarked") from exc
                await self.prompts.adjust_bookmark_count(prompt, 1)
                await self.notifications.notify_prompt_bookmarked(user, prompt)
                bookmarked = True
        track_engagement("bookmark", "add" if bookmarked else "remove")
        log.info("User %s %s prompt %s", user_id, "bookmarked" if bookmarked else "unbookmarked", prompt_id)
        return BookmarkToggleOut(bookmarked=bookmarked, bookmark_count=prompt.bookmark_count)

    async def bookmark_status(self, prompt_id: int, user_id: int) -> BookmarkStatusOut:
        if await self.prompts.get(prompt_id) is None:
            raise PromptNotFoundError(f"Prompt not found with id: {prompt_id}")
        return BookmarkStatusOut(bookmarked=await self.bookmarks.get_for(prompt_id, user_id) is not None)

    async def move_bookmark(
        self, bookmark_id: int, user_id: int, folder_id: Optional[int]
    ) -> MoveBookmarkOut:
        """Put a bookmark in one of the user's folders; ``None`` means uncategorized."""
        async with transaction(self.db):
            bookmark = await self.bookmarks.get_owned(bookmark_id, user_id)
            if bookmark is None:
                raise BookmarkNotFoundError()
            target = None
            if folder_id is not None:
                target = await self.folders.get_owned(folder_id, user_id)
                if target is None:
                    raise BookmarkFolderNotFoundError()
            previous_folder_id = bookmark.folder_id
            bookmark.folder = target
            bookmark.folder_id = target.id if target else None
            await self.db.flush()
            await self.folders.refresh_counts([previous_folder_id, bookmark.folder_id])
        log.info("Bookmark %s moved to folder %s by user %s", bookmark_id, folder_id, user_id)
        return MoveBookmarkOut.model_validate(bookmark)

    async def list_bookmarks(
        self,
        user_id: int,
        params: PageParams,
        folder_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Page[BookmarkOut]:
        if folder_id is not None and await self.folders.get_owned(folder_id, user_id) is None:
            raise BookmarkFolderNotFoundError()
        items, total = await self.bookmarks.list(
            BookmarkFilter(user_id=user_id, folder_id=folder_id, search=search), params
        )
        return Page[BookmarkOut].build([BookmarkOut.model_validate(b) for b in items], total, params)

    async def popular_bookmarked(
        self, timeframe: str, params: PageParams, caller_id: Optional[int] = None
    ) -> Page[PromptSummaryOut]:
        if timeframe not in TIMEFRAMES:
            raise InvalidInputError(f"Invalid timeframe: {timeframe}. Use one of: {', '.join(TIMEFRAMES)}")
        window = TIMEFRAMES[timeframe]
        since = utcnow() - window if window is not None else None
        items, total = await self.prompts.popular_bookmarked(since, params)
        return Page[PromptSummaryOut].build(await summarize(self.db, items, caller_id), total, params)

    # ── folders ──────────────────────────────────────────────────────────────
    async def list_folders(self, user_id: int) -> List[BookmarkFolderOut]:
        return [BookmarkFolderOut.model_validate(f) for f in await self.folders.list_for_user(user_id)]

    async def create_folder(self, user_id: int, folder_in: BookmarkFolderIn) -> BookmarkFolderOut:
        async with transaction(self.db):
            if await self.users.get_user_by_id(user_id) is None:
                raise UserNotFoundError()
            if await self.folders.count_for_user(user_id) >= settings.max_bookmark_folders:
                raise BookmarkFolderLimitExceededError(
                    f"Maximum {settings.max_bookmark_folders} bookmark folders allowed"
                )
            if await self.folders.get_by_name(user_id, folder_in.name) is not None:
                raise FolderNameAlreadyExistsError()
            try:
                folder = await self.folders.add(BookmarkFolder(
                    user_id=user_id,
                    name=folder_in.name,
                    description=folder_in.description,
                    bookmark_count=0,
                ))
            except IntegrityError as exc:
                raise FolderNameAlreadyExistsError() from exc
        log.info("Bookmark folder %s created by user %s", folder.id, user_id)
        return BookmarkFolderOut.model_validate(folder)

    async def update_folder(self, folder_id: int, user_id: int, folder_in: BookmarkFolderIn) -> BookmarkFolderOut:
        async with transaction(self.db):
            folder = await self.folders.get_owned(folder_id, user_id)
            if folder is None:
                raise BookmarkFolderNotFoundError()
            clash = await self.folders.get_by_name(user_id, folder_in.name)
            if clash is not None and clash.id != folder.id:
                raise FolderNameAlreadyExistsError()
            folder.name = folder_in.name
            folder.description = folder_in.description
            try:
                await self.db.flush()
            except IntegrityError as exc:
                raise FolderNameAlreadyExistsError() from exc
        log.info("Bookmark folder %s updated by user %s", folder_id, user_id)
        return BookmarkFolderOut.model_validate(folder)

    async def delete_folder(self, folder_id: int, user_id: int) -> None:
        """Delete a folder; its bookmarks become uncategorized, never deleted."""
        async with transaction(self.db):
            folder = await self.folders.get_owned(folder_id, user_id)
            if folder is None:
                raise BookmarkFolderNotFoundError()
            moved = await self.bookmarks.detach_folder(folder.id)
            await self.folders.delete(folder)
        log.info("Bookmark folder %s deleted by user %s (%s bookmarks uncategorized)", folder_id, user_id, moved)
