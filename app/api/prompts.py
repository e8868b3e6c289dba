from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.dependencies import (
    get_bookmark_service,
    get_current_user,
    get_like_service,
    get_optional_user,
    get_page_params,
    get_prompt_service,
)
from app.schemas.bookmark import BookmarkStatusOut, BookmarkToggleOut
from app.schemas.common import Page, PageParams
from app.schemas.prompt import CategoryOut, LikeToggleOut, PromptIn, PromptOut, PromptSummaryOut
from app.schemas.user import CurrentUser
from app.services.bookmarks import BookmarkService
from app.services.likes import LikeService
from app.services.prompts import PromptService, list_categories

router = APIRouter(tags=["prompts"])


def _caller_id(user: Optional[CurrentUser]) -> Optional[int]:
    return user.id if user else None


# ───────────────────────────────────────── prompts ─────────────────────────────────────────
@router.get("/categories", response_model=List[CategoryOut])
async def categories():
    return list_categories()


@router.get("/prompts", response_model=Page[PromptSummaryOut])
async def list_prompts(
    search: Optional[str] = None,
    category: Optional[str] = None,
    author_id: Optional[int] = Query(None, alias="authorId"),
    params: PageParams = Depends(get_page_params),
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: PromptService = Depends(get_prompt_service),
):
    """Public prompts, filtered by any combination of search text, category and author."""
    return await service.list_prompts(
        params, search=search, category=category, author_id=author_id, caller_id=_caller_id(user)
    )


@router.post("/prompts", response_model=PromptOut, status_code=status.HTTP_201_CREATED)
async def create_prompt(
    payload: PromptIn,
    user: CurrentUser = Depends(get_current_user),
    service: PromptService = Depends(get_prompt_service),
):
    return await service.create_prompt(user.id, payload)


@router.get("/prompts/popular-bookmarks", response_model=Page[PromptSummaryOut])
async def popular_bookmarks(
    timeframe: str = "week",
    params: PageParams = Depends(get_page_params),
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Public prompts ordered by bookmarks made within ``week``, ``month`` or ``all`` time."""
    return await service.popular_bookmarked(timeframe, params, _caller_id(user))


@router.get("/prompts/{prompt_id:int}", response_model=PromptOut)
async def get_prompt(
    prompt_id: int,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: PromptService = Depends(get_prompt_service),
):
    return await service.get_prompt(prompt_id, _caller_id(user))


@router.put("/prompts/{prompt_id:int}", response_model=PromptOut)
async def update_prompt(
    prompt_id: int,
    payload: PromptIn,
    user: CurrentUser = Depends(get_current_user),
    service: PromptService = Depends(get_prompt_service),
):
    return await service.update_prompt(prompt_id, user.id, payload)


@router.delete("/prompts/{prompt_id:int}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_prompt(
    prompt_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: PromptService = Depends(get_prompt_service),
):
    await service.delete_prompt(prompt_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ───────────────────────────────────────── engagement ──────────────────────────────────────
@router.post("/prompts/{prompt_id:int}/like", response_model=LikeToggleOut)
async def toggle_like(
    prompt_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: LikeService = Depends(get_like_service),
):
    """Like the prompt, or remove the caller's like if present."""
    return await service.toggle_like(prompt_id, user.id)


@router.post("/prompts/{prompt_id:int}/bookmark", response_model=BookmarkToggleOut)
async def toggle_bookmark(
    prompt_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Bookmark the prompt, or remove the caller's bookmark if present."""
    return await service.toggle_bookmark(prompt_id, user.id)


@router.get("/prompts/{prompt_id:int}/bookmark/status", response_model=BookmarkStatusOut)
async def bookmark_status(
    prompt_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    return await service.bookmark_status(prompt_id, user.id)
