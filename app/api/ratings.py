from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from app.core.dependencies import (
    get_current_user,
    get_optional_user,
    get_page_params,
    get_rating_service,
)
from app.schemas.common import Page, PageParams
from app.schemas.rating import (
    RatingCommentOut,
    RatingDeleteOut,
    RatingIn,
    RatingMutationOut,
    RatingOut,
    RatingStatsOut,
)
from app.schemas.user import CurrentUser
from app.services.ratings import RatingService

router = APIRouter(
    prefix="/prompts/{prompt_id:int}/ratings",
    tags=["ratings"],
)


# ───────────────────────────────────────── endpoints ────────────────────────────────────────
@router.post("", response_model=RatingMutationOut, status_code=status.HTTP_201_CREATED)
async def create_rating(
    prompt_id: int,
    payload: RatingIn,
    user: CurrentUser = Depends(get_current_user),
    service: RatingService = Depends(get_rating_service),
):
    """Rate a prompt (1-5) with an optional comment."""
    return await service.create_rating(prompt_id, user.id, payload.score, payload.comment)


@router.put("", response_model=RatingMutationOut)
async def update_rating(
    prompt_id: int,
    payload: RatingIn,
    user: CurrentUser = Depends(get_current_user),
    service: RatingService = Depends(get_rating_service),
):
    return await service.update_rating(prompt_id, user.id, payload.score, payload.comment)


@router.delete("", response_model=RatingDeleteOut)
async def delete_rating(
    prompt_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: RatingService = Depends(get_rating_service),
):
    """Remove the caller's rating and return the recomputed aggregate."""
    return await service.delete_rating(prompt_id, user.id)


@router.get("/stats", response_model=RatingStatsOut)
async def rating_stats(
    prompt_id: int,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: RatingService = Depends(get_rating_service),
):
    return await service.get_stats(prompt_id, user.id if user else None)


@router.get("/user", response_model=Optional[RatingOut])
async def my_rating(
    prompt_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: RatingService = Depends(get_rating_service),
):
    """The caller's own rating on this prompt, or ``null``."""
    return await service.get_user_rating(prompt_id, user.id)


@router.get("", response_model=Page[RatingOut])
async def list_ratings(
    prompt_id: int,
    params: PageParams = Depends(get_page_params),
    service: RatingService = Depends(get_rating_service),
):
    return await service.list_ratings(prompt_id, params)


@router.get("/comments", response_model=Page[RatingCommentOut])
async def list_comments(
    prompt_id: int,
    params: PageParams = Depends(get_page_params),
    service: RatingService = Depends(get_rating_service),
):
    """Ratings that carry a comment, newest first."""
    return await service.list_comments(prompt_id, params)
