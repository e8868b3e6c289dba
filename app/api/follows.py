from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from app.core.dependencies import get_current_user, get_follow_service, get_optional_user, get_page_params
from app.schemas.common import Page, PageParams
from app.schemas.follow import FollowEntryOut, FollowStatusOut
from app.schemas.user import CurrentUser
from app.services.follows import FollowService


router = APIRouter(
    prefix="/users/{user_id:int}",
    tags=["follows"],
)


# ───────────────────────────────────────── endpoints ────────────────────────────────────────
@router.post(
    "/follow",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def follow_user(
    user_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    """
    Follow a user. 204 No Content on success.
    """
    await service.follow_user(user.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/follow",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def unfollow_user(
    user_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    """
    Un-follow a user. 404 when the caller was not following them.
    """
    await service.unfollow_user(user.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/follow/status", response_model=FollowStatusOut)
async def follow_status(
    user_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    return await service.follow_status(user.id, user_id)


@router.get("/followers", response_model=Page[FollowEntryOut])
async def list_followers(
    user_id: int,
    params: PageParams = Depends(get_page_params),
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: FollowService = Depends(get_follow_service),
):
    """
    Users following ``user_id``, newest first, each marked with whether the caller follows them.
    """
    return await service.list_followers(user_id, params, user.id if user else None)


@router.get("/following", response_model=Page[FollowEntryOut])
async def list_following(
    user_id: int,
    params: PageParams = Depends(get_page_params),
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: FollowService = Depends(get_follow_service),
):
    return await service.list_following(user_id, params, user.id if user else None)
