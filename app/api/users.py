from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_current_user, get_feed_service, get_page_params, get_user_service
from app.schemas.common import Page, PageParams
from app.schemas.prompt import PromptSummaryOut
from app.schemas.user import CurrentUser, UserCreate, UserOut, UserProfileOut
from app.services.feed import FeedService
from app.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])

@router.post(
    "",
    summary="Register a user record (credentials are managed externally)",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_user_endpoint(
    payload: UserCreate,
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.create_user(payload)

@router.get("/me", summary="Return the authenticated user", response_model=UserOut)
async def read_current_user_endpoint(
    current_user: CurrentUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_me(current_user.id)

@router.get("/me/feed", summary="Prompts from followed authors", response_model=Page[PromptSummaryOut])
async def feed_endpoint(
    current_user: CurrentUser = Depends(get_current_user),
    params: PageParams = Depends(get_page_params),
    feed_service: FeedService = Depends(get_feed_service),
):
    return await feed_service.get_feed(current_user.id, params)

@router.get("/{user_id:int}", summary="Public profile of a user", response_model=UserProfileOut)
async def read_user_profile_endpoint(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_profile(user_id)
