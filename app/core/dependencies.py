"""Application-wide FastAPI dependencies.

These helpers are imported by individual routers to
  • extract bearer tokens
  • resolve the caller identity (decoded JWT)
  • inject services bound to the request's database session
  • read paging parameters

Having them in *core* keeps the `api/` layer focused purely on HTTP handling.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, status
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db import get_db
from app.schemas.common import PageParams
from app.schemas.user import CurrentUser
from app.services.bookmarks import BookmarkService
from app.services.feed import FeedService
from app.services.follows import FollowService
from app.services.likes import LikeService
from app.services.notifications import NotificationService
from app.services.prompts import PromptService
from app.services.ratings import RatingService
from app.services.users import UserService

# ─────────────────────────────── Token helpers ───────────────────────────────

def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(authorization: Optional[str] = Header(None, alias="Authorization")) -> str:
    """Extract the raw JWT from the *Authorization* header.

    Raises
    ------
    HTTPException 401
        When the header is missing or malformed.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise _credentials_exception("Invalid authentication credentials")
    return authorization.split(" ", 1)[1]


def decode_token(token: str) -> CurrentUser:
    """Return the `CurrentUser` carried by the token's claims."""
    try:
        jwt_secret = settings.jwt_secret.get_secret_value() if settings.jwt_secret else None
        if jwt_secret:
            payload = jwt.decode(token, jwt_secret, algorithms=[settings.jwt_algorithm])
        else:
            # Fallback for dev when JWT secret is not configured
            payload = jwt.get_unverified_claims(token)
    except JWTError:
        raise _credentials_exception()

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise _credentials_exception()
    return CurrentUser(id=user_id, email=payload.get("email"))


# ─────────────────────────────── User helpers ────────────────────────────────

async def get_current_user(token: str = Depends(get_bearer_token)) -> CurrentUser:
    return decode_token(token)


async def get_optional_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> Optional[CurrentUser]:
    """Like `get_current_user`, but anonymous callers get ``None``."""
    if not authorization:
        return None
    return decode_token(get_bearer_token(authorization))


# ─────────────────────────────── Paging helper ───────────────────────────────

def get_page_params(
    page: int = Query(0, ge=0),
    size: Optional[int] = Query(None, ge=1),
) -> PageParams:
    size = size or settings.default_page_size
    return PageParams(page=page, size=min(size, settings.max_page_size))


# ─────────────────────────────── Service helpers ─────────────────────────────

def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_prompt_service(db: AsyncSession = Depends(get_db)) -> PromptService:
    return PromptService(db)


def get_rating_service(db: AsyncSession = Depends(get_db)) -> RatingService:
    return RatingService(db)


def get_like_service(db: AsyncSession = Depends(get_db)) -> LikeService:
    return LikeService(db)


def get_bookmark_service(db: AsyncSession = Depends(get_db)) -> BookmarkService:
    return BookmarkService(db)


def get_follow_service(db: AsyncSession = Depends(get_db)) -> FollowService:
    return FollowService(db)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_feed_service(db: AsyncSession = Depends(get_db)) -> FeedService:
    return FeedService(db)
