# app/schemas/user.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from app.schemas.common import ApiModel


class CurrentUser(BaseModel):
    """Caller identity resolved from the bearer token."""
    id: int
    email: Optional[str] = None


class UserCreate(ApiModel):
    email: EmailStr
    nickname: str = Field(..., min_length=2, max_length=30)


class AuthorOut(ApiModel):
    id: int
    nickname: str


class UserOut(ApiModel):
    id: int
    email: EmailStr
    nickname: str
    follower_count: int
    following_count: int
    created_at: Optional[datetime] = None


class UserProfileOut(ApiModel):
    id: int
    nickname: str
    follower_count: int
    following_count: int
    prompt_count: int
    created_at: Optional[datetime] = None
