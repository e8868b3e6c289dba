from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import ApiModel
from app.schemas.user import AuthorOut


class PromptIn(ApiModel):
    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=10, max_length=300)
    content: str = Field(..., min_length=20, max_length=10000)
    category: str
    tags: List[str] = Field(default_factory=list, max_length=5)
    is_public: bool = True


class PromptOut(ApiModel):
    id: int
    title: str
    description: str
    content: str
    category: str
    tags: List[str]
    author: AuthorOut
    like_count: int
    view_count: int
    bookmark_count: int
    average_rating: float
    rating_count: int
    is_public: bool
    is_liked: Optional[bool] = None
    is_bookmarked: Optional[bool] = None
    user_rating: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class PromptSummaryOut(ApiModel):
    id: int
    title: str
    description: str
    category: str
    tags: List[str]
    author: AuthorOut
    view_count: int
    like_count: int
    is_liked: bool = False
    average_rating: float
    rating_count: int
    user_rating: Optional[int] = None
    bookmark_count: int
    is_public: bool
    created_at: datetime
    updated_at: datetime


class LikeToggleOut(ApiModel):
    liked: bool
    like_count: int


class CategoryOut(ApiModel):
    id: str
    name: str
    description: str
