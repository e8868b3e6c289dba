from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import ApiModel
from app.schemas.user import AuthorOut


class BookmarkFolderIn(ApiModel):
    name: str = Field(..., min_length=3, max_length=50)
    description: Optional[str] = Field(None, max_length=200)


class MoveBookmarkIn(ApiModel):
    folder_id: Optional[int] = None


class BookmarkToggleOut(ApiModel):
    bookmarked: bool
    bookmark_count: int


class BookmarkStatusOut(ApiModel):
    bookmarked: bool


class BookmarkFolderOut(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    bookmark_count: int
    created_at: datetime
    updated_at: datetime


class BookmarkFolderInfo(ApiModel):
    id: int
    name: str


class BookmarkedPromptInfo(ApiModel):
    id: int
    title: str
    description: str
    category: str
    tags: List[str]
    author: AuthorOut
    like_count: int
    view_count: int
    average_rating: float
    rating_count: int
    created_at: datetime


class BookmarkOut(ApiModel):
    id: int
    prompt: BookmarkedPromptInfo
    folder: Optional[BookmarkFolderInfo] = None
    created_at: datetime


class MoveBookmarkOut(ApiModel):
    id: int
    prompt_id: int
    folder_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
