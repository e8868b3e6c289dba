from datetime import datetime

from app.schemas.common import ApiModel


class FollowStatusOut(ApiModel):
    is_following: bool
    is_followed_by: bool


class FollowEntryOut(ApiModel):
    """One row of a followers/following list."""
    id: int
    nickname: str
    follower_count: int
    following_count: int
    prompt_count: int
    is_following: bool
    followed_at: datetime
