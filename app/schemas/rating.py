from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field

from app.schemas.common import ApiModel


class RatingIn(ApiModel):
    # range and length are enforced by RatingService so that they surface as 400s
    score: Any = Field(..., validation_alias=AliasChoices("score", "rating"))
    comment: Optional[str] = None


class RatingMutationOut(ApiModel):
    id: int
    score: int
    average_rating: float
    rating_count: int


class RatingDeleteOut(ApiModel):
    average_rating: float
    rating_count: int


class RatingStatsOut(ApiModel):
    average_rating: float
    rating_count: int
    user_rating: Optional[int] = None
    distribution: Dict[int, int]


class RatingOut(ApiModel):
    id: int
    prompt_id: int
    user_id: int
    user_nickname: str
    score: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RatingCommentOut(ApiModel):
    id: int
    user_id: int
    user_nickname: str
    score: int
    comment: str
    created_at: datetime
