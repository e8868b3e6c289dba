"""Prompt ratings and the rating aggregate kept on each prompt.

Every mutation recomputes ``average_rating``/``rating_count`` from the rating
rows inside the same transaction, so the aggregate can never drift from the
rows it summarizes.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    CommentTooLongError,
    InvalidRatingError,
    PromptNotFoundError,
    RatingAlreadyExistsError,
    RatingNotFoundError,
    UnauthorizedRatingAccessError,
    UserNotFoundError,
)
from app.db import transaction
from app.metrics.prometheus import track_engagement
from app.models import Prompt, PromptRating, User
from app.repos.engagement_repo import RatingRepo
from app.repos.prompt_repo import PromptRepo
from app.repos.user_repo import UserRepo
from app.schemas.common import Page, PageParams
from app.schemas.rating import (
    RatingCommentOut,
    RatingDeleteOut,
    RatingMutationOut,
    RatingOut,
    RatingStatsOut,
)
from app.services.notifications import NotificationService
from app.services.policy import Interaction, ensure_allowed
from app.utils.sanitize import sanitize_comment

log = logging.getLogger(__name__)


def validate_score(score: Any) -> int:
    # bool is an int subclass; True must not pass as a 1-star rating
    if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
        raise InvalidRatingError()
    return score


def clean_comment(comment: Optional[str]) -> Optional[str]:
    if comment is None:
        return None
    limit = settings.rating_comment_max_length
    if len(comment.strip()) > limit:
        raise CommentTooLongError(f"Comment must not exceed {limit} characters")
    return sanitize_comment(comment, empty_fallback=settings.sanitize_empty_fallback)


def _rating_out(rating: PromptRating, nickname: str) -> RatingOut:
    return RatingOut(
        id=rating.id,
        prompt_id=rating.prompt_id,
        user_id=rating.user_id,
        user_nickname=nickname,
        score=rating.score,
        comment=rating.comment,
        created_at=rating.created_at,
        updated_at=rating.updated_at,
    )


class RatingService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.ratings = RatingRepo(db)
        self.prompts = PromptRepo(db)
        self.users = UserRepo(db)
        self.notifications = NotificationService(db)

    async def _load(self, prompt_id: int, user_id: int) -> Tuple[Prompt, User]:
        prompt = await self.prompts.get(prompt_id)
        if prompt is None:
            raise PromptNotFoundError(f"Prompt not found with id: {prompt_id}")
        user = await self.users.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return prompt, user

    async def _recompute(self, prompt: Prompt) -> None:
        average, count = await self.ratings.aggregate(prompt.id)
        await self.prompts.set_rating_aggregate(prompt, average, count)

    async def create_rating(
        self, prompt_id: int, user_id: int, score: Any, comment: Optional[str] = None
    ) -> RatingMutationOut:
        async with transaction(self.db):
            prompt, user = await self._load(prompt_id, user_id)
            ensure_allowed(Interaction.RATE, user.id, prompt.author_id)
            if await self.ratings.exists_for(prompt.id, user.id):
                raise RatingAlreadyExistsError()
            score = validate_score(score)
            cleaned = clean_comment(comment)
            try:
                rating = await self.ratings.add(PromptRating(
                    prompt_id=prompt.id, user_id=user.id, user=user, score=score, comment=cleaned
                ))
            except IntegrityError as exc:
                raise RatingAlreadyExistsError() from exc
            await self._recompute(prompt)
            await self.notifications.notify_prompt_rated(user, prompt, score)
        track_engagement("rating", "create")
        log.info("Rating created for prompt %s by user %s", prompt_id, user_id)
        return RatingMutationOut(
            id=rating.id,
            score=rating.score,
            average_rating=prompt.average_rating,
            rating_count=prompt.rating_count,
        )

    async def _owned_rating(self, prompt: Prompt, user_id: int) -> PromptRating:
        rating = await self.ratings.get_for(prompt.id, user_id)
        if rating is None:
            raise RatingNotFoundError()
        if rating.user_id != user_id:
            raise UnauthorizedRatingAccessError()
        return rating

    async def update_rating(
        self, prompt_id: int, user_id: int, score: Any, comment: Optional[str] = None
    ) -> RatingMutationOut:
        async with transaction(self.db):
            prompt, _ = await self._load(prompt_id, user_id)
            rating = await self._owned_rating(prompt, user_id)
            rating.score = validate_score(score)
            rating.comment = clean_comment(comment)
            await self.db.flush()
            await self._recompute(prompt)
        track_engagement("rating", "update")
        log.info("Rating updated for prompt %s by user %s", prompt_id, user_id)
        return RatingMutationOut(
            id=rating.id,
            score=rating.score,
            average_rating=prompt.average_rating,
            rating_count=prompt.rating_count,
        )

    async def delete_rating(self, prompt_id: int, user_id: int) -> RatingDeleteOut:
        async with transaction(self.db):
            prompt, _ = await self._load(prompt_id, user_id)
            rating = await self._owned_rating(prompt, user_id)
            await self.ratings.delete(rating)
            await self._recompute(prompt)
        track_engagement("rating", "delete")
        log.info("Rating deleted for prompt %s by user %s", prompt_id, user_id)
        return RatingDeleteOut(average_rating=prompt.average_rating, rating_count=prompt.rating_count)

    async def get_stats(self, prompt_id: int, caller_id: Optional[int] = None) -> RatingStatsOut:
        prompt = await self.prompts.get(prompt_id)
        if prompt is None:
            raise PromptNotFoundError(f"Prompt not found with id: {prompt_id}")
        average, count = await self.ratings.aggregate(prompt.id)
        user_rating = None
        if caller_id is not None:
            own = await self.ratings.get_for(prompt.id, caller_id)
            user_rating = own.score if own else None
        return RatingStatsOut(
            average_rating=average,
            rating_count=count,
            user_rating=user_rating,
            distribution=await self.ratings.distribution(prompt.id),
        )

    async def get_user_rating(self, prompt_id: int, user_id: int) -> Optional[RatingOut]:
        prompt = await self.prompts.get(prompt_id)
        if prompt is None:
            raise PromptNotFoundError(f"Prompt not found with id: {prompt_id}")
        rating = await self.ratings.get_for(prompt.id, user_id)
        if rating is None:
            return None
        return _rating_out(rating, rating.user.nickname)

    async def list_ratings(self, prompt_id: int, params: PageParams) -> Page[RatingOut]:
        if await self.prompts.get(prompt_id) is None:
            raise PromptNotFoundError(f"Prompt not found with id: {prompt_id}")
        items, total = await self.ratings.list_for_prompt(prompt_id, params)
        return Page[RatingOut].build([_rating_out(r, r.user.nickname) for r in items], total, params)

    async def list_comments(self, prompt_id: int, params: PageParams) -> Page[RatingCommentOut]:
        if await self.prompts.get(prompt_id) is None:
            raise PromptNotFoundError(f"Prompt not found with id: {prompt_id}")
        items, total = await self.ratings.list_for_prompt(prompt_id, params, with_comment_only=True)
        return Page[RatingCommentOut].build(
            [
                RatingCommentOut(
                    id=r.id,
                    user_id=r.user_id,
                    user_nickname=r.user.nickname,
                    score=r.score,
                    comment=r.comment,
                    created_at=r.created_at,
                )
                for r in items
            ],
            total,
            params,
        )
