from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UserAlreadyExistsError, UserNotFoundError
from app.db import transaction
from app.models import User
from app.repos.user_repo import UserRepo
from app.schemas.user import UserCreate, UserOut, UserProfileOut

log = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepo(db)

    async def create_user(self, user_in: UserCreate) -> UserOut:
        async with transaction(self.db):
            if await self.users.email_or_nickname_taken(user_in.email, user_in.nickname):
                raise UserAlreadyExistsError()
            try:
                user = await self.users.create_user(user_in.email, user_in.nickname)
            except IntegrityError as exc:
                raise UserAlreadyExistsError() from exc
        log.info("User %s created", user.id)
        return UserOut.model_validate(user)

    async def require_user(self, user_id: int) -> User:
        user = await self.users.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    async def get_me(self, user_id: int) -> UserOut:
        return UserOut.model_validate(await self.require_user(user_id))

    async def get_profile(self, user_id: int) -> UserProfileOut:
        user = await self.require_user(user_id)
        prompt_count = (await self.users.public_prompt_counts([user.id]))[user.id]
        return UserProfileOut(
            id=user.id,
            nickname=user.nickname,
            follower_count=user.follower_count,
            following_count=user.following_count,
            prompt_count=prompt_count,
            created_at=user.created_at,
        )
