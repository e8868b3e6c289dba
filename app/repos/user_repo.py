from typing import Dict, Iterable

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Prompt, User


class UserRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)

    async def email_or_nickname_taken(self, email: str, nickname: str) -> bool:
        found = await self.db.scalar(
            select(User.id).where(or_(User.email == email, User.nickname == nickname)).limit(1)
        )
        return found is not None

    async def create_user(self, email: str, nickname: str) -> User:
        user = User(email=email, nickname=nickname, follower_count=0, following_count=0)
        self.db.add(user)
        await self.db.flush()
        return user

    async def adjust_follow_counts(self, follower_id: int, following_id: int, delta: int) -> None:
        """Apply ``delta`` to both ends of a follow edge in place."""
        following_stmt = update(User).where(User.id == follower_id).values(
            following_count=User.following_count + delta, updated_at=User.updated_at
        )
        follower_stmt = update(User).where(User.id == following_id).values(
            follower_count=User.follower_count + delta, updated_at=User.updated_at
        )
        if delta < 0:
            following_stmt = following_stmt.where(User.following_count > 0)
            follower_stmt = follower_stmt.where(User.follower_count > 0)
        await self.db.execute(following_stmt.execution_options(synchronize_session=False))
        await self.db.execute(follower_stmt.execution_options(synchronize_session=False))
        for user_id, column in ((follower_id, "following_count"), (following_id, "follower_count")):
            user = await self.db.get(User, user_id)
            if user is not None:
                await self.db.refresh(user, [column])

    async def public_prompt_counts(self, user_ids: Iterable[int]) -> Dict[int, int]:
        ids = list(user_ids)
        if not ids:
            return {}
        rows = await self.db.execute(
            select(Prompt.author_id, func.count(Prompt.id))
            .where(Prompt.author_id.in_(ids), Prompt.is_public.is_(True))
            .group_by(Prompt.author_id)
        )
        counts = {user_id: 0 for user_id in ids}
        counts.update({author_id: count for author_id, count in rows.all()})
        return counts
