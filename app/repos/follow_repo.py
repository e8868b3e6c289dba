from __future__ import annotations

from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User, UserFollow
from app.schemas.common import PageParams


class FollowRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, follower_id: int, following_id: int) -> Optional[UserFollow]:
        return await self.db.scalar(
            select(UserFollow).where(
                UserFollow.follower_id == follower_id, UserFollow.following_id == following_id
            )
        )

    async def exists(self, follower_id: int, following_id: int) -> bool:
        return await self.get(follower_id, following_id) is not None

    async def add(self, follower_id: int, following_id: int) -> UserFollow:
        follow = UserFollow(follower_id=follower_id, following_id=following_id)
        self.db.add(follow)
        await self.db.flush()
        return follow

    async def delete(self, follow: UserFollow) -> None:
        await self.db.delete(follow)
        await self.db.flush()

    async def following_ids(self, user_id: int) -> List[int]:
        rows = await self.db.scalars(select(UserFollow.following_id).where(UserFollow.follower_id == user_id))
        return list(rows.all())

    async def follower_ids(self, user_id: int) -> List[int]:
        rows = await self.db.scalars(select(UserFollow.follower_id).where(UserFollow.following_id == user_id))
        return list(rows.all())

    async def followed_among(self, follower_id: int, candidate_ids: Iterable[int]) -> Set[int]:
        """Subset of ``candidate_ids`` that ``follower_id`` follows."""
        ids = list(candidate_ids)
        if not ids:
            return set()
        rows = await self.db.scalars(
            select(UserFollow.following_id).where(
                UserFollow.follower_id == follower_id, UserFollow.following_id.in_(ids)
            )
        )
        return set(rows.all())

    async def _edge_page(self, join_on, edge_clause, params: PageParams) -> Tuple[List[Tuple[User, UserFollow]], int]:
        total = await self.db.scalar(select(func.count(UserFollow.id)).where(edge_clause))
        if not total:
            return [], 0
        rows = await self.db.execute(
            select(User, UserFollow)
            .join(UserFollow, join_on)
            .where(edge_clause)
            .order_by(desc(UserFollow.created_at), desc(UserFollow.id))
            .offset(params.offset)
            .limit(params.size)
        )
        return [(user, follow) for user, follow in rows.all()], int(total)

    async def followers_page(self, user_id: int, params: PageParams):
        """Users following ``user_id``, most recent follow first."""
        return await self._edge_page(
            UserFollow.follower_id == User.id, UserFollow.following_id == user_id, params
        )

    async def following_page(self, user_id: int, params: PageParams):
        """Users ``user_id`` follows, most recent follow first."""
        return await self._edge_page(
            UserFollow.following_id == User.id, UserFollow.follower_id == user_id, params
        )
