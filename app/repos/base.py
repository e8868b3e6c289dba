from __future__ import annotations

from typing import Any, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.schemas.common import PageParams


async def fetch_page(db: AsyncSession, stmt: Select, params: PageParams) -> Tuple[List[Any], int]:
    """Run ``stmt`` for one page and count the rows it matches overall."""
    total = await db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    if not total:
        return [], 0
    result = await db.scalars(stmt.offset(params.offset).limit(params.size))
    return list(result.unique().all()), int(total)
