from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def build_engine(url: str | None = None, **kwargs):
    return create_async_engine(url or settings.DATABASE_URL, future=True, echo=settings.sql_echo, **kwargs)


engine = build_engine()
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores UTC without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def get_db() -> AsyncSession:
    """Yield an async SQLAlchemy session."""
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def transaction(session: AsyncSession):
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise


async def create_all(bind=None) -> None:
    import app.models  # noqa: F401  registers the mappers on Base.metadata

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
