import itertools
import sys
from datetime import timedelta
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config import settings  # noqa: E402
from app.db import create_all, get_db, utcnow  # noqa: E402
from app.models import Prompt, User  # noqa: E402

TEST_JWT_SECRET = "test-secret"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    async def _make(nickname=None):
        nickname = nickname or f"user{next(counter)}"
        user = User(email=f"{nickname}@example.com", nickname=nickname)
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_prompt(db):
    counter = itertools.count(1)

    async def _make(author, title=None, is_public=True, category="coding", age_minutes=None, **fields):
        n = next(counter)
        created_at = utcnow() - timedelta(minutes=age_minutes if age_minutes is not None else 1000 - n)
        prompt = Prompt(
            author_id=author.id,
            author=author,
            title=title or f"Prompt number {n}",
            description=fields.pop("description", "A prompt used by the test suite"),
            content=fields.pop("content", "Write a helpful answer to the following question."),
            category=category,
            tags=fields.pop("tags", ["test"]),
            is_public=is_public,
            created_at=created_at,
            updated_at=created_at,
            **fields,
        )
        db.add(prompt)
        await db.commit()
        return prompt

    return _make


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", SecretStr(TEST_JWT_SECRET))
    return TEST_JWT_SECRET


@pytest.fixture
def auth_headers(jwt_secret):
    def _headers(user):
        token = jwt.encode({"sub": str(user.id), "email": user.email}, jwt_secret, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def client(session_factory):
    from app.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
