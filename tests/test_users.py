import pytest

from app.core.exceptions import UserAlreadyExistsError, UserNotFoundError
from app.schemas.user import UserCreate
from app.services.follows import FollowService
from app.services.users import UserService

BASE_URL = "http://test/api"


async def test_create_user_starts_with_zero_counters(db):
    user = await UserService(db).create_user(UserCreate(email="new@example.com", nickname="newbie"))
    assert user.follower_count == 0
    assert user.following_count == 0


async def test_email_and_nickname_must_be_unique(db, make_user):
    await make_user("taken")
    service = UserService(db)
    with pytest.raises(UserAlreadyExistsError):
        await service.create_user(UserCreate(email="taken@example.com", nickname="fresh"))
    with pytest.raises(UserAlreadyExistsError):
        await service.create_user(UserCreate(email="fresh@example.com", nickname="taken"))


async def test_profile_counts_public_prompts_and_followers(db, make_user, make_prompt):
    author = await make_user("author")
    fan = await make_user("fan")
    await make_prompt(author)
    await make_prompt(author, is_public=False)
    await FollowService(db).follow_user(fan.id, author.id)

    profile = await UserService(db).get_profile(author.id)

    assert profile.prompt_count == 1
    assert profile.follower_count == 1
    assert profile.following_count == 0


async def test_unknown_profile(db):
    with pytest.raises(UserNotFoundError):
        await UserService(db).get_profile(31337)


async def test_register_and_read_me(client, auth_headers, make_user):
    resp = await client.post(f"{BASE_URL}/users", json={"email": "api@example.com", "nickname": "apiuser"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["followerCount"] == 0

    resp = await client.post(f"{BASE_URL}/users", json={"email": "api@example.com", "nickname": "other"})
    assert resp.status_code == 409
    assert resp.json()["code"] == "USER002"

    me = await make_user("me")
    resp = await client.get(f"{BASE_URL}/users/me", headers=auth_headers(me))
    assert resp.status_code == 200
    assert resp.json()["nickname"] == "me"


async def test_me_requires_token(client):
    resp = await client.get(f"{BASE_URL}/users/me")
    assert resp.status_code == 401


async def test_garbage_token_is_rejected(client, jwt_secret):
    resp = await client.get(f"{BASE_URL}/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
