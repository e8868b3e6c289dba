import pytest

from app.core.exceptions import (
    AlreadyFollowingError,
    NotFollowingError,
    SelfFollowNotAllowedError,
    UserNotFoundError,
)
from app.models import NotificationEntityType, NotificationType
from app.repos.follow_repo import FollowRepo
from app.repos.notification_repo import NotificationRepo
from app.schemas.common import PageParams
from app.services.follows import FollowService


async def test_follow_moves_both_counters_and_notifies(db, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")

    await FollowService(db).follow_user(alice.id, bob.id)

    assert alice.following_count == 1
    assert alice.follower_count == 0
    assert bob.follower_count == 1
    assert bob.following_count == 0

    notifications, total = await NotificationRepo(db).list_for(bob.id, PageParams())
    assert total == 1
    assert notifications[0].type == NotificationType.USER_FOLLOWED
    assert notifications[0].entity_type == NotificationEntityType.USER
    assert notifications[0].message == "alice started following you"


async def test_double_follow_conflicts_without_double_counting(db, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = FollowService(db)
    await service.follow_user(alice.id, bob.id)

    with pytest.raises(AlreadyFollowingError):
        await service.follow_user(alice.id, bob.id)

    await db.refresh(bob)
    assert bob.follower_count == 1
    _, total = await NotificationRepo(db).list_for(bob.id, PageParams())
    assert total == 1


async def test_self_follow_is_forbidden(db, make_user):
    alice = await make_user("alice")
    with pytest.raises(SelfFollowNotAllowedError):
        await FollowService(db).follow_user(alice.id, alice.id)
    await db.refresh(alice)
    assert alice.following_count == 0


async def test_follow_unknown_user(db, make_user):
    alice = await make_user("alice")
    with pytest.raises(UserNotFoundError):
        await FollowService(db).follow_user(alice.id, 4242)


async def test_unfollow_restores_counters(db, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = FollowService(db)
    await service.follow_user(alice.id, bob.id)

    await service.unfollow_user(alice.id, bob.id)

    assert alice.following_count == 0
    assert bob.follower_count == 0
    status = await service.follow_status(alice.id, bob.id)
    assert status.is_following is False


async def test_unfollow_without_follow(db, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    with pytest.raises(NotFollowingError):
        await FollowService(db).unfollow_user(alice.id, bob.id)


async def test_follow_status_reports_both_directions(db, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = FollowService(db)
    await service.follow_user(bob.id, alice.id)

    status = await service.follow_status(alice.id, bob.id)

    assert status.is_following is False
    assert status.is_followed_by is True


async def test_follower_list_annotates_entries(db, make_user, make_prompt):
    star = await make_user("star")
    fan = await make_user("fan")
    lurker = await make_user("lurker")
    viewer = await make_user("viewer")
    await make_prompt(fan, title="Fan prompt one")
    await make_prompt(fan, title="Fan prompt two")
    await make_prompt(fan, title="Fan private prompt", is_public=False)
    service = FollowService(db)
    await service.follow_user(fan.id, star.id)
    await service.follow_user(lurker.id, star.id)
    await service.follow_user(viewer.id, fan.id)

    page = await service.list_followers(star.id, PageParams(), requester_id=viewer.id)

    assert page.total_elements == 2
    assert [entry.nickname for entry in page.content] == ["lurker", "fan"]
    entries = {entry.nickname: entry for entry in page.content}
    assert entries["fan"].prompt_count == 2
    assert entries["fan"].is_following is True
    assert entries["fan"].following_count == 1
    assert entries["lurker"].prompt_count == 0
    assert entries["lurker"].is_following is False


async def test_following_list_and_paging(db, make_user):
    hub = await make_user("hub")
    service = FollowService(db)
    for nickname in ("one", "two", "three"):
        target = await make_user(nickname)
        await service.follow_user(hub.id, target.id)

    first = await service.list_following(hub.id, PageParams(page=0, size=2))
    second = await service.list_following(hub.id, PageParams(page=1, size=2))

    assert first.total_elements == 3
    assert first.total_pages == 2
    assert [e.nickname for e in first.content] == ["three", "two"]
    assert [e.nickname for e in second.content] == ["one"]
    assert second.last is True


async def test_list_followers_of_unknown_user(db):
    with pytest.raises(UserNotFoundError):
        await FollowService(db).list_followers(999, PageParams())


async def test_concurrent_follow_loses_on_unique_constraint(db, make_user, monkeypatch):
    alice = await make_user("alice")
    bob = await make_user("bob")
    alice_id, bob_id = alice.id, bob.id
    service = FollowService(db)
    await service.follow_user(alice_id, bob_id)

    async def not_following_yet(self, follower_id, following_id):
        return False

    monkeypatch.setattr(FollowRepo, "exists", not_following_yet)
    with pytest.raises(AlreadyFollowingError):
        await service.follow_user(alice_id, bob_id)

    await db.refresh(alice)
    await db.refresh(bob)
    assert alice.following_count == 1
    assert bob.follower_count == 1
    _, total = await NotificationRepo(db).list_for(bob_id, PageParams())
    assert total == 1
