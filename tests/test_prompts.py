import pytest

from app.core.exceptions import (
    ForbiddenError,
    InvalidCategoryError,
    PromptNotFoundError,
)
from app.models import NotificationType
from app.repos.engagement_repo import BookmarkRepo
from app.repos.notification_repo import NotificationRepo
from app.schemas.bookmark import BookmarkFolderIn
from app.schemas.common import PageParams
from app.schemas.prompt import PromptIn
from app.services.bookmarks import BookmarkService
from app.services.follows import FollowService
from app.services.likes import LikeService
from app.services.prompts import PromptService, list_categories
from app.services.ratings import RatingService


def _prompt_in(**overrides):
    fields = dict(
        title="Write unit tests",
        description="Generate focused unit tests for a function",
        content="Write pytest tests for the following function, covering edge cases.",
        category="coding",
        tags=["testing", "python"],
        is_public=True,
    )
    fields.update(overrides)
    return PromptIn(**fields)


def test_categories_are_listed_with_descriptions():
    categories = {c.id: c for c in list_categories()}
    assert set(categories) == {
        "coding", "writing", "analysis", "design", "marketing", "education", "productivity", "other",
    }
    assert categories["coding"].name == "Coding"


async def test_create_prompt_fans_out_to_followers(db, make_user):
    author = await make_user("author")
    followers = [await make_user(f"follower{i}") for i in range(3)]
    for follower in followers:
        await FollowService(db).follow_user(follower.id, author.id)

    created = await PromptService(db).create_prompt(author.id, _prompt_in())

    assert created.author.nickname == "author"
    for follower in followers:
        notifications, total = await NotificationRepo(db).list_for(follower.id, PageParams())
        assert total == 1
        assert notifications[0].type == NotificationType.NEW_PROMPT_FROM_FOLLOWED
        assert notifications[0].entity_id == created.id
        assert notifications[0].message == "author published a new prompt: Write unit tests"


async def test_private_prompt_does_not_notify(db, make_user):
    author = await make_user("author")
    follower = await make_user("follower")
    await FollowService(db).follow_user(follower.id, author.id)

    await PromptService(db).create_prompt(author.id, _prompt_in(is_public=False))

    _, total = await NotificationRepo(db).list_for(follower.id, PageParams())
    assert total == 0


async def test_create_prompt_rejects_unknown_category(db, make_user):
    author = await make_user()
    with pytest.raises(InvalidCategoryError):
        await PromptService(db).create_prompt(author.id, _prompt_in(category="cooking"))


async def test_get_prompt_counts_views_and_hides_private(db, make_user, make_prompt):
    author = await make_user("author")
    reader = await make_user("reader")
    public = await make_prompt(author)
    private = await make_prompt(author, is_public=False)
    author_id, private_id = author.id, private.id
    service = PromptService(db)

    await service.get_prompt(public.id, reader.id)
    viewed = await service.get_prompt(public.id)
    assert viewed.view_count == 2
    assert viewed.is_liked is None

    with pytest.raises(ForbiddenError):
        await service.get_prompt(private_id, reader.id)
    own = await service.get_prompt(private_id, author_id)
    assert own.is_public is False


async def test_view_count_does_not_touch_updated_at(db, make_user, make_prompt):
    author = await make_user()
    prompt = await make_prompt(author)
    before = prompt.updated_at

    result = await PromptService(db).get_prompt(prompt.id)

    assert result.updated_at == before


async def test_get_prompt_reports_caller_state(db, make_user, make_prompt):
    author = await make_user("author")
    reader = await make_user("reader")
    prompt = await make_prompt(author)
    await LikeService(db).toggle_like(prompt.id, reader.id)
    await BookmarkService(db).toggle_bookmark(prompt.id, reader.id)
    await RatingService(db).create_rating(prompt.id, reader.id, 3)

    detail = await PromptService(db).get_prompt(prompt.id, reader.id)

    assert detail.is_liked is True
    assert detail.is_bookmarked is True
    assert detail.user_rating == 3
    assert detail.like_count == 1
    assert detail.bookmark_count == 1


async def test_only_author_can_update_or_delete(db, make_user, make_prompt):
    author = await make_user("author")
    other_id = (await make_user("other")).id
    prompt_id = (await make_prompt(author)).id
    author_id = author.id
    service = PromptService(db)

    with pytest.raises(ForbiddenError):
        await service.update_prompt(prompt_id, other_id, _prompt_in())
    with pytest.raises(ForbiddenError):
        await service.delete_prompt(prompt_id, other_id)

    updated = await service.update_prompt(prompt_id, author_id, _prompt_in(title="Renamed prompt"))
    assert updated.title == "Renamed prompt"


async def test_delete_prompt_removes_engagement_and_refreshes_folders(db, make_user, make_prompt):
    author = await make_user("author")
    reader = await make_user("reader")
    prompt = await make_prompt(author)
    kept = await make_prompt(author)
    await LikeService(db).toggle_like(prompt.id, reader.id)
    await RatingService(db).create_rating(prompt.id, reader.id, 5)
    bookmarks = BookmarkService(db)
    folder = await bookmarks.create_folder(reader.id, BookmarkFolderIn(name="Saved"))
    for target in (prompt, kept):
        await bookmarks.toggle_bookmark(target.id, reader.id)
        bookmark = await BookmarkRepo(db).get_for(target.id, reader.id)
        await bookmarks.move_bookmark(bookmark.id, reader.id, folder.id)

    author_id, reader_id, prompt_id, kept_id = author.id, reader.id, prompt.id, kept.id

    await PromptService(db).delete_prompt(prompt_id, author_id)

    with pytest.raises(PromptNotFoundError):
        await PromptService(db).get_prompt(prompt_id)
    folders = await bookmarks.list_folders(reader_id)
    assert folders[0].bookmark_count == 1
    remaining = await bookmarks.list_bookmarks(reader_id, PageParams())
    assert [b.prompt.id for b in remaining.content] == [kept_id]
    notifications, _ = await NotificationRepo(db).list_for(author_id, PageParams())
    assert all(n.entity_id != prompt_id for n in notifications)


async def test_list_prompts_filters(db, make_user, make_prompt):
    author = await make_user("author")
    other = await make_user("other")
    await make_prompt(author, title="Draft a cover letter", category="writing")
    await make_prompt(author, title="Refactor a class", category="coding")
    await make_prompt(other, title="Refactor a module", category="coding")
    await make_prompt(author, title="Private refactor", category="coding", is_public=False)
    service = PromptService(db)

    coding = await service.list_prompts(PageParams(), category="coding")
    by_author = await service.list_prompts(PageParams(), author_id=author.id)
    searched = await service.list_prompts(PageParams(), search="REFACTOR", author_id=other.id)

    assert coding.total_elements == 2
    assert by_author.total_elements == 2
    assert [p.title for p in searched.content] == ["Refactor a module"]
    with pytest.raises(InvalidCategoryError):
        await service.list_prompts(PageParams(), category="cooking")


async def test_search_matches_wildcard_characters_literally(db, make_user, make_prompt):
    author = await make_user("author")
    await make_prompt(author, title="Reach 100% coverage")
    await make_prompt(author, title="Reach 1000 coverage")
    await make_prompt(author, title="Rename snake_case fields")
    await make_prompt(author, title="Rename snakeXcase fields")
    service = PromptService(db)

    percent = await service.list_prompts(PageParams(), search="100%")
    underscore = await service.list_prompts(PageParams(), search="snake_case")

    assert [p.title for p in percent.content] == ["Reach 100% coverage"]
    assert [p.title for p in underscore.content] == ["Rename snake_case fields"]
