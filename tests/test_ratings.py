import pytest

from app.core.config import settings
from app.core.exceptions import (
    CommentTooLongError,
    InvalidRatingError,
    PromptNotFoundError,
    RatingAlreadyExistsError,
    RatingNotFoundError,
    SelfRatingError,
)
from app.models import NotificationType
from app.repos.engagement_repo import RatingRepo
from app.repos.notification_repo import NotificationRepo
from app.schemas.common import PageParams
from app.services.ratings import RatingService


@pytest.fixture
async def rated_setup(make_user, make_prompt):
    author = await make_user("author")
    rater = await make_user("rater")
    prompt = await make_prompt(author, title="Summarize a research paper")
    return author, rater, prompt


async def test_create_rating_updates_aggregate_and_notifies_author(db, rated_setup):
    author, rater, prompt = rated_setup
    service = RatingService(db)

    result = await service.create_rating(prompt.id, rater.id, 5, "Great")

    assert result.score == 5
    assert result.average_rating == 5.0
    assert result.rating_count == 1
    stats = await service.get_stats(prompt.id, rater.id)
    assert stats.rating_count == 1
    assert stats.average_rating == 5.0
    assert stats.user_rating == 5

    notifications, total = await NotificationRepo(db).list_for(author.id, PageParams())
    assert total == 1
    assert notifications[0].type == NotificationType.PROMPT_RATED
    assert notifications[0].sender_id == rater.id
    assert "★★★★★" in notifications[0].message


async def test_star_string_pads_with_empty_stars(db, rated_setup):
    author, rater, prompt = rated_setup
    await RatingService(db).create_rating(prompt.id, rater.id, 3)

    notifications, _ = await NotificationRepo(db).list_for(author.id, PageParams())
    assert notifications[0].message.endswith("★★★☆☆")


async def test_second_create_conflicts_and_leaves_aggregate(db, rated_setup):
    author, rater, prompt = rated_setup
    author_id, prompt_id = author.id, prompt.id
    service = RatingService(db)
    await service.create_rating(prompt_id, rater.id, 5, "Great")

    with pytest.raises(RatingAlreadyExistsError):
        await service.create_rating(prompt_id, rater.id, 1, "Changed my mind")

    stats = await service.get_stats(prompt_id)
    assert stats.rating_count == 1
    assert stats.average_rating == 5.0
    _, total = await NotificationRepo(db).list_for(author_id, PageParams())
    assert total == 1


async def test_author_cannot_rate_own_prompt(db, rated_setup):
    author, _, prompt = rated_setup
    with pytest.raises(SelfRatingError):
        await RatingService(db).create_rating(prompt.id, author.id, 4)


async def test_rating_missing_prompt(db, make_user):
    rater = await make_user()
    with pytest.raises(PromptNotFoundError):
        await RatingService(db).create_rating(999, rater.id, 4)


@pytest.mark.parametrize("score", [0, 6, -1, "5", 2.5, True, None])
async def test_score_must_be_integer_between_one_and_five(db, rated_setup, score):
    _, rater, prompt = rated_setup
    prompt_id = prompt.id
    with pytest.raises(InvalidRatingError):
        await RatingService(db).create_rating(prompt_id, rater.id, score)
    stats = await RatingService(db).get_stats(prompt_id)
    assert stats.rating_count == 0


async def test_comment_longer_than_limit_is_rejected(db, rated_setup):
    _, rater, prompt = rated_setup
    with pytest.raises(CommentTooLongError):
        await RatingService(db).create_rating(prompt.id, rater.id, 4, "x" * 1001)


async def test_comment_at_limit_is_accepted(db, rated_setup):
    _, rater, prompt = rated_setup
    await RatingService(db).create_rating(prompt.id, rater.id, 4, "x" * 1000)
    own = await RatingService(db).get_user_rating(prompt.id, rater.id)
    assert len(own.comment) == 1000


async def test_script_comment_is_sanitized_but_not_emptied(db, rated_setup):
    _, rater, prompt = rated_setup
    service = RatingService(db)
    await service.create_rating(prompt.id, rater.id, 2, "<script>alert(1)</script>")

    own = await service.get_user_rating(prompt.id, rater.id)
    assert own.comment
    assert "<script>" not in own.comment
    assert "alert" in own.comment


async def test_script_comment_dropped_when_fallback_is_empty(db, rated_setup, monkeypatch):
    monkeypatch.setattr(settings, "sanitize_empty_fallback", "empty")
    _, rater, prompt = rated_setup
    service = RatingService(db)
    await service.create_rating(prompt.id, rater.id, 2, "<script>alert(1)</script>")

    own = await service.get_user_rating(prompt.id, rater.id)
    assert own.comment is None


async def test_allowed_markup_survives_sanitization(db, rated_setup):
    _, rater, prompt = rated_setup
    service = RatingService(db)
    await service.create_rating(prompt.id, rater.id, 4, "<b>Solid</b> <img src=x onerror=alert(1)>")

    own = await service.get_user_rating(prompt.id, rater.id)
    assert "<b>Solid</b>" in own.comment
    assert "onerror" not in own.comment


async def test_blank_comment_is_stored_as_none(db, rated_setup):
    _, rater, prompt = rated_setup
    await RatingService(db).create_rating(prompt.id, rater.id, 4, "   ")
    own = await RatingService(db).get_user_rating(prompt.id, rater.id)
    assert own.comment is None


async def test_update_recomputes_average_without_changing_count(db, make_user, rated_setup):
    _, rater, prompt = rated_setup
    other = await make_user("other")
    service = RatingService(db)
    await service.create_rating(prompt.id, rater.id, 5)
    await service.create_rating(prompt.id, other.id, 3)

    result = await service.update_rating(prompt.id, other.id, 4, "Better on second read")

    assert result.rating_count == 2
    assert result.average_rating == 4.5
    own = await service.get_user_rating(prompt.id, other.id)
    assert own.score == 4
    assert own.comment == "Better on second read"


async def test_average_is_rounded_to_two_decimals(db, make_user, rated_setup):
    _, rater, prompt = rated_setup
    service = RatingService(db)
    await service.create_rating(prompt.id, rater.id, 5)
    for nickname in ("second", "third"):
        user = await make_user(nickname)
        result = await service.create_rating(prompt.id, user.id, 4)
    assert result.average_rating == 4.33


async def test_update_without_rating_fails(db, rated_setup):
    _, rater, prompt = rated_setup
    with pytest.raises(RatingNotFoundError):
        await RatingService(db).update_rating(prompt.id, rater.id, 3)


async def test_deleting_only_rating_resets_aggregate_to_zero(db, rated_setup):
    _, rater, prompt = rated_setup
    service = RatingService(db)
    await service.create_rating(prompt.id, rater.id, 4)

    result = await service.delete_rating(prompt.id, rater.id)

    assert result.rating_count == 0
    assert result.average_rating == 0.0
    await db.refresh(prompt)
    assert prompt.average_rating == 0.0
    assert prompt.rating_count == 0


async def test_delete_without_rating_fails(db, rated_setup):
    _, rater, prompt = rated_setup
    with pytest.raises(RatingNotFoundError):
        await RatingService(db).delete_rating(prompt.id, rater.id)


async def test_stats_distribution_covers_all_buckets(db, make_user, rated_setup):
    _, rater, prompt = rated_setup
    service = RatingService(db)
    await service.create_rating(prompt.id, rater.id, 5)
    other = await make_user("other")
    await service.create_rating(prompt.id, other.id, 2)

    stats = await service.get_stats(prompt.id)

    assert stats.distribution == {1: 0, 2: 1, 3: 0, 4: 0, 5: 1}
    assert stats.user_rating is None
    assert stats.average_rating == 3.5


async def test_comments_listing_skips_ratings_without_comment(db, make_user, rated_setup):
    _, rater, prompt = rated_setup
    service = RatingService(db)
    await service.create_rating(prompt.id, rater.id, 5, "Loved it")
    other = await make_user("quiet")
    await service.create_rating(prompt.id, other.id, 3)

    comments = await service.list_comments(prompt.id, PageParams())
    ratings = await service.list_ratings(prompt.id, PageParams())

    assert comments.total_elements == 1
    assert comments.content[0].user_nickname == "rater"
    assert comments.content[0].comment == "Loved it"
    assert ratings.total_elements == 2


async def test_concurrent_create_loses_on_unique_constraint(db, rated_setup, monkeypatch):
    author, rater, prompt = rated_setup
    author_id, rater_id, prompt_id = author.id, rater.id, prompt.id
    service = RatingService(db)
    await service.create_rating(prompt_id, rater_id, 4)

    async def not_rated_yet(self, prompt_id, user_id):
        return False

    monkeypatch.setattr(RatingRepo, "exists_for", not_rated_yet)
    with pytest.raises(RatingAlreadyExistsError):
        await service.create_rating(prompt_id, rater_id, 1)

    stats = await service.get_stats(prompt_id)
    assert stats.rating_count == 1
    assert stats.average_rating == 4.0
    _, total = await NotificationRepo(db).list_for(author_id, PageParams())
    assert total == 1
