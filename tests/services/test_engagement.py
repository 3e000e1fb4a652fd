import random

import pytest

from videohost.core.errors import (
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
    UnauthenticatedError,
)
from videohost.models.user import EngagementState
from videohost.services.engagement import (
    EngagementAction,
    Transition,
    apply_transition,
)


# ------------------------------------------------------------
# Transition table
# ------------------------------------------------------------


@pytest.mark.parametrize(
    "current,action,expected",
    [
        (EngagementState.NEITHER, EngagementAction.LIKE, Transition(EngagementState.LIKED, 1, 0)),
        (EngagementState.LIKED, EngagementAction.LIKE, Transition(EngagementState.NEITHER, -1, 0)),
        (EngagementState.DISLIKED, EngagementAction.LIKE, Transition(EngagementState.LIKED, 1, -1)),
        (EngagementState.NEITHER, EngagementAction.DISLIKE, Transition(EngagementState.DISLIKED, 0, 1)),
        (EngagementState.DISLIKED, EngagementAction.DISLIKE, Transition(EngagementState.NEITHER, 0, -1)),
        (EngagementState.LIKED, EngagementAction.DISLIKE, Transition(EngagementState.DISLIKED, -1, 1)),
    ],
)
def test_apply_transition(current, action, expected):
    assert apply_transition(current, action) == expected


# ------------------------------------------------------------
# like / dislike
# ------------------------------------------------------------


async def test_like_twice_restores_counts(engine, stored_video, user_a):
    liked = await engine.like(user_a, stored_video.videoid)
    assert liked.like_count == 1
    assert user_a.engagement_for(stored_video.videoid) is EngagementState.LIKED

    unliked = await engine.like(user_a, stored_video.videoid)
    assert unliked.like_count == 0
    assert unliked.dislike_count == 0
    assert user_a.engagement_for(stored_video.videoid) is EngagementState.NEITHER


async def test_dislike_then_like_moves_the_vote(engine, catalog, stored_video, user_a):
    after_dislike = await engine.dislike(user_a, stored_video.videoid)
    assert (after_dislike.like_count, after_dislike.dislike_count) == (0, 1)

    after_like = await engine.like(user_a, stored_video.videoid)
    assert (after_like.like_count, after_like.dislike_count) == (1, 0)

    persisted = await catalog.find_by_id(stored_video.videoid)
    assert (persisted.like_count, persisted.dislike_count) == (1, 0)


async def test_state_is_persisted_for_user(engine, directory, stored_video, user_a):
    await engine.dislike(user_a, stored_video.videoid)

    reloaded = await directory.find_by_subject(user_a.sub)
    assert reloaded.disliked_videos == {stored_video.videoid}
    assert reloaded.liked_videos == set()


async def test_counters_track_users_over_random_sequences(
    engine, catalog, directory, stored_video
):
    rng = random.Random(1234)
    users = [await directory.find_or_create_by_subject(f"auth0|u{i}") for i in range(4)]

    for _ in range(60):
        user = rng.choice(users)
        if rng.random() < 0.5:
            await engine.like(user, stored_video.videoid)
        else:
            await engine.dislike(user, stored_video.videoid)

        assert not (user.liked_videos & user.disliked_videos)

    video = await catalog.find_by_id(stored_video.videoid)
    assert video.like_count == sum(stored_video.videoid in u.liked_videos for u in users)
    assert video.dislike_count == sum(
        stored_video.videoid in u.disliked_videos for u in users
    )


async def test_like_unknown_video_is_not_found(engine, user_a):
    with pytest.raises(NotFoundError):
        await engine.like(user_a, "9b2f7c1e-3c1a-4a53-9a59-0e0cf0d7f2a1")


async def test_like_malformed_id_is_invalid_argument(engine, user_a):
    with pytest.raises(InvalidArgumentError):
        await engine.like(user_a, "../../etc/passwd")


async def test_like_without_user_is_unauthenticated(engine, stored_video):
    with pytest.raises(UnauthenticatedError):
        await engine.like(None, stored_video.videoid)


async def test_video_write_failure_surfaces_after_user_write(
    engine, videos_collection, users_collection, stored_video, user_a
):
    videos_collection.fail_on.add("replace_one")

    with pytest.raises(PersistenceError):
        await engine.like(user_a, stored_video.videoid)

    # The user write went through; the gap is reported, not compensated.
    stored_user = next(d for d in users_collection.docs if d["sub"] == user_a.sub)
    assert stored_user["engagements"] == {stored_video.videoid: "LIKED"}
    stored = next(d for d in videos_collection.docs if d["videoid"] == stored_video.videoid)
    assert stored["like_count"] == 0


# ------------------------------------------------------------
# record_view
# ------------------------------------------------------------


async def test_record_view_counts_and_appends_history(
    engine, catalog, stored_video, user_a, user_b
):
    await engine.record_view(user_a, stored_video.videoid)
    await engine.record_view(user_a, stored_video.videoid)
    await engine.record_view(user_b, stored_video.videoid)

    video = await catalog.find_by_id(stored_video.videoid)
    assert video.view_count == 3
    assert user_a.video_history == [stored_video.videoid, stored_video.videoid]
    assert user_b.video_history == [stored_video.videoid]


async def test_record_view_unknown_video(engine, user_a):
    with pytest.raises(NotFoundError):
        await engine.record_view(user_a, "9b2f7c1e-3c1a-4a53-9a59-0e0cf0d7f2a1")
    assert user_a.video_history == []
