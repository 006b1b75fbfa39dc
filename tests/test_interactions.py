# tests/test_interactions.py
"""Tests for the like, repost and follow toggles."""

import asyncio

import pytest

from desiiseb.core.errors import (
    ConflictError,
    NotFoundError,
    SourceUnavailableError,
    ValidationError,
)
from desiiseb.models import Like, Repost
from desiiseb.repositories.interaction_repo import InteractionRepository
from desiiseb.services.interactions import toggle_follow, toggle_like, toggle_repost


async def _like_count(session_factory, post_id: int) -> int:
    async with session_factory() as session:
        return await InteractionRepository(session).count(Like, post_id)


@pytest.mark.asyncio
async def test_like_then_unlike_restores_count(db_session, alice, bob, make_post) -> None:
    post = await make_post(bob, "likeable")

    liked = await toggle_like(db_session, post_id=post.id, user_id=alice.id, current_is_liked=False)
    assert liked.is_liked is True
    assert liked.delta == 1
    assert liked.count == 1

    unliked = await toggle_like(db_session, post_id=post.id, user_id=alice.id, current_is_liked=True)
    assert unliked.is_liked is False
    assert unliked.delta == -1
    assert unliked.count == 0
    assert liked.delta + unliked.delta == 0


@pytest.mark.asyncio
async def test_stale_double_like_counts_once(db_session, alice, bob, make_post) -> None:
    post = await make_post(bob, "double tap")

    first = await toggle_like(db_session, post_id=post.id, user_id=alice.id, current_is_liked=False)
    second = await toggle_like(db_session, post_id=post.id, user_id=alice.id, current_is_liked=False)

    assert (first.delta, second.delta) == (1, 0)
    assert second.is_liked is True
    assert second.count == 1


@pytest.mark.asyncio
async def test_concurrent_insert_conflict_is_a_noop(
    db_session, session_factory, alice, bob, make_post, make_like, monkeypatch
) -> None:
    post = await make_post(bob, "race")
    await make_like(post, alice)

    async def _stale_exists(self, model, post_id, user_id):
        # Simulates the other session inserting between the check and the write.
        return False

    monkeypatch.setattr(InteractionRepository, "exists", _stale_exists)

    result = await toggle_like(db_session, post_id=post.id, user_id=alice.id, current_is_liked=False)

    assert result.is_liked is True
    assert result.delta == 0
    assert result.count == 1
    assert await _like_count(session_factory, post.id) == 1


@pytest.mark.asyncio
async def test_unlike_without_row_is_a_noop(db_session, alice, bob, make_post) -> None:
    post = await make_post(bob, "never liked")

    result = await toggle_like(db_session, post_id=post.id, user_id=alice.id, current_is_liked=True)

    assert result.is_liked is False
    assert result.delta == 0
    assert result.count == 0


@pytest.mark.asyncio
async def test_toggle_requires_user(db_session, bob, make_post) -> None:
    post = await make_post(bob, "anonymous?")

    with pytest.raises(ValidationError):
        await toggle_like(db_session, post_id=post.id, user_id=None, current_is_liked=False)


@pytest.mark.asyncio
async def test_toggle_unknown_post(db_session, alice) -> None:
    with pytest.raises(NotFoundError):
        await toggle_like(db_session, post_id=999, user_id=alice.id, current_is_liked=False)
    with pytest.raises(NotFoundError):
        await toggle_repost(db_session, post_id=999, user_id=alice.id, current_is_reposted=False)


@pytest.mark.asyncio
async def test_author_may_like_own_post(db_session, alice, make_post) -> None:
    post = await make_post(alice, "self love")

    result = await toggle_like(db_session, post_id=post.id, user_id=alice.id, current_is_liked=False)

    assert result.is_liked is True
    assert result.count == 1


@pytest.mark.asyncio
async def test_repost_toggle(db_session, alice, bob, make_post) -> None:
    post = await make_post(bob, "share")

    on = await toggle_repost(db_session, post_id=post.id, user_id=alice.id, current_is_reposted=False)
    again = await toggle_repost(
        db_session, post_id=post.id, user_id=alice.id, current_is_reposted=False
    )
    off = await toggle_repost(db_session, post_id=post.id, user_id=alice.id, current_is_reposted=True)

    assert (on.delta, again.delta, off.delta) == (1, 0, -1)
    assert on.is_reposted is True
    assert off.is_reposted is False
    assert off.count == 0


@pytest.mark.asyncio
async def test_like_and_repost_are_independent(db_session, alice, bob, make_post) -> None:
    post = await make_post(bob, "both")

    await toggle_like(db_session, post_id=post.id, user_id=alice.id, current_is_liked=False)
    repost = await toggle_repost(
        db_session, post_id=post.id, user_id=alice.id, current_is_reposted=False
    )

    assert repost.count == 1
    assert await InteractionRepository(db_session).count(Like, post.id) == 1


@pytest.mark.asyncio
async def test_follow_toggle_reports_follower_count(db_session, alice, bob, carol) -> None:
    followed = await toggle_follow(
        db_session, follower_id=alice.id, following_id=bob.id, current_is_following=False
    )
    assert followed.is_following is True
    assert followed.delta == 1
    assert followed.count == 1

    await toggle_follow(
        db_session, follower_id=carol.id, following_id=bob.id, current_is_following=False
    )
    unfollowed = await toggle_follow(
        db_session, follower_id=alice.id, following_id=bob.id, current_is_following=True
    )
    assert unfollowed.is_following is False
    assert unfollowed.delta == -1
    assert unfollowed.count == 1


@pytest.mark.asyncio
async def test_follow_toggle_is_idempotent_for_stale_clients(db_session, alice, bob) -> None:
    first = await toggle_follow(
        db_session, follower_id=alice.id, following_id=bob.id, current_is_following=False
    )
    second = await toggle_follow(
        db_session, follower_id=alice.id, following_id=bob.id, current_is_following=False
    )

    assert (first.delta, second.delta) == (1, 0)
    assert second.count == 1


@pytest.mark.asyncio
async def test_self_follow_is_rejected(db_session, alice) -> None:
    with pytest.raises(ValidationError):
        await toggle_follow(
            db_session, follower_id=alice.id, following_id=alice.id, current_is_following=False
        )


@pytest.mark.asyncio
async def test_follow_unknown_profile(db_session, alice) -> None:
    with pytest.raises(NotFoundError):
        await toggle_follow(
            db_session, follower_id=alice.id, following_id=404, current_is_following=False
        )


@pytest.mark.asyncio
async def test_follow_requires_user(db_session, bob) -> None:
    with pytest.raises(ValidationError):
        await toggle_follow(
            db_session, follower_id=None, following_id=bob.id, current_is_following=False
        )


@pytest.mark.asyncio
async def test_duplicate_insert_raises_conflict(db_session, alice, bob, make_post) -> None:
    post = await make_post(bob, "once")
    repo = InteractionRepository(db_session)

    await repo.add(Repost, post.id, alice.id)
    with pytest.raises(ConflictError):
        await repo.add(Repost, post.id, alice.id)

    assert await repo.count(Repost, post.id) == 1


@pytest.mark.asyncio
async def test_store_failure_propagates_without_counter_change(
    db_session, session_factory, alice, bob, make_post, monkeypatch
) -> None:
    post = await make_post(bob, "flaky")

    async def _broken_add(self, model, post_id, user_id):
        raise SourceUnavailableError("store offline")

    monkeypatch.setattr(InteractionRepository, "add", _broken_add)

    with pytest.raises(SourceUnavailableError):
        await toggle_like(db_session, post_id=post.id, user_id=alice.id, current_is_liked=False)

    assert await _like_count(session_factory, post.id) == 0


@pytest.mark.asyncio
async def test_concurrent_likes_from_two_sessions_count_once(
    session_factory, alice, bob, make_post
) -> None:
    post = await make_post(bob, "two devices")

    async def _like_from_device():
        async with session_factory() as session:
            return await toggle_like(
                session, post_id=post.id, user_id=alice.id, current_is_liked=False
            )

    first, second = await asyncio.gather(_like_from_device(), _like_from_device())

    assert first.is_liked is True
    assert second.is_liked is True
    assert first.delta + second.delta == 1
    assert await _like_count(session_factory, post.id) == 1
