"""Like, repost and follow toggles.

The caller passes the state it last displayed; that flag only tells which way
the user wants to go. The stored relationship row decides whether a write is
needed, and the table's uniqueness constraint settles races between sessions
of the same user.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from desiiseb.core.errors import ConflictError, NotFoundError, ValidationError
from desiiseb.models import Like, Repost
from desiiseb.repositories.interaction_repo import InteractionRepository, PostRelation
from desiiseb.repositories.post_repo import PostRepository
from desiiseb.repositories.profile_repo import ProfileRepository
from desiiseb.schemas.interaction import ToggleResult

logger = logging.getLogger(__name__)

__all__ = ["toggle_follow", "toggle_like", "toggle_repost"]


async def _toggle_post_relation(
    session: AsyncSession,
    model: PostRelation,
    *,
    post_id: int,
    user_id: int | None,
    current: bool,
) -> ToggleResult:
    if user_id is None:
        raise ValidationError("A user is required to change interactions")
    if await PostRepository(session).get_by_id(post_id) is None:
        raise NotFoundError(f"Post {post_id} does not exist")

    repo = InteractionRepository(session)
    name = model.__tablename__
    desired = not current
    stored = await repo.exists(model, post_id, user_id)
    if stored != current:
        logger.debug(
            "Stale %s state from user %s on post %s: client=%s stored=%s",
            name,
            user_id,
            post_id,
            current,
            stored,
        )

    delta = 0
    if desired and not stored:
        try:
            await repo.add(model, post_id, user_id)
            delta = 1
        except ConflictError:
            logger.debug(
                "Concurrent %s insert for (%s, %s) already applied", name, post_id, user_id
            )
    elif not desired and stored:
        removed = await repo.remove(model, post_id, user_id)
        delta = -1 if removed else 0

    count = await repo.count(model, post_id)
    return ToggleResult(is_active=desired, delta=delta, count=count)


async def toggle_like(
    session: AsyncSession,
    *,
    post_id: int,
    user_id: int | None,
    current_is_liked: bool,
) -> ToggleResult:
    """Like the post when `current_is_liked` is False, otherwise unlike it.

    Returns:
        The final state, the counter delta actually applied (0 when the store
        already matched the requested state) and the re-aggregated like count.

    Raises:
        ValidationError: If `user_id` is None.
        NotFoundError: If the post does not exist.
        SourceUnavailableError: If the store fails; nothing is committed.
    """
    return await _toggle_post_relation(
        session, Like, post_id=post_id, user_id=user_id, current=current_is_liked
    )


async def toggle_repost(
    session: AsyncSession,
    *,
    post_id: int,
    user_id: int | None,
    current_is_reposted: bool,
) -> ToggleResult:
    """Repost analog of `toggle_like`."""
    return await _toggle_post_relation(
        session, Repost, post_id=post_id, user_id=user_id, current=current_is_reposted
    )


async def toggle_follow(
    session: AsyncSession,
    *,
    follower_id: int | None,
    following_id: int,
    current_is_following: bool,
) -> ToggleResult:
    """Follow or unfollow a profile; `count` is the target's follower count.

    Raises:
        ValidationError: If `follower_id` is None or equals `following_id`.
        NotFoundError: If the target profile does not exist.
    """
    if follower_id is None:
        raise ValidationError("A user is required to follow profiles")
    if follower_id == following_id:
        raise ValidationError("Profiles cannot follow themselves")
    if await ProfileRepository(session).get_by_id(following_id) is None:
        raise NotFoundError(f"Profile {following_id} does not exist")

    repo = InteractionRepository(session)
    desired = not current_is_following
    stored = await repo.is_following(follower_id, following_id)

    delta = 0
    if desired and not stored:
        try:
            await repo.add_follow(follower_id, following_id)
            delta = 1
        except ConflictError:
            logger.debug("Concurrent follow (%s, %s) already applied", follower_id, following_id)
    elif not desired and stored:
        removed = await repo.remove_follow(follower_id, following_id)
        delta = -1 if removed else 0

    count = await ProfileRepository(session).count_followers(following_id)
    return ToggleResult(is_active=desired, delta=delta, count=count)
