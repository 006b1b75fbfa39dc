"""Notification aggregation across likes, follows and mentions."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from desiiseb.core.errors import SourceUnavailableError, ValidationError
from desiiseb.core.settings import settings
from desiiseb.repositories.notification_repo import NotificationRepository
from desiiseb.schemas.common import AuthorSummary
from desiiseb.schemas.notification import Notification, NotificationPost

logger = logging.getLogger(__name__)

__all__ = ["aggregate_notifications"]

SourceFetch = Callable[[NotificationRepository, int, int], Awaitable[list[Any]]]


async def _fetch_source(
    session_factory: async_sessionmaker[AsyncSession],
    fetch: SourceFetch,
    user_id: int,
    limit: int,
) -> list[Any]:
    # Each source runs on its own session so the fetches can overlap.
    async with session_factory() as session:
        return await fetch(NotificationRepository(session), user_id, limit)


def _from_likes(rows: list[Any]) -> list[Notification]:
    return [
        Notification(
            id=f"like_{like.id}",
            type="like",
            created_at=like.created_at,
            from_user=AuthorSummary.model_validate(liker),
            post=NotificationPost(id=post.id, content=post.content),
        )
        for like, liker, post in rows
    ]


def _from_follows(rows: list[Any]) -> list[Notification]:
    return [
        Notification(
            id=f"follow_{follow.id}",
            type="follow",
            created_at=follow.created_at,
            from_user=AuthorSummary.model_validate(follower),
        )
        for follow, follower in rows
    ]


def _from_mentions(rows: list[Any]) -> list[Notification]:
    return [
        Notification(
            id=f"mention_{mention.id}",
            type="mention",
            created_at=mention.created_at,
            from_user=AuthorSummary.model_validate(author),
            post=NotificationPost(id=post.id, content=post.content),
        )
        for mention, post, author in rows
    ]


async def aggregate_notifications(
    session_factory: async_sessionmaker[AsyncSession],
    target_user_id: int,
    limit_per_source: int | None = None,
) -> list[Notification]:
    """Merge recent likes, follows and mentions aimed at a user.

    The three sources are fetched concurrently, each capped at
    `limit_per_source`, and merged only after all of them complete. The merged
    list is sorted newest first; equal timestamps keep source order (likes,
    then follows, then mentions).

    Because every source is capped before the merge, the result is not the
    exact global top-N when one source is much denser than the others.

    Raises:
        ValidationError: If `limit_per_source` is below 1.
        SourceUnavailableError: If any source fails. The remaining fetches are
            cancelled and no partial list is returned.
    """
    if limit_per_source is None:
        limit_per_source = settings.notification_limit_per_source
    elif limit_per_source < 1:
        raise ValidationError("limit_per_source must be at least 1")

    try:
        # A failing task cancels its siblings before the group exits.
        async with asyncio.TaskGroup() as group:
            likes = group.create_task(
                _fetch_source(
                    session_factory,
                    NotificationRepository.recent_likes_received,
                    target_user_id,
                    limit_per_source,
                )
            )
            follows = group.create_task(
                _fetch_source(
                    session_factory,
                    NotificationRepository.recent_follows_received,
                    target_user_id,
                    limit_per_source,
                )
            )
            mentions = group.create_task(
                _fetch_source(
                    session_factory,
                    NotificationRepository.recent_mentions_received,
                    target_user_id,
                    limit_per_source,
                )
            )
    except ExceptionGroup as errors:
        failed = errors.subgroup(SourceUnavailableError)
        if failed is None:
            raise
        logger.warning("Notification aggregation failed for user %s", target_user_id)
        raise failed.exceptions[0] from None

    merged = (
        _from_likes(likes.result())
        + _from_follows(follows.result())
        + _from_mentions(mentions.result())
    )
    # sorted() is stable even with reverse=True, so ties keep source order.
    return sorted(merged, key=lambda notification: notification.created_at, reverse=True)
