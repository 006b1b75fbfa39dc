"""Queries feeding the notification aggregator, one per event source."""
from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import aliased

from desiiseb.models import Follow, Like, Mention, Post, Profile

from .base import StoreRepository

__all__ = ["NotificationRepository"]


class NotificationRepository(StoreRepository):
    """Most-recent-first reads of events targeted at a single user."""

    async def recent_likes_received(self, user_id: int, limit: int) -> list[Any]:
        """Return likes on the user's posts, excluding the user's own likes.

        Rows are `(like, liker, post)` tuples.
        """
        liker = aliased(Profile, name="liker")
        stmt = (
            select(Like, liker, Post)
            .join(Post, Post.id == Like.post_id)
            .join(liker, liker.id == Like.user_id)
            .where(Post.author_id == user_id, Like.user_id != user_id)
            .order_by(Like.created_at.desc(), Like.id.desc())
            .limit(limit)
        )
        result = await self._execute(stmt)
        return list(result.all())

    async def recent_follows_received(self, user_id: int, limit: int) -> list[Any]:
        """Return follow edges pointing at the user as `(follow, follower)` tuples."""
        follower = aliased(Profile, name="follower")
        stmt = (
            select(Follow, follower)
            .join(follower, follower.id == Follow.follower_id)
            .where(Follow.following_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
            .limit(limit)
        )
        result = await self._execute(stmt)
        return list(result.all())

    async def recent_mentions_received(self, user_id: int, limit: int) -> list[Any]:
        """Return mentions of the user as `(mention, post, author)` tuples."""
        author = aliased(Profile, name="author")
        stmt = (
            select(Mention, Post, author)
            .join(Post, Post.id == Mention.post_id)
            .join(author, author.id == Post.author_id)
            .where(Mention.mentioned_user_id == user_id)
            .order_by(Mention.created_at.desc(), Mention.id.desc())
            .limit(limit)
        )
        result = await self._execute(stmt)
        return list(result.all())
