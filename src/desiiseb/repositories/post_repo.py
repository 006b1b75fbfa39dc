"""Data access helpers for working with posts, hashtags and mentions."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, Integer, and_, cast, func, null, or_, select, union_all

from desiiseb.core.errors import ConflictError
from desiiseb.models import Follow, Hashtag, Mention, Post, PostHashtag, Repost

from .base import StoreRepository

__all__ = ["PostRepository"]


class PostRepository(StoreRepository):
    """Content store access for posts and the rows created alongside them."""

    async def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        result = await self._execute(select(Post).where(Post.id == post_id))
        return result.scalars().first()

    async def get_many(self, post_ids: Iterable[int]) -> dict[int, Post]:
        """Return posts keyed by id."""
        ids = set(post_ids)
        if not ids:
            return {}
        result = await self._execute(select(Post).where(Post.id.in_(ids)))
        return {post.id: post for post in result.scalars()}

    async def create(
        self,
        *,
        author_id: int,
        content: str,
        reply_to: int | None = None,
        media_urls: list[str] | None = None,
        media_type: str | None = None,
    ) -> Post:
        """Insert a new post and return the persisted ORM instance."""
        post = Post(
            author_id=author_id,
            content=content,
            reply_to=reply_to,
            media_urls=media_urls,
            media_type=media_type,
        )
        await self._insert(post, "post")
        return post

    async def upsert_hashtag(self, name: str) -> Hashtag:
        """Return the hashtag called `name`, creating it when missing."""
        result = await self._execute(select(Hashtag).where(Hashtag.name == name))
        hashtag = result.scalars().first()
        if hashtag is not None:
            return hashtag

        hashtag = Hashtag(name=name)
        try:
            await self._insert(hashtag, f"hashtag {name!r}")
        except ConflictError:
            # Another writer created it between the lookup and the insert.
            result = await self._execute(select(Hashtag).where(Hashtag.name == name))
            return result.scalars().one()
        return hashtag

    async def link_hashtag(self, post_id: int, hashtag_id: int) -> bool:
        """Link a post to a hashtag; return False when the link already existed."""
        try:
            await self._insert(
                PostHashtag(post_id=post_id, hashtag_id=hashtag_id),
                f"post_hashtag ({post_id}, {hashtag_id})",
            )
        except ConflictError:
            return False
        return True

    async def hashtag_names_for_post(self, post_id: int) -> list[str]:
        """Return the hashtag names linked to a post, in link order."""
        result = await self._execute(
            select(Hashtag.name)
            .join(PostHashtag, PostHashtag.hashtag_id == Hashtag.id)
            .where(PostHashtag.post_id == post_id)
            .order_by(PostHashtag.id)
        )
        return list(result.scalars())

    async def create_mention(self, post_id: int, mentioned_user_id: int) -> Mention:
        """Record that a post mentions a user."""
        mention = Mention(post_id=post_id, mentioned_user_id=mentioned_user_id)
        await self._insert(mention, f"mention ({post_id}, {mentioned_user_id})")
        return mention

    async def list_timeline(
        self,
        *,
        author_ids: Sequence[int],
        followed_by: int | None = None,
        include_reposts: bool,
        after: tuple[datetime, int] | None,
        limit: int,
    ) -> list[Any]:
        """Return one page of timeline events, newest first.

        Eligible actors are `author_ids` plus, when `followed_by` is given,
        everyone that profile follows. An event is either a post authored by an
        actor (sort key = post time) or a repost made by an actor (sort key =
        repost time). Each post is kept once, at its newest event, before
        keyset pagination on `(sort_key, post_id)` is applied.

        Args:
            author_ids: Profiles whose own activity is eligible.
            followed_by: Viewer whose follow list extends the actor set.
            include_reposts: Whether repost events are eligible at all.
            after: `(sort_key, post_id)` of the last item already returned.
            limit: Maximum number of rows to return.

        Returns:
            Rows with `post_id`, `sort_key`, `repost_id` and `actor_id`;
            `repost_id` is None for original posts.
        """

        def _actor_filter(column: Any) -> ColumnElement[bool]:
            clause = column.in_(list(author_ids))
            if followed_by is None:
                return clause
            followed = select(Follow.following_id).where(Follow.follower_id == followed_by)
            return or_(clause, column.in_(followed))

        originals = select(
            Post.id.label("post_id"),
            Post.created_at.label("sort_key"),
            cast(null(), Integer).label("repost_id"),
            Post.author_id.label("actor_id"),
        ).where(_actor_filter(Post.author_id))

        if include_reposts:
            reposts = select(
                Repost.post_id.label("post_id"),
                Repost.created_at.label("sort_key"),
                Repost.id.label("repost_id"),
                Repost.user_id.label("actor_id"),
            ).where(_actor_filter(Repost.user_id))
            events = union_all(originals, reposts).subquery("events")
        else:
            events = originals.subquery("events")

        ranked = select(
            events.c.post_id,
            events.c.sort_key,
            events.c.repost_id,
            events.c.actor_id,
            func.row_number()
            .over(
                partition_by=events.c.post_id,
                order_by=(events.c.sort_key.desc(), events.c.repost_id.desc().nulls_last()),
            )
            .label("rank"),
        ).subquery("ranked")

        stmt = select(
            ranked.c.post_id,
            ranked.c.sort_key,
            ranked.c.repost_id,
            ranked.c.actor_id,
        ).where(ranked.c.rank == 1)

        if after is not None:
            after_key, after_post_id = after
            stmt = stmt.where(
                or_(
                    ranked.c.sort_key < after_key,
                    and_(ranked.c.sort_key == after_key, ranked.c.post_id < after_post_id),
                )
            )

        stmt = stmt.order_by(ranked.c.sort_key.desc(), ranked.c.post_id.desc()).limit(limit)
        result = await self._execute(stmt)
        return list(result.all())
