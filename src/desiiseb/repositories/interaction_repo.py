"""Data access helpers for the like, repost and follow relationship sets."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, func, select

from desiiseb.models import Follow, Like, Repost

from .base import StoreRepository

__all__ = ["InteractionRepository", "PostRelation"]

PostRelation = type[Like] | type[Repost]


class InteractionRepository(StoreRepository):
    """Membership reads and writes for relationship tables.

    Like and Repost share a shape, so the post-scoped helpers take the model
    class as their first argument.
    """

    async def exists(self, model: PostRelation, post_id: int, user_id: int) -> bool:
        """Return True when the user currently has a row for the post."""
        result = await self._execute(
            select(model.id).where(model.post_id == post_id, model.user_id == user_id)
        )
        return result.first() is not None

    async def add(self, model: PostRelation, post_id: int, user_id: int) -> None:
        """Insert a relationship row; a duplicate raises `ConflictError`."""
        await self._insert(
            model(post_id=post_id, user_id=user_id),
            f"{model.__tablename__} ({post_id}, {user_id})",
        )

    async def remove(self, model: PostRelation, post_id: int, user_id: int) -> int:
        """Delete a relationship row and return how many rows were removed."""
        stmt = delete(model).where(model.post_id == post_id, model.user_id == user_id)
        return await self._write(stmt, f"{model.__tablename__} ({post_id}, {user_id})")

    async def count(self, model: PostRelation, post_id: int) -> int:
        """Return the number of rows for a single post."""
        result = await self._execute(
            select(func.count()).select_from(model).where(model.post_id == post_id)
        )
        return result.scalar_one()

    async def counts_for_posts(
        self,
        model: PostRelation,
        post_ids: Iterable[int],
    ) -> dict[int, int]:
        """Return row counts keyed by post id, restricted to `post_ids`."""
        ids = set(post_ids)
        if not ids:
            return {}
        result = await self._execute(
            select(model.post_id, func.count())
            .where(model.post_id.in_(ids))
            .group_by(model.post_id)
        )
        return {post_id: total for post_id, total in result.all()}

    async def members_for_posts(
        self,
        model: PostRelation,
        user_id: int,
        post_ids: Iterable[int],
    ) -> set[int]:
        """Return the subset of `post_ids` the user has a row for."""
        ids = set(post_ids)
        if not ids:
            return set()
        result = await self._execute(
            select(model.post_id).where(model.user_id == user_id, model.post_id.in_(ids))
        )
        return set(result.scalars())

    async def is_following(self, follower_id: int, following_id: int) -> bool:
        """Return True when `follower_id` follows `following_id`."""
        result = await self._execute(
            select(Follow.id).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        return result.first() is not None

    async def add_follow(self, follower_id: int, following_id: int) -> None:
        """Insert a follow edge; a duplicate raises `ConflictError`."""
        await self._insert(
            Follow(follower_id=follower_id, following_id=following_id),
            f"follow ({follower_id}, {following_id})",
        )

    async def remove_follow(self, follower_id: int, following_id: int) -> int:
        """Delete a follow edge and return how many rows were removed."""
        stmt = delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
        return await self._write(stmt, f"follow ({follower_id}, {following_id})")
