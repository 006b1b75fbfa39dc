"""Data access helpers for profiles."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select

from desiiseb.models import Follow, Post, Profile

from .base import StoreRepository

__all__ = ["ProfileRepository"]


class ProfileRepository(StoreRepository):
    """Thin wrapper around database access for profile entities."""

    async def get_by_id(self, user_id: int) -> Profile | None:
        """Return a profile by identifier."""
        result = await self._execute(select(Profile).where(Profile.id == user_id))
        return result.scalars().first()

    async def get_by_username(self, username: str) -> Profile | None:
        """Return a profile by its unique username."""
        result = await self._execute(select(Profile).where(Profile.username == username))
        return result.scalars().first()

    async def get_many(self, user_ids: Iterable[int]) -> dict[int, Profile]:
        """Return profiles keyed by id; missing ids are simply absent."""
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self._execute(select(Profile).where(Profile.id.in_(ids)))
        return {profile.id: profile for profile in result.scalars()}

    async def get_many_by_username(self, usernames: Iterable[str]) -> dict[str, Profile]:
        """Return profiles keyed by username."""
        names = set(usernames)
        if not names:
            return {}
        result = await self._execute(select(Profile).where(Profile.username.in_(names)))
        return {profile.username: profile for profile in result.scalars()}

    async def create(
        self,
        *,
        username: str,
        display_name: str,
        avatar_url: str | None = None,
    ) -> Profile:
        """Insert a new profile; a taken username raises `ConflictError`."""
        profile = Profile(username=username, display_name=display_name, avatar_url=avatar_url)
        await self._insert(profile, f"profile {username!r}")
        return profile

    async def save(self, profile: Profile) -> Profile:
        """Persist pending attribute changes on a profile."""
        self.session.add(profile)
        await self._commit(f"profile {profile.id}")
        return profile

    async def count_posts(self, user_id: int) -> int:
        """Return how many posts the user has authored."""
        result = await self._execute(
            select(func.count()).select_from(Post).where(Post.author_id == user_id)
        )
        return result.scalar_one()

    async def count_followers(self, user_id: int) -> int:
        """Return how many profiles follow the user."""
        result = await self._execute(
            select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
        )
        return result.scalar_one()

    async def count_following(self, user_id: int) -> int:
        """Return how many profiles the user follows."""
        result = await self._execute(
            select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        )
        return result.scalar_one()
