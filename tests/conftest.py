# tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from itertools import count
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from desiiseb.db.session import Base
from desiiseb.models import Follow, Like, Mention, Post, Profile, Repost

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

_USERNAME_COUNTER = count(1)


def at(minutes: int) -> datetime:
    """Return a timestamp `minutes` after the fixed test epoch."""
    return BASE_TIME + timedelta(minutes=minutes)


def naive(value: datetime) -> datetime:
    """Drop tzinfo so values read back from SQLite compare with test timestamps."""
    return value.replace(tzinfo=None)


@pytest_asyncio.fixture()
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    # A file database lets several sessions run concurrently, as the
    # notification aggregator does.
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'desiiseb-test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, autoflush=False, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def persist(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[Any]]:
    """Store rows through a short-lived session and return them detached.

    Detached rows keep their loaded attributes, so rollbacks in the session
    under test never expire them.
    """

    async def _persist(*rows: Any) -> Any:
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows[0] if len(rows) == 1 else rows

    return _persist


@pytest.fixture()
def make_profile(persist: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Profile]]:
    async def _make(username: str | None = None, display_name: str | None = None) -> Profile:
        username = username or f"user_{next(_USERNAME_COUNTER)}"
        return await persist(
            Profile(
                username=username,
                display_name=display_name or username.title(),
                created_at=BASE_TIME,
            )
        )

    return _make


@pytest.fixture()
def make_post(persist: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Post]]:
    async def _make(author: Profile, content: str = "hello", minutes: int = 0) -> Post:
        return await persist(Post(author_id=author.id, content=content, created_at=at(minutes)))

    return _make


@pytest.fixture()
def make_like(persist: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Like]]:
    async def _make(post: Post, user: Profile, minutes: int = 0) -> Like:
        return await persist(Like(post_id=post.id, user_id=user.id, created_at=at(minutes)))

    return _make


@pytest.fixture()
def make_repost(persist: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Repost]]:
    async def _make(post: Post, user: Profile, minutes: int = 0) -> Repost:
        return await persist(Repost(post_id=post.id, user_id=user.id, created_at=at(minutes)))

    return _make


@pytest.fixture()
def make_follow(persist: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Follow]]:
    async def _make(follower: Profile, following: Profile, minutes: int = 0) -> Follow:
        return await persist(
            Follow(follower_id=follower.id, following_id=following.id, created_at=at(minutes))
        )

    return _make


@pytest.fixture()
def make_mention(persist: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Mention]]:
    async def _make(post: Post, user: Profile, minutes: int = 0) -> Mention:
        return await persist(
            Mention(post_id=post.id, mentioned_user_id=user.id, created_at=at(minutes))
        )

    return _make


@pytest_asyncio.fixture()
async def alice(make_profile: Callable[..., Awaitable[Profile]]) -> Profile:
    return await make_profile("alice", "Alice")


@pytest_asyncio.fixture()
async def bob(make_profile: Callable[..., Awaitable[Profile]]) -> Profile:
    return await make_profile("bob", "Bob")


@pytest_asyncio.fixture()
async def carol(make_profile: Callable[..., Awaitable[Profile]]) -> Profile:
    return await make_profile("carol", "Carol")
