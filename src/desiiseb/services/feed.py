"""Feed composition: home and profile timelines annotated for one viewer."""
from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from sqlalchemy.ext.asyncio import AsyncSession

from desiiseb.core.errors import NotFoundError, ValidationError
from desiiseb.core.settings import settings
from desiiseb.models import Like, Post, Profile, Repost
from desiiseb.repositories.interaction_repo import InteractionRepository
from desiiseb.repositories.post_repo import PostRepository
from desiiseb.repositories.profile_repo import ProfileRepository
from desiiseb.schemas.common import AuthorSummary
from desiiseb.schemas.post import FeedItem, FeedPage

logger = logging.getLogger(__name__)

__all__ = [
    "FeedScope",
    "compose_feed",
    "decode_cursor",
    "encode_cursor",
    "iter_feed",
]


@dataclass(frozen=True)
class FeedScope:
    """Selection rule deciding which posts and reposts a feed may contain.

    `home` covers the viewer and everyone they follow, reposts included.
    `profile` covers posts authored by `user_id` only; reposts are excluded.
    """

    kind: Literal["home", "profile"]
    user_id: int | None = None

    @classmethod
    def home(cls) -> FeedScope:
        return cls("home")

    @classmethod
    def profile(cls, user_id: int) -> FeedScope:
        return cls("profile", user_id)

    @classmethod
    def parse(cls, value: str) -> FeedScope:
        """Parse the textual form `home` or `profile:<userId>`."""
        if value == "home":
            return cls.home()
        kind, sep, raw_id = value.partition(":")
        if kind == "profile" and sep and raw_id.isdigit():
            return cls.profile(int(raw_id))
        raise ValidationError(f"Unknown feed scope {value!r}")


def encode_cursor(sort_key: datetime, post_id: int) -> str:
    """Return an opaque token pointing just past the given item."""
    raw = f"{sort_key.isoformat()}|{post_id}".encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def decode_cursor(cursor: str) -> tuple[datetime, int]:
    """Decode a token produced by `encode_cursor`.

    Raises:
        ValidationError: If the token is malformed.
    """
    padding = "=" * (-len(cursor) % 4)
    try:
        raw = base64.urlsafe_b64decode(cursor + padding).decode()
        key_part, post_part = raw.rsplit("|", 1)
        return datetime.fromisoformat(key_part), int(post_part)
    except (binascii.Error, UnicodeDecodeError, ValueError) as err:
        raise ValidationError("Malformed feed cursor") from err


def _resolve_limit(limit: int | None) -> int:
    if limit is None:
        return settings.feed_page_size
    return max(1, min(limit, settings.feed_max_page_size))


def _summary(profile: Profile) -> AuthorSummary:
    return AuthorSummary.model_validate(profile)


async def _load_rows(
    session: AsyncSession,
    *,
    viewer_id: int | None,
    scope: FeedScope,
    after: tuple[datetime, int] | None,
    limit: int,
) -> list[Any]:
    posts = PostRepository(session)
    if scope.kind == "home":
        if viewer_id is None:
            raise ValidationError("The home feed requires a viewer")
        return await posts.list_timeline(
            author_ids=[viewer_id],
            followed_by=viewer_id,
            include_reposts=True,
            after=after,
            limit=limit,
        )

    if scope.user_id is None:
        raise ValidationError("A profile feed requires a user id")
    if await ProfileRepository(session).get_by_id(scope.user_id) is None:
        raise NotFoundError(f"Profile {scope.user_id} does not exist")
    return await posts.list_timeline(
        author_ids=[scope.user_id],
        include_reposts=False,
        after=after,
        limit=limit,
    )


async def compose_feed(
    session: AsyncSession,
    *,
    viewer_id: int | None,
    scope: FeedScope,
    cursor: str | None = None,
    limit: int | None = None,
) -> FeedPage:
    """Build one page of a feed, newest first.

    Items are ordered by sort key (repost time for reposts, authoring time
    otherwise) and then by post id, both descending. Like and repost counters
    and the viewer's own flags are aggregated from the relationship tables for
    exactly the posts on this page.

    Args:
        session: Session used for all reads.
        viewer_id: Profile viewing the feed, or None for an anonymous view.
        scope: Which posts are eligible.
        cursor: `next_cursor` of the previous page, if any.
        limit: Page size; defaults to `settings.feed_page_size`.

    Returns:
        The page and the cursor of the following page.

    Raises:
        ValidationError: For a malformed cursor or a home feed without viewer.
        NotFoundError: If a profile scope names an unknown profile.
    """
    page_size = _resolve_limit(limit)
    after = decode_cursor(cursor) if cursor else None

    # One extra row tells whether another page exists.
    rows = await _load_rows(
        session, viewer_id=viewer_id, scope=scope, after=after, limit=page_size + 1
    )
    has_more = len(rows) > page_size
    rows = rows[:page_size]
    if not rows:
        return FeedPage(items=[], next_cursor=None)

    post_ids = [row.post_id for row in rows]
    posts_by_id: dict[int, Post] = await PostRepository(session).get_many(post_ids)
    profile_ids = {post.author_id for post in posts_by_id.values()}
    profile_ids.update(row.actor_id for row in rows if row.repost_id is not None)
    profiles_by_id = await ProfileRepository(session).get_many(profile_ids)

    interactions = InteractionRepository(session)
    likes_count = await interactions.counts_for_posts(Like, post_ids)
    reposts_count = await interactions.counts_for_posts(Repost, post_ids)
    if viewer_id is not None:
        liked = await interactions.members_for_posts(Like, viewer_id, post_ids)
        reposted = await interactions.members_for_posts(Repost, viewer_id, post_ids)
    else:
        liked, reposted = set(), set()

    items: list[FeedItem] = []
    for row in rows:
        post = posts_by_id.get(row.post_id)
        author = profiles_by_id.get(post.author_id) if post is not None else None
        if post is None or author is None:
            logger.debug("Dropping feed row for vanished post %s", row.post_id)
            continue

        is_repost = row.repost_id is not None
        reposter = profiles_by_id.get(row.actor_id) if is_repost else None
        items.append(
            FeedItem(
                id=post.id,
                content=post.content,
                created_at=post.created_at,
                author=_summary(author),
                reply_to=post.reply_to,
                media_urls=post.media_urls,
                media_type=post.media_type,
                likes_count=likes_count.get(post.id, 0),
                is_liked=post.id in liked,
                reposts_count=reposts_count.get(post.id, 0),
                is_reposted=post.id in reposted,
                is_repost=is_repost,
                reposted_by=_summary(reposter) if reposter is not None else None,
                repost_created_at=row.sort_key if is_repost else None,
                sort_key=row.sort_key,
            )
        )

    last = rows[-1]
    next_cursor = encode_cursor(last.sort_key, last.post_id) if has_more else None
    logger.debug(
        "Composed %s feed page with %d items for viewer %s",
        scope.kind,
        len(items),
        viewer_id,
    )
    return FeedPage(items=items, next_cursor=next_cursor)


async def iter_feed(
    session: AsyncSession,
    *,
    viewer_id: int | None,
    scope: FeedScope,
    page_size: int | None = None,
    cursor: str | None = None,
) -> AsyncIterator[FeedItem]:
    """Yield feed items page by page until the feed is exhausted.

    Pages are fetched only when the consumer reaches them.
    """
    while True:
        page = await compose_feed(
            session, viewer_id=viewer_id, scope=scope, cursor=cursor, limit=page_size
        )
        for item in page.items:
            yield item
        if page.next_cursor is None:
            return
        cursor = page.next_cursor
