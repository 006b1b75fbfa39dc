"""Service-level helpers for authoring and reading posts."""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from desiiseb.core.errors import NotFoundError, ValidationError
from desiiseb.core.settings import settings
from desiiseb.models import Post
from desiiseb.repositories.post_repo import PostRepository
from desiiseb.repositories.profile_repo import ProfileRepository
from desiiseb.schemas.post import PostCreate

from .hashtags import link_hashtags
from .mentions import link_mentions

logger = logging.getLogger(__name__)

__all__ = ["create_post", "get_post", "validate_content"]


def validate_content(content: str, *, has_media: bool = False) -> str:
    """Check post text before anything is written.

    Length is measured in Unicode code points, so Bengali text counts one per
    code point, combining signs included.

    Raises:
        ValidationError: If the text is empty without media or exceeds the
            configured maximum length.
    """
    if len(content) > settings.post_max_length:
        raise ValidationError(
            f"Post content exceeds {settings.post_max_length} characters ({len(content)})"
        )
    if not content.strip() and not has_media:
        raise ValidationError("Post content cannot be empty")
    return content


async def create_post(
    session: AsyncSession,
    *,
    author_id: int,
    data: PostCreate,
) -> Post:
    """Create a post, then link its hashtags and mentions.

    Args:
        session: Session used for every write of this call.
        author_id: Profile authoring the post.
        data: Validated post input.

    Returns:
        The persisted post.

    Raises:
        ValidationError: If the content is rejected.
        NotFoundError: If the author or the replied-to post does not exist.

    Notes:
        Hashtag and mention linkage are independent writes made after the post
        is committed; a failure there is logged and the post is kept.
    """
    content = validate_content(data.content, has_media=bool(data.media_urls))

    profiles = ProfileRepository(session)
    posts = PostRepository(session)

    if await profiles.get_by_id(author_id) is None:
        raise NotFoundError(f"Profile {author_id} does not exist")
    if data.reply_to is not None and await posts.get_by_id(data.reply_to) is None:
        raise NotFoundError(f"Post {data.reply_to} does not exist")

    post = await posts.create(
        author_id=author_id,
        content=content,
        reply_to=data.reply_to,
        media_urls=data.media_urls,
        media_type=data.media_type,
    )
    post_id = post.id
    logger.debug("Created post %s by profile %s", post_id, author_id)

    await link_hashtags(posts, post_id, content)
    await link_mentions(posts, profiles, post_id=post_id, author_id=author_id, text=content)
    # A swallowed linkage failure rolls the session back and expires the post.
    await session.refresh(post)
    return post


async def get_post(session: AsyncSession, post_id: int) -> Post:
    """Return a post or raise `NotFoundError`."""
    post = await PostRepository(session).get_by_id(post_id)
    if post is None:
        raise NotFoundError(f"Post {post_id} does not exist")
    return post
