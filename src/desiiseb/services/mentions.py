"""Mention extraction and linking."""
from __future__ import annotations

import logging
import re

from desiiseb.core.errors import ConflictError, FeedCoreError
from desiiseb.repositories.post_repo import PostRepository
from desiiseb.repositories.profile_repo import ProfileRepository

from .hashtags import TOKEN_CHARS

logger = logging.getLogger(__name__)

MENTION_RE = re.compile(rf"@([{TOKEN_CHARS}]+)")

__all__ = ["MENTION_RE", "extract_mentions", "link_mentions"]


def extract_mentions(text: str) -> list[str]:
    """Return distinct `@handle` usernames in order of first appearance."""
    return list(dict.fromkeys(MENTION_RE.findall(text or "")))


async def link_mentions(
    posts: PostRepository,
    profiles: ProfileRepository,
    *,
    post_id: int,
    author_id: int,
    text: str,
) -> list[int]:
    """Record a Mention row for every known handle in `text`.

    Unknown handles and the author's own handle are ignored. Store failures
    are logged and skipped like hashtag failures.

    Returns:
        Ids of the profiles mentioned by the post.
    """
    handles = extract_mentions(text)
    if not handles:
        return []

    try:
        known = {
            name: profile.id
            for name, profile in (await profiles.get_many_by_username(handles)).items()
        }
    except FeedCoreError as exc:
        logger.warning("Could not resolve mentions for post %s: %s", post_id, exc)
        return []

    mentioned: list[int] = []
    for handle in handles:
        profile_id = known.get(handle)
        if profile_id is None:
            logger.debug("Ignoring mention of unknown handle %r in post %s", handle, post_id)
            continue
        if profile_id == author_id:
            continue
        try:
            await posts.create_mention(post_id, profile_id)
        except ConflictError:
            pass
        except FeedCoreError as exc:
            logger.warning("Skipping mention of %r for post %s: %s", handle, post_id, exc)
            continue
        mentioned.append(profile_id)
    return mentioned
