"""Hashtag extraction and linking."""
from __future__ import annotations

import logging
import re

from desiiseb.core.errors import FeedCoreError
from desiiseb.repositories.post_repo import PostRepository

logger = logging.getLogger(__name__)

# ASCII letters, digits, underscore and the Bengali block (U+0980-U+09FF).
TOKEN_CHARS = r"A-Za-z0-9_\u0980-\u09FF"
HASHTAG_RE = re.compile(rf"#([{TOKEN_CHARS}]+)")

__all__ = ["HASHTAG_RE", "TOKEN_CHARS", "extract_hashtags", "link_hashtags"]


def extract_hashtags(text: str) -> list[str]:
    """Return distinct hashtag names in order of first appearance, without `#`.

    Names are compared case-sensitively, so `#News` and `#news` are two tags.
    """
    return list(dict.fromkeys(HASHTAG_RE.findall(text or "")))


async def link_hashtags(repo: PostRepository, post_id: int, text: str) -> list[str]:
    """Upsert every hashtag in `text` and link it to the post.

    A hashtag whose upsert or link fails is logged and skipped; the post
    itself stays in place.

    Returns:
        Names that are linked to the post after the call.
    """
    linked: list[str] = []
    for name in extract_hashtags(text):
        try:
            hashtag = await repo.upsert_hashtag(name)
            await repo.link_hashtag(post_id, hashtag.id)
        except FeedCoreError as exc:
            logger.warning("Skipping hashtag %r for post %s: %s", name, post_id, exc)
            continue
        linked.append(name)
    return linked
