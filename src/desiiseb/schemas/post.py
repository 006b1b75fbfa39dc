"""Post and feed related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import AuthorSummary


class PostCreate(BaseModel):
    """Input for authoring a new post.

    Only shape is checked here; the length limit is configurable and enforced
    by the post service before anything is written.
    """

    content: str = Field("", description="Post text; hashtags and @mentions are extracted")
    reply_to: int | None = Field(None, description="Identifier of the post being replied to")
    media_urls: list[str] | None = Field(None, description="Attached media URLs")
    media_type: str | None = Field(None, max_length=20, description="Media kind, e.g. image")

    @field_validator("media_urls")
    @classmethod
    def _drop_empty_media(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        urls = [url.strip() for url in value if url and url.strip()]
        return urls or None


class FeedItem(BaseModel):
    """A post as shown in a feed, annotated for one viewer.

    `sort_key` is the repost time for repost items and the authoring time
    otherwise.
    """

    id: int
    content: str
    created_at: datetime
    author: AuthorSummary
    reply_to: int | None = None
    media_urls: list[str] | None = None
    media_type: str | None = None

    likes_count: int = 0
    is_liked: bool = False
    reposts_count: int = 0
    is_reposted: bool = False

    is_repost: bool = False
    reposted_by: AuthorSummary | None = None
    repost_created_at: datetime | None = None
    sort_key: datetime

    model_config = ConfigDict(from_attributes=True)


class FeedPage(BaseModel):
    """One page of a composed feed."""

    items: list[FeedItem]
    next_cursor: str | None = Field(
        None,
        description="Cursor for the following page; None when the feed is exhausted.",
    )
