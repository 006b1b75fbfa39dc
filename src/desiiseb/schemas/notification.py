"""Notification schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from .common import AuthorSummary

NotificationType = Literal["like", "follow", "mention"]


class NotificationPost(BaseModel):
    """The post a like or mention notification refers to."""

    id: int
    content: str


class Notification(BaseModel):
    """Uniform notification built from a like, follow or mention row.

    `id` is prefixed with the type so it stays unique across sources.
    """

    id: str
    type: NotificationType
    created_at: datetime
    from_user: AuthorSummary
    post: NotificationPost | None = None
