# src/desiiseb/schemas/__init__.py
"""
Pydantic view models returned by the feed core.

These schemas define the shape of data handed to the presentation layer.
"""

from .common import AuthorSummary
from .interaction import ToggleResult
from .notification import Notification, NotificationPost
from .post import FeedItem, FeedPage, PostCreate
from .user import ProfileCreate, ProfileResponse, ProfileUpdate

__all__ = [
    "AuthorSummary",
    "ToggleResult",
    "Notification", "NotificationPost",
    "FeedItem", "FeedPage", "PostCreate",
    "ProfileCreate", "ProfileResponse", "ProfileUpdate",
]
