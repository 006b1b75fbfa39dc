"""Content store repositories backed by SQLAlchemy."""

from .interaction_repo import InteractionRepository
from .notification_repo import NotificationRepository
from .post_repo import PostRepository
from .profile_repo import ProfileRepository

__all__ = [
    "InteractionRepository",
    "NotificationRepository",
    "PostRepository",
    "ProfileRepository",
]
