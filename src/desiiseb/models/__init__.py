# src/desiiseb/models/__init__.py
"""SQLAlchemy models for the desiiseb feed core."""

from .follow import Follow
from .hashtag import Hashtag, PostHashtag
from .interaction import Like, Repost
from .mention import Mention
from .post import Post
from .profile import Profile

__all__ = [
    "Follow",
    "Hashtag", "PostHashtag",
    "Like", "Repost",
    "Mention",
    "Post",
    "Profile",
]
