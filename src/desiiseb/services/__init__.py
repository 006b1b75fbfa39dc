"""Business logic services for the desiiseb feed core."""

from .feed import FeedScope, compose_feed, iter_feed
from .hashtags import extract_hashtags, link_hashtags
from .interactions import toggle_follow, toggle_like, toggle_repost
from .mentions import extract_mentions, link_mentions
from .notifications import aggregate_notifications
from .post_service import create_post, get_post, validate_content
from .user_service import (
    create_profile,
    get_profile,
    get_profile_by_username,
    get_profile_view,
    update_profile,
)

__all__ = [
    "FeedScope", "compose_feed", "iter_feed",
    "extract_hashtags", "link_hashtags",
    "toggle_follow", "toggle_like", "toggle_repost",
    "extract_mentions", "link_mentions",
    "aggregate_notifications",
    "create_post", "get_post", "validate_content",
    "create_profile", "get_profile", "get_profile_by_username",
    "get_profile_view", "update_profile",
]
