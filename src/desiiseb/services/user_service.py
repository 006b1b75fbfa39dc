"""Profile lookups, derived stats and edits."""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from desiiseb.core.errors import NotFoundError
from desiiseb.db.time import utcnow
from desiiseb.models import Profile
from desiiseb.repositories.interaction_repo import InteractionRepository
from desiiseb.repositories.profile_repo import ProfileRepository
from desiiseb.schemas.user import ProfileCreate, ProfileResponse, ProfileUpdate

__all__ = [
    "create_profile",
    "get_profile",
    "get_profile_by_username",
    "get_profile_view",
    "update_profile",
]


async def get_profile(session: AsyncSession, user_id: int) -> Profile:
    """Return a profile by id or raise `NotFoundError`."""
    profile = await ProfileRepository(session).get_by_id(user_id)
    if profile is None:
        raise NotFoundError(f"Profile {user_id} does not exist")
    return profile


async def get_profile_by_username(session: AsyncSession, username: str) -> Profile:
    """Return a profile by username or raise `NotFoundError`."""
    profile = await ProfileRepository(session).get_by_username(username)
    if profile is None:
        raise NotFoundError(f"Profile {username!r} does not exist")
    return profile


async def create_profile(session: AsyncSession, data: ProfileCreate) -> Profile:
    """Persist a new profile; a taken username raises `ConflictError`."""
    return await ProfileRepository(session).create(
        username=data.username,
        display_name=data.display_name,
        avatar_url=data.avatar_url,
    )


async def get_profile_view(
    session: AsyncSession,
    username: str,
    viewer_id: int | None = None,
) -> ProfileResponse:
    """Return a profile with post/follower/following counts and follow state.

    Counts are aggregated on every call. `is_following` is always False for
    anonymous viewers and for viewers looking at their own profile.
    """
    repo = ProfileRepository(session)
    profile = await get_profile_by_username(session, username)

    is_following = False
    if viewer_id is not None and viewer_id != profile.id:
        is_following = await InteractionRepository(session).is_following(viewer_id, profile.id)

    view = ProfileResponse.model_validate(profile)
    view.posts_count = await repo.count_posts(profile.id)
    view.followers_count = await repo.count_followers(profile.id)
    view.following_count = await repo.count_following(profile.id)
    view.is_following = is_following
    return view


async def update_profile(
    session: AsyncSession,
    user_id: int,
    update_data: ProfileUpdate,
) -> Profile:
    """Apply partial updates to a profile owned by `user_id`."""
    repo = ProfileRepository(session)
    profile = await get_profile(session, user_id)

    update_dict = update_data.model_dump(exclude_unset=True)
    # display_name is required on the row; an explicit None leaves it unchanged.
    if "display_name" in update_dict and update_dict["display_name"] is None:
        del update_dict["display_name"]
    for key, value in update_dict.items():
        setattr(profile, key, value)
    profile.updated_at = utcnow()

    return await repo.save(profile)
