"""Profile-related Pydantic schemas."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,50}$")


class ProfileCreate(BaseModel):
    """Input for creating a profile row."""

    username: str = Field(..., description="Unique handle used in @mentions")
    display_name: str = Field(..., min_length=1, max_length=50)
    avatar_url: str | None = None

    @field_validator("username")
    @classmethod
    def _validate_username(cls, value: str) -> str:
        if not _USERNAME_RE.fullmatch(value):
            raise ValueError("username must be 3-50 letters, digits or underscores")
        return value


class ProfileUpdate(BaseModel):
    """Partial update applied by a user to their own profile."""

    display_name: str | None = Field(None, min_length=1, max_length=50)
    bio: str | None = Field(None, max_length=160)
    website: str | None = Field(None, max_length=100)
    location: str | None = Field(None, max_length=30)

    @field_validator("display_name")
    @classmethod
    def _strip_display_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("display_name cannot be blank")
        return value

    @field_validator("bio", "location")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("website")
    @classmethod
    def _validate_website(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("website must start with http:// or https://")
        return value


class ProfileResponse(BaseModel):
    """Profile with derived counters, as seen by one viewer."""

    id: int
    username: str
    display_name: str
    bio: str | None = None
    website: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    posts_count: int = 0
    followers_count: int = 0
    following_count: int = 0
    is_following: bool = False

    model_config = ConfigDict(from_attributes=True)
