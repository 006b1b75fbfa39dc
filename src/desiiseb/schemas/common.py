"""Shared Pydantic schemas for common elements."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class AuthorSummary(BaseModel):
    """Compact profile reference embedded in feed items and notifications."""

    id: int
    username: str
    display_name: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)
