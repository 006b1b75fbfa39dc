"""Schemas describing the outcome of like, repost and follow toggles."""

from pydantic import BaseModel, Field


class ToggleResult(BaseModel):
    """Result of a relationship toggle."""

    is_active: bool = Field(..., description="True when the relationship exists after the call")
    delta: int = Field(..., ge=-1, le=1, description="Change applied to the counter")
    count: int = Field(..., ge=0, description="Counter re-aggregated after the write")

    @property
    def is_liked(self) -> bool:
        """Alias used by like toggles."""
        return self.is_active

    @property
    def is_reposted(self) -> bool:
        """Alias used by repost toggles."""
        return self.is_active

    @property
    def is_following(self) -> bool:
        """Alias used by follow toggles."""
        return self.is_active
