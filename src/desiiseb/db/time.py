"""Clock used for row timestamps."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Timezone-aware now, used as the `created_at`/`updated_at` default."""
    return datetime.now(UTC)
