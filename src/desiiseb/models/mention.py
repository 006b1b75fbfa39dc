"""Model for `@handle` mentions recorded at post-authoring time."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from desiiseb.db.session import Base
from desiiseb.db.time import utcnow


class Mention(Base):
    """A post referencing another user by handle."""

    __tablename__ = "mentions"
    __table_args__ = (
        UniqueConstraint("post_id", "mentioned_user_id", name="uq_mentions_post_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    mentioned_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
