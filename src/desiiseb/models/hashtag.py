"""Models for hashtags and their links to posts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from desiiseb.db.session import Base
from desiiseb.db.time import utcnow


class Hashtag(Base):
    """A hashtag name, stored exactly as written (case-sensitive)."""

    __tablename__ = "hashtags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class PostHashtag(Base):
    """Join table mapping posts to hashtags."""

    __tablename__ = "post_hashtags"
    __table_args__ = (
        UniqueConstraint("post_id", "hashtag_id", name="uq_post_hashtags_post_hashtag"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    hashtag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hashtags.id", ondelete="CASCADE"),
        nullable=False,
    )
