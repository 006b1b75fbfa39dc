"""SQLAlchemy models for posts and related attributes."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from desiiseb.db.session import Base
from desiiseb.db.time import utcnow


class Post(Base):
    """Primary content entity produced by users.

    Posts are immutable once created. Like and repost counts are derived from
    the relationship tables and never stored on the row.
    """

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_author_created", "author_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # A reply references at most one parent; the parent is never embedded.
    reply_to: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="SET NULL"),
        nullable=True,
    )

    media_urls: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    media_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
