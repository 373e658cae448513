"""Video catalogue rows and per-user watch history (read-model sources)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from accounts.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .user import User


class Video(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Uploaded video owned by a channel.

    Only the watch-history aggregation reads this table; the account API
    never writes it.
    """

    __tablename__ = "videos"
    __repr_attrs__ = ("title",)

    video_file: Mapped[str] = mapped_column(String(512), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(512), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duration: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    owner: Mapped[User] = relationship()

    __table_args__ = (
        CheckConstraint("views >= 0", name="views_non_negative"),
        CheckConstraint("duration >= 0", name="duration_non_negative"),
    )


class WatchHistoryEntry(PKMixin, ReprMixin, db.Model):
    """
    One video in a user's watch history.

    ``position`` orders the list; lower values come first.
    """

    __tablename__ = "watch_history"
    __repr_attrs__ = ("user_id", "video_id", "position")

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    watched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    user: Mapped[User] = relationship(back_populates="watch_history")
    video: Mapped[Video] = relationship()

    __table_args__ = (
        UniqueConstraint("user_id", "position", name="uq_watch_history_user_position"),
        Index("ix_watch_history_user_id_position", "user_id", "position"),
    )
