"""
CommentLens ORM Models.

A creator (User) owns comments ingested from their connected platforms.
Comments form a reply forest through ``parent_id``.
"""
from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint, func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commentlens.core.database import Base


# ═══════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════

class Platform(str, enum.Enum):
    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"


class Sentiment(str, enum.Enum):
    """Stored sentiment. The classifier's SEXUAL label is stored as NEGATIVE."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    CONSTRUCTIVE = "constructive"


class RewriteFeedback(str, enum.Enum):
    UP = "up"
    DOWN = "down"


def _values(enum_cls):
    return [member.value for member in enum_cls]


# ═══════════════════════════════════════════════════════════════════════
# Models
# ═══════════════════════════════════════════════════════════════════════

class User(Base):
    """Content creator. Credentials and sessions live outside this service."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="user", cascade="all, delete-orphan", passive_deletes=True,
    )


class Comment(Base):
    """One ingested comment, optionally a reply to another comment of the same user."""
    __tablename__ = "comments"
    __table_args__ = (
        UniqueConstraint("user_id", "external_id", "platform", name="uq_comments_user_external_platform"),
        Index("ix_comments_user_created", "user_id", "created_at"),
        Index("ix_comments_user_sentiment", "user_id", "sentiment"),
        Index("ix_comments_user_video", "user_id", "video_id"),
        Index("ix_comments_parent_id", "parent_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    external_id: Mapped[str] = mapped_column(String(256))
    platform: Mapped[Platform] = mapped_column(
        Enum(Platform, name="platform_enum", values_callable=_values, native_enum=False),
        default=Platform.YOUTUBE,
    )

    author: Mapped[str] = mapped_column(String(256))
    author_avatar: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    text: Mapped[str] = mapped_column(Text)
    empathic_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sentiment: Mapped[Optional[Sentiment]] = mapped_column(
        Enum(Sentiment, name="sentiment_enum", values_callable=_values, native_enum=False),
        nullable=True,
    )

    video_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    video_title: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    video_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE"), nullable=True,
    )
    is_reply: Mapped[bool] = mapped_column(Boolean, default=False)
    reply_count: Mapped[int] = mapped_column(Integer, default=0)
    is_owner: Mapped[bool] = mapped_column(Boolean, default=False)

    feedback: Mapped[Optional[RewriteFeedback]] = mapped_column(
        Enum(RewriteFeedback, name="feedback_enum", values_callable=_values, native_enum=False),
        nullable=True,
    )
    feedback_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped["User"] = relationship("User", back_populates="comments")
