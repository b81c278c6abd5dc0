"""
clubhouse.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- users           — Club members, keyed by the identity provider's uid
- posts           — Board posts with a frozen author snapshot
- post_likes      — One row per (post, liker); the PK is the uniqueness rule
- comments        — Comments embedded under a post, keyed by a generated id
- point_log       — Append-only journal of every applied ledger delta
- rewards         — Admin-issued prize records (never touch points)
- messages        — Private messages with per-party soft delete
- gallery_images  — Club photo metadata (the image itself lives elsewhere)
- admin_log       — Append-only audit trail of admin overrides

Author columns (``author_id``, ``sender_id`` …) are not foreign keys:
content outlives the member who wrote it.
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# BIGINT keys on PostgreSQL; SQLite only autoincrements INTEGER PRIMARY KEY.
_BIGINT_PK = BigInteger().with_variant(Integer, "sqlite")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _comment_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Clubhouse ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class TierType(enum.StrEnum):
    """Named ranks, lowest to highest.  ``CHALLENGER`` is flag-driven only."""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"
    MASTER = "master"
    CHALLENGER = "challenger"


class PostCategory(enum.StrEnum):
    """The three boards a post can live on."""
    INTRODUCTION = "introduction"
    FREE = "free"
    GAMES = "games"


class PointReason(enum.StrEnum):
    """Why a ledger delta was applied (recorded in point_log)."""
    POST_CREATE = "POST_CREATE"
    POST_DELETE = "POST_DELETE"
    COMMENT_ADD = "COMMENT_ADD"
    COMMENT_DELETE = "COMMENT_DELETE"
    LIKE_RECEIVED = "LIKE_RECEIVED"
    LIKE_REVOKED = "LIKE_REVOKED"
    ADMIN_ADJUST = "ADMIN_ADJUST"


class AdminActionType(enum.StrEnum):
    """Categories of admin mutations recorded in admin_log."""
    SET_ADMIN = "SET_ADMIN"
    SET_TEST_ACCOUNT = "SET_TEST_ACCOUNT"
    SET_CHALLENGER = "SET_CHALLENGER"
    ADJUST_POINTS = "ADJUST_POINTS"
    DELETE_USER = "DELETE_USER"
    GIVE_REWARD = "GIVE_REWARD"
    DELETE_REWARD = "DELETE_REWARD"


# ---------------------------------------------------------------------------
# Users — one row per authenticated member
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), default="")
    display_name: Mapped[str] = mapped_column(String(100), default="")
    nickname: Mapped[str | None] = mapped_column(String(50), default=None)
    photo_url: Mapped[str | None] = mapped_column(Text, default=None)
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tier: Mapped[str] = mapped_column(
        String(20), default=TierType.BRONZE.value, nullable=False
    )
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_challenger: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_test_account: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Profile (self-edited on the My Page screen)
    introduction: Mapped[str | None] = mapped_column(Text, default=None)
    favorite_game: Mapped[str | None] = mapped_column(String(100), default=None)
    student_id: Mapped[str | None] = mapped_column(String(30), default=None)
    lol_nickname: Mapped[str | None] = mapped_column(String(50), default=None)
    main_position: Mapped[str | None] = mapped_column(String(20), default=None)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("ix_users_points_desc", "points"),
    )

    @property
    def name(self) -> str:
        """The name shown next to content: nickname if set, else display name."""
        return self.nickname or self.display_name

    def __repr__(self) -> str:
        return f"<User id={self.id!r} name={self.name!r} points={self.points} tier={self.tier}>"


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------
class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[str] = mapped_column(String(128), nullable=False)
    # Snapshot taken at creation — never refreshed
    author_name: Mapped[str] = mapped_column(String(100), nullable=False)
    author_photo_url: Mapped[str | None] = mapped_column(Text, default=None)
    author_tier: Mapped[str] = mapped_column(String(20), nullable=False)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, default=None)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    likes: Mapped[list[PostLike]] = relationship(
        back_populates="post", cascade="all, delete-orphan"
    )
    comments: Mapped[list[Comment]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="[Comment.created_at, Comment.id]",
    )

    __table_args__ = (
        Index("ix_posts_category_time", "category", "created_at"),
        Index("ix_posts_author_time", "author_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Post id={self.id} category={self.category} author={self.author_id!r}>"


class PostLike(Base):
    __tablename__ = "post_likes"

    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    post: Mapped[Post] = relationship(back_populates="likes")

    def __repr__(self) -> str:
        return f"<PostLike post={self.post_id} user={self.user_id!r}>"


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_comment_id)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[str] = mapped_column(String(128), nullable=False)
    author_name: Mapped[str] = mapped_column(String(100), nullable=False)
    author_photo_url: Mapped[str | None] = mapped_column(Text, default=None)
    author_tier: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    post: Mapped[Post] = relationship(back_populates="comments")

    __table_args__ = (
        Index("ix_comments_post_time", "post_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Comment id={self.id!r} post={self.post_id} author={self.author_id!r}>"


# ---------------------------------------------------------------------------
# PointLog — append-only ledger journal
# ---------------------------------------------------------------------------
class PointLog(Base):
    __tablename__ = "point_log"

    id: Mapped[int] = mapped_column(_BIGINT_PK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    reason: Mapped[str] = mapped_column(String(30), nullable=False)
    delta: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    tier_after: Mapped[str] = mapped_column(String(20), nullable=False)
    post_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    comment_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    actor_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index("ix_point_log_user_time", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<PointLog user={self.user_id!r} reason={self.reason} delta={self.delta}>"


# ---------------------------------------------------------------------------
# Rewards — prizes handed out at club events
# ---------------------------------------------------------------------------
class Reward(Base):
    __tablename__ = "rewards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    user_name: Mapped[str] = mapped_column(String(100), nullable=False)
    reward_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    given_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    given_by: Mapped[str] = mapped_column(String(100), nullable=False)
    given_by_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        Index("ix_rewards_given_at", "given_at"),
    )

    def __repr__(self) -> str:
        return f"<Reward id={self.id} user={self.user_id!r} name={self.reward_name!r}>"


# ---------------------------------------------------------------------------
# Messages — one shared row, independent per-party delete flags
# ---------------------------------------------------------------------------
class Message(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[str] = mapped_column(String(128), nullable=False)
    sender_name: Mapped[str] = mapped_column(String(100), nullable=False)
    sender_photo_url: Mapped[str | None] = mapped_column(Text, default=None)
    sender_tier: Mapped[str] = mapped_column(String(20), nullable=False)
    receiver_id: Mapped[str] = mapped_column(String(128), nullable=False)
    receiver_name: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_by_sender: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_by_receiver: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index("ix_messages_receiver_time", "receiver_id", "created_at"),
        Index("ix_messages_sender_time", "sender_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Message id={self.id} {self.sender_id!r}->{self.receiver_id!r}>"


# ---------------------------------------------------------------------------
# Gallery — photo metadata only
# ---------------------------------------------------------------------------
class GalleryImage(Base):
    __tablename__ = "gallery_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    uploaded_by: Mapped[str] = mapped_column(String(128), nullable=False)
    uploaded_by_name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def __repr__(self) -> str:
        return f"<GalleryImage id={self.id} title={self.title!r}>"


# ---------------------------------------------------------------------------
# AdminLog — append-only audit trail
# ---------------------------------------------------------------------------
class AdminLog(Base):
    __tablename__ = "admin_log"

    id: Mapped[int] = mapped_column(_BIGINT_PK, primary_key=True, autoincrement=True)
    actor_id: Mapped[str] = mapped_column(String(128), nullable=False)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_table: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    before_snapshot: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    after_snapshot: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_admin_log_actor_time", "actor_id", "timestamp"),
        Index("ix_admin_log_target", "target_table", "target_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<AdminLog id={self.id} actor={self.actor_id!r} action={self.action_type}>"
