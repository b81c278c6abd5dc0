"""
clubhouse.services.post_service — Post Lifecycle & Point Accrual
=================================================================

Every function that changes points runs the content mutation and the
ledger delta inside **one** transaction:

  1. Begin transaction
  2. Load and permission-check the post / comment
  3. Insert / delete the content row
  4. Apply the ledger delta
  5. Commit — or roll everything back

A delete reverses points only when its own ``DELETE … RETURNING`` removed
the row.  Two deletes of the same post race on that statement; the loser
gets ``NotFound`` and rolls back, so a grant is never reversed twice.

Point values come from ``POINT_VALUES``; a deleted post reverses the grant
for its *stored* category, never one re-derived from its content.

Likes and comments are child rows, so two members liking and commenting on
the same post at once touch different rows and cannot overwrite each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from clubhouse.constants import POINT_VALUES, post_points
from clubhouse.database.engine import session_scope
from clubhouse.database.models import (
    Comment,
    PointReason,
    Post,
    PostCategory,
    PostLike,
    User,
)
from clubhouse.errors import InvalidOperation, NotFound, PermissionDenied
from clubhouse.services import ledger

logger = logging.getLogger(__name__)

_UNSET: Any = object()


@dataclass(frozen=True, slots=True)
class LikeResult:
    """State of a post's likes after a toggle."""

    liked: bool
    like_count: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _parse_category(category: str) -> PostCategory:
    try:
        return PostCategory(category)
    except ValueError:
        raise InvalidOperation(f"Unknown post category: {category!r}") from None


def _require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidOperation(f"{field} must not be blank")
    return value.strip()


def _require_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


def _require_post(session: Session, post_id: int) -> Post:
    post = session.get(Post, post_id)
    if post is None:
        raise NotFound(f"Post {post_id} not found")
    return post


def _is_admin(session: Session, user_id: str) -> bool:
    actor = session.get(User, user_id)
    return actor is not None and actor.is_admin


def _with_children():
    return (selectinload(Post.likes), selectinload(Post.comments))


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_post(engine, post_id: int) -> Post:
    """Return a post with its likes and comments loaded."""
    with session_scope(engine) as session:
        post = session.scalar(
            select(Post).options(*_with_children()).where(Post.id == post_id)
        )
        if post is None:
            raise NotFound(f"Post {post_id} not found")
        return post


def list_posts(engine, category: str | None = None, limit: int | None = None) -> list[Post]:
    """Posts newest first, optionally restricted to one board."""
    stmt = select(Post).options(*_with_children()).order_by(
        Post.created_at.desc(), Post.id.desc()
    )
    if category is not None:
        stmt = stmt.where(Post.category == _parse_category(category).value)
    if limit is not None:
        stmt = stmt.limit(limit)
    with session_scope(engine) as session:
        return list(session.scalars(stmt).all())


def list_user_posts(engine, author_id: str) -> list[Post]:
    """A member's own posts, newest first."""
    with session_scope(engine) as session:
        return list(session.scalars(
            select(Post)
            .options(*_with_children())
            .where(Post.author_id == author_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
        ).all())


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------
def create_post(
    engine,
    author_id: str,
    title: str,
    content: str,
    category: str,
    image_url: str | None = None,
) -> Post:
    """Create a post and grant the author its category's points.

    The author's name, photo and *current* tier are copied onto the post and
    never refreshed afterwards.
    """
    category = _parse_category(category)
    title = _require_text(title, "Title")
    content = _require_text(content, "Content")

    with session_scope(engine) as session:
        author = _require_user(session, author_id)
        post = Post(
            author_id=author.id,
            author_name=author.name,
            author_photo_url=author.photo_url,
            author_tier=author.tier,
            title=title,
            content=content,
            image_url=image_url or None,
            category=category.value,
            likes=[],
            comments=[],
        )
        session.add(post)
        session.flush()
        ledger.apply_delta(
            session,
            author.id,
            post_points(category),
            reason=PointReason.POST_CREATE,
            post_id=post.id,
            actor_id=author.id,
        )

    logger.info("Post %d created by %s in %s", post.id, author_id, category)
    return post


def update_post(
    engine,
    post_id: int,
    actor_id: str,
    *,
    title: str | None = None,
    content: str | None = None,
    image_url: str | None = _UNSET,
) -> Post:
    """Edit title, content or image.  Only the author may edit.

    Pass ``image_url=None`` to remove the image; leave it out to keep it.
    Category is fixed at creation because it keys the point grant.
    """
    with session_scope(engine) as session:
        post = _require_post(session, post_id)
        if post.author_id != actor_id:
            raise PermissionDenied("Only the author can edit this post")

        if title is not None:
            post.title = _require_text(title, "Title")
        if content is not None:
            post.content = _require_text(content, "Content")
        if image_url is not _UNSET:
            post.image_url = image_url or None
        session.flush()

        return session.scalar(
            select(Post)
            .options(*_with_children())
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )


def delete_post(engine, post_id: int, actor_id: str) -> None:
    """Delete a post (author or admin) and take back its creation grant.

    Comments and likes go with the post.  Their grants are *not* reversed —
    only the post's own category grant is.
    """
    with session_scope(engine) as session:
        post = _require_post(session, post_id)
        if post.author_id != actor_id and not _is_admin(session, actor_id):
            raise PermissionDenied("Only the author or an admin can delete this post")

        # Only the request whose DELETE removes the row reverses the grant.
        claimed = session.execute(
            delete(Post)
            .where(Post.id == post_id)
            .returning(Post.author_id, Post.category)
            .execution_options(synchronize_session=False)
        ).one_or_none()
        if claimed is None:
            raise NotFound(f"Post {post_id} not found")
        author_id, category = claimed

        session.execute(delete(PostLike).where(PostLike.post_id == post_id))
        session.execute(delete(Comment).where(Comment.post_id == post_id))
        ledger.apply_delta(
            session,
            author_id,
            -post_points(category),
            reason=PointReason.POST_DELETE,
            post_id=post_id,
            actor_id=actor_id,
        )

    logger.info("Post %d deleted by %s", post_id, actor_id)


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------
def toggle_like(engine, post_id: int, user_id: str) -> LikeResult:
    """Like the post if *user_id* hasn't yet, otherwise unlike it.

    The post's author — not the liker — gains or loses ``LIKE_RECEIVED``
    points.
    """
    amount = POINT_VALUES["LIKE_RECEIVED"]
    with session_scope(engine) as session:
        post = _require_post(session, post_id)

        removed = session.execute(
            delete(PostLike).where(
                PostLike.post_id == post_id, PostLike.user_id == user_id
            )
        ).rowcount

        if removed:
            ledger.apply_delta(
                session, post.author_id, -amount,
                reason=PointReason.LIKE_REVOKED, post_id=post_id, actor_id=user_id,
            )
            liked = False
        else:
            try:
                with session.begin_nested():   # SAVEPOINT
                    session.add(PostLike(post_id=post_id, user_id=user_id))
                    session.flush()
            except IntegrityError:
                # A parallel request from the same member inserted it first;
                # that request owns the grant.
                logger.debug("Duplicate like on post %d by %s ignored", post_id, user_id)
            else:
                ledger.apply_delta(
                    session, post.author_id, amount,
                    reason=PointReason.LIKE_RECEIVED, post_id=post_id, actor_id=user_id,
                )
            liked = True

        like_count = session.scalar(
            select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
        ) or 0

    return LikeResult(liked=liked, like_count=like_count)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
def add_comment(engine, post_id: int, author_id: str, content: str) -> Comment:
    """Add a comment (any member, any post) and grant its author points."""
    content = _require_text(content, "Comment")
    with session_scope(engine) as session:
        _require_post(session, post_id)
        author = _require_user(session, author_id)
        comment = Comment(
            post_id=post_id,
            author_id=author.id,
            author_name=author.name,
            author_photo_url=author.photo_url,
            author_tier=author.tier,
            content=content,
        )
        session.add(comment)
        session.flush()
        ledger.apply_delta(
            session,
            author.id,
            POINT_VALUES["COMMENT"],
            reason=PointReason.COMMENT_ADD,
            post_id=post_id,
            comment_id=comment.id,
            actor_id=author.id,
        )

    logger.info("Comment %s added to post %d by %s", comment.id, post_id, author_id)
    return comment


def delete_comment(engine, post_id: int, comment_id: str, actor_id: str) -> None:
    """Remove a comment by id (its author or an admin) and reverse its grant."""
    with session_scope(engine) as session:
        _require_post(session, post_id)
        comment = session.get(Comment, comment_id)
        if comment is None or comment.post_id != post_id:
            raise NotFound(f"Comment {comment_id} not found on post {post_id}")
        if comment.author_id != actor_id and not _is_admin(session, actor_id):
            raise PermissionDenied("Only the author or an admin can delete this comment")

        claimed = session.execute(
            delete(Comment)
            .where(Comment.id == comment_id, Comment.post_id == post_id)
            .returning(Comment.author_id)
            .execution_options(synchronize_session=False)
        ).one_or_none()
        if claimed is None:
            raise NotFound(f"Comment {comment_id} not found on post {post_id}")

        ledger.apply_delta(
            session,
            claimed.author_id,
            -POINT_VALUES["COMMENT"],
            reason=PointReason.COMMENT_DELETE,
            post_id=post_id,
            comment_id=comment_id,
            actor_id=actor_id,
        )

    logger.info("Comment %s on post %d deleted by %s", comment_id, post_id, actor_id)
