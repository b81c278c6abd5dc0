"""
clubhouse.services.admin_service — Admin Override Service Layer
================================================================

Privileged mutations from the admin panel.  The caller (the API's
``get_current_admin`` dependency) has already checked ``is_admin``; this
module trusts that and does not re-check.

Every write follows the pattern:
  1. Begin transaction
  2. Read "before" snapshot
  3. Apply change (points via the ledger, flags directly)
  4. Write admin_log with before/after JSON
  5. Commit
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from clubhouse.database.engine import session_scope
from clubhouse.database.models import (
    AdminActionType,
    AdminLog,
    PointReason,
    Reward,
    User,
)
from clubhouse.errors import InvalidOperation, NotFound
from clubhouse.services import ledger

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Generic audit helpers
# ---------------------------------------------------------------------------

def _row_to_dict(obj: Any) -> dict | None:
    """Convert a SQLAlchemy model instance to a JSON-serializable dict."""
    if obj is None:
        return None
    result = {}
    for col in obj.__table__.columns:
        val = getattr(obj, col.key, None)
        if isinstance(val, datetime):
            val = val.isoformat()
        result[col.name] = val
    return result


def _log_admin_action(
    session: Session,
    *,
    actor_id: str,
    action_type: AdminActionType,
    target_table: str,
    target_id: str | None,
    before: dict | None,
    after: dict | None,
    reason: str | None = None,
) -> None:
    """Insert a row into admin_log within the current transaction."""
    session.add(AdminLog(
        actor_id=actor_id,
        action_type=action_type.value,
        target_table=target_table,
        target_id=target_id,
        before_snapshot=before,
        after_snapshot=after,
        reason=reason,
    ))


def _require_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


def _audited_flag_update(
    engine,
    user_id: str,
    *,
    field: str,
    value: bool,
    action_type: AdminActionType,
    actor_id: str,
) -> User:
    with session_scope(engine) as session:
        user = _require_user(session, user_id)
        before = _row_to_dict(user)
        setattr(user, field, bool(value))
        session.flush()
        _log_admin_action(
            session,
            actor_id=actor_id,
            action_type=action_type,
            target_table="users",
            target_id=user_id,
            before=before,
            after=_row_to_dict(user),
        )
    logger.info("Admin %s set %s=%s on %s", actor_id, field, value, user_id)
    return user


# ---------------------------------------------------------------------------
# Member flags & points
# ---------------------------------------------------------------------------

def set_admin_flag(engine, user_id: str, value: bool, *, actor_id: str) -> User:
    """Grant or revoke admin rights."""
    return _audited_flag_update(
        engine, user_id,
        field="is_admin", value=value,
        action_type=AdminActionType.SET_ADMIN, actor_id=actor_id,
    )


def set_test_account_flag(engine, user_id: str, value: bool, *, actor_id: str) -> User:
    """Mark or unmark a test account (hidden from ranking and member lists)."""
    return _audited_flag_update(
        engine, user_id,
        field="is_test_account", value=value,
        action_type=AdminActionType.SET_TEST_ACCOUNT, actor_id=actor_id,
    )


def adjust_points(
    engine,
    user_id: str,
    delta: int,
    *,
    actor_id: str,
    reason: str = "",
) -> User:
    """Add or remove points by hand.  Goes through the ledger like any grant.

    Unlike content-driven grants, an unknown target is an error here.
    """
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise InvalidOperation(f"Point delta must be an integer, got {delta!r}")

    with session_scope(engine) as session:
        user = _require_user(session, user_id)
        before = _row_to_dict(user)
        ledger.apply_delta(
            session, user_id, delta,
            reason=PointReason.ADMIN_ADJUST, actor_id=actor_id,
        )
        _log_admin_action(
            session,
            actor_id=actor_id,
            action_type=AdminActionType.ADJUST_POINTS,
            target_table="users",
            target_id=user_id,
            before=before,
            after=_row_to_dict(user),
            reason=reason or None,
        )
    logger.info("Admin %s adjusted %s by %+d → %d", actor_id, user_id, delta, user.points)
    return user


def set_challenger(engine, user_id: str, value: bool, *, actor_id: str) -> User:
    """Designate or revoke challenger.

    Setting the flag pins the tier to challenger; clearing it re-derives the
    tier from current points immediately.
    """
    with session_scope(engine) as session:
        user = _require_user(session, user_id)
        before = _row_to_dict(user)
        ledger.set_challenger(session, user_id, value)
        _log_admin_action(
            session,
            actor_id=actor_id,
            action_type=AdminActionType.SET_CHALLENGER,
            target_table="users",
            target_id=user_id,
            before=before,
            after=_row_to_dict(user),
        )
    logger.info("Admin %s set challenger=%s on %s → %s", actor_id, value, user_id, user.tier)
    return user


def delete_user(engine, user_id: str, *, actor_id: str) -> None:
    """Delete a member row.  Admins cannot be deleted through this path.

    Their posts, comments and messages stay; later grants aimed at them are
    dropped by the ledger.
    """
    with session_scope(engine) as session:
        user = _require_user(session, user_id)
        if user.is_admin:
            raise InvalidOperation("Admin accounts cannot be deleted")
        _log_admin_action(
            session,
            actor_id=actor_id,
            action_type=AdminActionType.DELETE_USER,
            target_table="users",
            target_id=user_id,
            before=_row_to_dict(user),
            after=None,
        )
        session.delete(user)
    logger.info("Admin %s deleted user %s", actor_id, user_id)


def list_users(engine) -> list[User]:
    """Every member, test accounts included, by points descending."""
    with session_scope(engine) as session:
        return list(session.scalars(
            select(User).order_by(User.points.desc(), User.id)
        ).all())


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------

def give_reward(
    engine,
    user_id: str,
    reward_name: str,
    description: str = "",
    *,
    actor_id: str,
) -> Reward:
    """Record a prize handed to a member.  Points are untouched."""
    reward_name = (reward_name or "").strip()
    if not reward_name:
        raise InvalidOperation("Reward name must not be blank")

    with session_scope(engine) as session:
        user = _require_user(session, user_id)
        admin = session.get(User, actor_id)
        reward = Reward(
            user_id=user.id,
            user_name=user.name,
            reward_name=reward_name,
            description=(description or "").strip(),
            given_by=admin.name if admin is not None else actor_id,
            given_by_id=actor_id,
        )
        session.add(reward)
        session.flush()
        _log_admin_action(
            session,
            actor_id=actor_id,
            action_type=AdminActionType.GIVE_REWARD,
            target_table="rewards",
            target_id=str(reward.id),
            before=None,
            after=_row_to_dict(reward),
        )
    logger.info("Admin %s gave reward %r to %s", actor_id, reward_name, user_id)
    return reward


def delete_reward(engine, reward_id: int, *, actor_id: str) -> None:
    """Remove a reward record."""
    with session_scope(engine) as session:
        reward = session.get(Reward, reward_id)
        if reward is None:
            raise NotFound(f"Reward {reward_id} not found")
        _log_admin_action(
            session,
            actor_id=actor_id,
            action_type=AdminActionType.DELETE_REWARD,
            target_table="rewards",
            target_id=str(reward_id),
            before=_row_to_dict(reward),
            after=None,
        )
        session.delete(reward)


def list_rewards(engine, user_id: str | None = None) -> list[Reward]:
    """Rewards newest first, optionally for one member."""
    stmt = select(Reward).order_by(Reward.given_at.desc(), Reward.id.desc())
    if user_id is not None:
        stmt = stmt.where(Reward.user_id == user_id)
    with session_scope(engine) as session:
        return list(session.scalars(stmt).all())


# ---------------------------------------------------------------------------
# Overview & audit
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Overview:
    """Headline counts for the admin panel."""

    total_users: int
    challengers: int
    admins: int
    test_accounts: int
    rewards_given: int


def get_overview(engine) -> Overview:
    with session_scope(engine) as session:
        def _count_users(*criteria) -> int:
            return session.scalar(
                select(func.count()).select_from(User).where(*criteria)
            ) or 0

        return Overview(
            total_users=_count_users(),
            challengers=_count_users(User.is_challenger.is_(True)),
            admins=_count_users(User.is_admin.is_(True)),
            test_accounts=_count_users(User.is_test_account.is_(True)),
            rewards_given=session.scalar(select(func.count()).select_from(Reward)) or 0,
        )


def get_audit_log(
    engine,
    *,
    target_id: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[AdminLog]:
    """Most recent admin actions first."""
    stmt = select(AdminLog).order_by(AdminLog.id.desc()).offset(offset).limit(limit)
    if target_id is not None:
        stmt = stmt.where(AdminLog.target_id == target_id)
    with session_scope(engine) as session:
        return list(session.scalars(stmt).all())
