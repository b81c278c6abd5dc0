"""
clubhouse.services.ledger — Point Ledger
=========================================

Applies signed point deltas to a member's running total and keeps the
cached ``tier`` column in lock-step with it.

Every write here is a **single** ``UPDATE … RETURNING`` statement.  The new
total is computed in SQL from the row's current value (``points + :delta``,
floored at zero) and the tier is a ``CASE`` over that same expression, so the
database row lock covers both columns at once.  There is no application-level
read-then-write, and two concurrent deltas on the same member both land.

Functions take an open :class:`Session` so the caller's content mutation and
the point change commit or roll back together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import ColumnElement, case, update
from sqlalchemy.orm import Session

from clubhouse.constants import TIER_ORDER, TIER_THRESHOLDS
from clubhouse.database.models import PointLog, PointReason, TierType, User
from clubhouse.errors import InvalidOperation

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LedgerResult:
    """Outcome of one applied delta."""

    user_id: str
    delta: int
    points: int
    tier: TierType


# ---------------------------------------------------------------------------
# SQL mirrors of resolve_tier
# ---------------------------------------------------------------------------
def tier_case(
    points_expr: ColumnElement[int],
    challenger_expr: ColumnElement[bool] | None = None,
) -> ColumnElement[str]:
    """Build the SQL ``CASE`` equivalent of :func:`clubhouse.engine.tiers.resolve_tier`.

    Generated from ``TIER_THRESHOLDS`` so the two can never disagree.  With
    *challenger_expr* omitted the result is the purely point-derived tier.
    """
    whens: list[tuple[ColumnElement[bool], str]] = []
    if challenger_expr is not None:
        whens.append((challenger_expr.is_(True), TierType.CHALLENGER.value))
    for tier in reversed(TIER_ORDER):
        if tier is TierType.BRONZE:
            continue
        whens.append((points_expr >= TIER_THRESHOLDS[tier].min, tier.value))
    return case(*whens, else_=TierType.BRONZE.value)


def _clamped(delta: int) -> ColumnElement[int]:
    total = User.points + delta
    return case((total < 0, 0), else_=total)


def _check_delta(delta: object) -> int:
    # bool is an int subclass; True is not a point amount
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise InvalidOperation(f"Point delta must be an integer, got {delta!r}")
    return delta


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def apply_delta(
    session: Session,
    user_id: str,
    delta: int,
    *,
    reason: PointReason,
    post_id: int | None = None,
    comment_id: str | None = None,
    actor_id: str | None = None,
) -> LedgerResult | None:
    """Add *delta* to the member's points (floored at 0) and re-derive the tier.

    Returns ``None`` — and writes nothing — when *user_id* has no row.  Grants
    aimed at a deleted member are dropped on purpose, not reported.

    Floor semantics mean a later reversal does not always undo an earlier
    grant: +10, then an admin −50 on a 20-point member, then −10 leaves 0,
    not 20.
    """
    delta = _check_delta(delta)
    new_points = _clamped(delta)
    row = session.execute(
        update(User)
        .where(User.id == user_id)
        .values(points=new_points, tier=tier_case(new_points, User.is_challenger))
        .returning(User.points, User.tier)
        .execution_options(synchronize_session="fetch")
    ).one_or_none()

    if row is None:
        logger.debug("Dropped %+d point grant for missing user %s (%s)", delta, user_id, reason)
        return None

    points, tier = row
    session.add(PointLog(
        user_id=user_id,
        reason=PointReason(reason).value,
        delta=delta,
        balance_after=points,
        tier_after=tier,
        post_id=post_id,
        comment_id=comment_id,
        actor_id=actor_id,
    ))
    logger.debug("Ledger %s %+d → %d (%s) [%s]", user_id, delta, points, tier, reason)
    return LedgerResult(user_id=user_id, delta=delta, points=points, tier=TierType(tier))


def set_challenger(session: Session, user_id: str, value: bool) -> TierType | None:
    """Write the challenger flag and the tier it implies in one statement.

    Setting the flag pins the tier to challenger; clearing it drops the
    member straight back to their point-derived tier.  Returns the new tier,
    or ``None`` if the member does not exist.
    """
    new_tier = TierType.CHALLENGER.value if value else tier_case(User.points)
    row = session.execute(
        update(User)
        .where(User.id == user_id)
        .values(is_challenger=bool(value), tier=new_tier)
        .returning(User.tier)
        .execution_options(synchronize_session="fetch")
    ).one_or_none()
    return TierType(row[0]) if row is not None else None


def recompute_tier(session: Session, user_id: str) -> TierType | None:
    """Rewrite the cached tier from the stored points and challenger flag."""
    row = session.execute(
        update(User)
        .where(User.id == user_id)
        .values(tier=tier_case(User.points, User.is_challenger))
        .returning(User.tier)
        .execution_options(synchronize_session="fetch")
    ).one_or_none()
    return TierType(row[0]) if row is not None else None
