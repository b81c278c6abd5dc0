"""
clubhouse.services.ranking_service — Ranking Projection
========================================================

Read-only leaderboard derived from ``users`` at query time.  Nothing is
cached or stored.

Ordering is points descending with the member id ascending as the tiebreak,
so equal scores always come back in the same order.  Ranks are positional:
two members on 120 points get ranks 4 and 5, not 4 and 4.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import and_, func, or_, select

from clubhouse.database.engine import session_scope
from clubhouse.database.models import TierType, User
from clubhouse.engine.tiers import next_tier, points_to_next_tier, tier_progress

DEFAULT_LIMIT = 50


@dataclass(frozen=True, slots=True)
class RankedUser:
    user: User
    rank: int
    next_tier: TierType | None
    points_to_next_tier: int | None
    progress: float


def _project(user: User, rank: int) -> RankedUser:
    return RankedUser(
        user=user,
        rank=rank,
        next_tier=next_tier(user.tier),
        points_to_next_tier=points_to_next_tier(user.points, user.tier),
        progress=tier_progress(user.points, user.tier),
    )


def rank(engine, limit: int = DEFAULT_LIMIT) -> list[RankedUser]:
    """Top *limit* members by points, test accounts excluded."""
    with session_scope(engine) as session:
        users = session.scalars(
            select(User)
            .where(User.is_test_account.is_(False))
            .order_by(User.points.desc(), User.id)
            .limit(limit)
        ).all()
    return [_project(user, position) for position, user in enumerate(users, start=1)]


def get_user_rank(engine, user_id: str) -> RankedUser | None:
    """One member's position on the full leaderboard.

    ``None`` for unknown members and for test accounts, which never rank.
    """
    with session_scope(engine) as session:
        user = session.get(User, user_id)
        if user is None or user.is_test_account:
            return None
        ahead = session.scalar(
            select(func.count())
            .select_from(User)
            .where(
                User.is_test_account.is_(False),
                or_(
                    User.points > user.points,
                    and_(User.points == user.points, User.id < user.id),
                ),
            )
        ) or 0
    return _project(user, ahead + 1)
