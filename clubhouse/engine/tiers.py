"""
clubhouse.engine.tiers — Tier Resolution
=========================================

Pure functions over the tier table in :mod:`clubhouse.constants`.
No DB I/O.  The ledger's SQL ``CASE`` expression is generated from the same
table, so a stored tier always equals :func:`resolve_tier` of its row.
"""

from __future__ import annotations

from clubhouse.constants import TIER_ORDER, TIER_THRESHOLDS
from clubhouse.database.models import TierType

__all__ = ["next_tier", "points_to_next_tier", "resolve_tier", "tier_progress"]

# Highest first — the scan order of resolve_tier.
_DESCENDING: tuple[TierType, ...] = tuple(reversed(TIER_ORDER))


def resolve_tier(points: int, is_challenger: bool) -> TierType:
    """Return the tier for *points*, or ``CHALLENGER`` when the flag is set.

    Total over all integers: bronze's minimum is 0 and anything below it
    still falls through to bronze.
    """
    if is_challenger:
        return TierType.CHALLENGER
    for tier in _DESCENDING:
        if points >= TIER_THRESHOLDS[tier].min:
            return tier
    return TierType.BRONZE


def next_tier(tier: TierType | str) -> TierType | None:
    """The tier after *tier*, or ``None`` at master/challenger."""
    tier = TierType(tier)
    if tier is TierType.CHALLENGER or tier is TierType.MASTER:
        return None
    return TIER_ORDER[TIER_ORDER.index(tier) + 1]


def points_to_next_tier(points: int, tier: TierType | str) -> int | None:
    """Points still missing before *tier*'s successor; ``None`` at the ceiling."""
    upcoming = next_tier(tier)
    if upcoming is None:
        return None
    return TIER_THRESHOLDS[upcoming].min - points


def tier_progress(points: int, tier: TierType | str) -> float:
    """Fraction of the way from *tier*'s minimum to the next tier, in [0, 1].

    Master and challenger have nowhere left to go and report ``1.0``.
    """
    upcoming = next_tier(tier)
    if upcoming is None:
        return 1.0
    current_min = TIER_THRESHOLDS[TierType(tier)].min
    next_min = TIER_THRESHOLDS[upcoming].min
    fraction = (points - current_min) / (next_min - current_min)
    return min(1.0, max(0.0, fraction))
