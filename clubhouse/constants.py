"""
clubhouse.constants — Shared Constants
=======================================

Single source of truth for the tier table and the point values each content
action is worth.  Import from here instead of duplicating numbers in
services, routes, or tests.
"""

from __future__ import annotations

from typing import NamedTuple

from clubhouse.database.models import PostCategory, TierType


# ---------------------------------------------------------------------------
# Tier thresholds
# ---------------------------------------------------------------------------
class TierRange(NamedTuple):
    """Inclusive lower bound; ``max`` is informational (progress bars only)."""
    min: int
    max: int | None


TIER_THRESHOLDS: dict[TierType, TierRange] = {
    TierType.BRONZE: TierRange(0, 99),
    TierType.SILVER: TierRange(100, 299),
    TierType.GOLD: TierRange(300, 699),
    TierType.PLATINUM: TierRange(700, 1499),
    TierType.DIAMOND: TierRange(1500, 2999),
    TierType.MASTER: TierRange(3000, None),
    TierType.CHALLENGER: TierRange(0, None),  # flag-driven, never point-derived
}

# Point-derived tiers, lowest first.  Challenger is deliberately absent.
TIER_ORDER: list[TierType] = [
    TierType.BRONZE,
    TierType.SILVER,
    TierType.GOLD,
    TierType.PLATINUM,
    TierType.DIAMOND,
    TierType.MASTER,
]


# ---------------------------------------------------------------------------
# Tier presentation (used by API payloads)
# ---------------------------------------------------------------------------
TIER_INFO: dict[TierType, dict[str, str]] = {
    TierType.BRONZE: {"name": "Bronze", "emoji": "\U0001f949", "color": "#CD7F32"},      # 🥉
    TierType.SILVER: {"name": "Silver", "emoji": "\U0001f948", "color": "#C0C0C0"},      # 🥈
    TierType.GOLD: {"name": "Gold", "emoji": "\U0001f947", "color": "#FFD700"},          # 🥇
    TierType.PLATINUM: {"name": "Platinum", "emoji": "\U0001f4a0", "color": "#00CED1"},  # 💠
    TierType.DIAMOND: {"name": "Diamond", "emoji": "\U0001f48e", "color": "#B9F2FF"},    # 💎
    TierType.MASTER: {"name": "Master", "emoji": "\U0001f52e", "color": "#9D4DFF"},      # 🔮
    TierType.CHALLENGER: {"name": "Challenger", "emoji": "\U0001f451", "color": "#F4C874"},  # 👑
}


# ---------------------------------------------------------------------------
# Point values per content action
# ---------------------------------------------------------------------------
POINT_VALUES: dict[str, int] = {
    "INTRODUCTION": 50,
    "POST": 10,
    "COMMENT": 3,
    "LIKE_RECEIVED": 2,
}


def post_points(category: PostCategory | str) -> int:
    """Points granted for creating (and reversed for deleting) a post."""
    if PostCategory(category) is PostCategory.INTRODUCTION:
        return POINT_VALUES["INTRODUCTION"]
    return POINT_VALUES["POST"]


# ---------------------------------------------------------------------------
# Profile allow list (fields a member may edit on their own row)
# ---------------------------------------------------------------------------
PROFILE_FIELDS: frozenset[str] = frozenset({
    "nickname", "photo_url", "introduction", "favorite_game",
    "student_id", "lol_nickname", "main_position",
})
