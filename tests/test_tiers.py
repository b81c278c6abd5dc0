"""
tests/test_tiers.py — Tier Resolution Tests
============================================
Pure-function tests for clubhouse.engine.tiers.  No DB required.
"""

from __future__ import annotations

import pytest

from clubhouse.constants import TIER_ORDER, TIER_THRESHOLDS, post_points
from clubhouse.database.models import PostCategory, TierType
from clubhouse.engine.tiers import (
    next_tier,
    points_to_next_tier,
    resolve_tier,
    tier_progress,
)


class TestResolveTier:
    @pytest.mark.parametrize(
        ("points", "expected"),
        [
            (0, TierType.BRONZE),
            (99, TierType.BRONZE),
            (100, TierType.SILVER),
            (299, TierType.SILVER),
            (300, TierType.GOLD),
            (699, TierType.GOLD),
            (700, TierType.PLATINUM),
            (1499, TierType.PLATINUM),
            (1500, TierType.DIAMOND),
            (2999, TierType.DIAMOND),
            (3000, TierType.MASTER),
            (1_000_000, TierType.MASTER),
        ],
    )
    def test_boundaries(self, points, expected):
        assert resolve_tier(points, False) is expected

    def test_challenger_flag_wins_at_zero_points(self):
        assert resolve_tier(0, True) is TierType.CHALLENGER

    def test_challenger_flag_wins_at_master_points(self):
        assert resolve_tier(5000, True) is TierType.CHALLENGER

    def test_negative_points_fall_back_to_bronze(self):
        assert resolve_tier(-5, False) is TierType.BRONZE

    def test_never_resolves_challenger_from_points(self):
        for points in range(0, 4000, 37):
            assert resolve_tier(points, False) is not TierType.CHALLENGER

    def test_monotonic_in_points(self):
        previous = 0
        for points in range(0, 3200):
            index = TIER_ORDER.index(resolve_tier(points, False))
            assert index >= previous
            previous = index


class TestTierTable:
    def test_ranges_are_contiguous(self):
        for lower, upper in zip(TIER_ORDER, TIER_ORDER[1:]):
            assert TIER_THRESHOLDS[lower].max + 1 == TIER_THRESHOLDS[upper].min

    def test_master_is_open_ended(self):
        assert TIER_THRESHOLDS[TierType.MASTER].max is None

    def test_post_points_by_category(self):
        assert post_points(PostCategory.INTRODUCTION) == 50
        assert post_points("free") == 10
        assert post_points(PostCategory.GAMES) == 10


class TestProgress:
    def test_next_tier(self):
        assert next_tier(TierType.BRONZE) is TierType.SILVER
        assert next_tier("diamond") is TierType.MASTER
        assert next_tier(TierType.MASTER) is None
        assert next_tier(TierType.CHALLENGER) is None

    def test_points_to_next_tier(self):
        assert points_to_next_tier(0, TierType.BRONZE) == 100
        assert points_to_next_tier(250, TierType.SILVER) == 50
        assert points_to_next_tier(3500, TierType.MASTER) is None
        assert points_to_next_tier(10, TierType.CHALLENGER) is None

    def test_progress_fraction(self):
        assert tier_progress(0, TierType.BRONZE) == 0.0
        assert tier_progress(50, TierType.BRONZE) == pytest.approx(0.5)
        assert tier_progress(200, TierType.SILVER) == pytest.approx(0.5)

    def test_progress_is_full_at_the_top(self):
        assert tier_progress(3000, TierType.MASTER) == 1.0
        assert tier_progress(0, TierType.CHALLENGER) == 1.0

    def test_progress_is_clamped(self):
        # a stale cached tier can sit below its own range
        assert tier_progress(50, TierType.SILVER) == 0.0
        assert tier_progress(500, TierType.SILVER) == 1.0
