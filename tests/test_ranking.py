"""
tests/test_ranking.py — Leaderboard Projection Tests
=====================================================
"""

from __future__ import annotations

from clubhouse.database.models import TierType
from clubhouse.services import ranking_service
from conftest import make_user


class TestRank:
    def test_orders_by_points_descending(self, db_engine):
        make_user(db_engine, "low", points=10)
        make_user(db_engine, "high", points=900)
        make_user(db_engine, "mid", points=150)
        ranked = ranking_service.rank(db_engine)
        assert [r.user.id for r in ranked] == ["high", "mid", "low"]
        assert [r.rank for r in ranked] == [1, 2, 3]

    def test_ties_break_on_member_id(self, db_engine):
        make_user(db_engine, "zed", points=120)
        make_user(db_engine, "amy", points=120)
        make_user(db_engine, "top", points=500)
        ranked = ranking_service.rank(db_engine)
        assert [(r.user.id, r.rank) for r in ranked] == [("top", 1), ("amy", 2), ("zed", 3)]

    def test_test_accounts_never_appear(self, db_engine):
        make_user(db_engine, "bot", points=10_000, is_test_account=True)
        make_user(db_engine, "alice", points=5)
        ranked = ranking_service.rank(db_engine)
        assert [r.user.id for r in ranked] == ["alice"]
        assert ranked[0].rank == 1

    def test_limit(self, db_engine):
        for i in range(5):
            make_user(db_engine, f"user{i}", points=i * 10)
        assert len(ranking_service.rank(db_engine, limit=3)) == 3

    def test_progress_fields(self, db_engine):
        make_user(db_engine, "silver", points=250)
        make_user(db_engine, "master", points=3100)
        make_user(db_engine, "champ", points=40, is_challenger=True)
        by_id = {r.user.id: r for r in ranking_service.rank(db_engine)}

        assert by_id["silver"].next_tier is TierType.GOLD
        assert by_id["silver"].points_to_next_tier == 50
        assert by_id["master"].next_tier is None
        assert by_id["master"].points_to_next_tier is None
        assert by_id["master"].progress == 1.0
        assert by_id["champ"].points_to_next_tier is None

    def test_challenger_ranks_by_points_not_tier(self, db_engine):
        make_user(db_engine, "champ", points=40, is_challenger=True)
        make_user(db_engine, "grinder", points=800)
        assert [r.user.id for r in ranking_service.rank(db_engine)] == ["grinder", "champ"]


class TestUserRank:
    def test_position_counts_members_ahead(self, db_engine):
        make_user(db_engine, "a", points=300)
        make_user(db_engine, "b", points=200)
        make_user(db_engine, "c", points=200)
        make_user(db_engine, "d", points=100)
        make_user(db_engine, "bot", points=999, is_test_account=True)

        assert ranking_service.get_user_rank(db_engine, "a").rank == 1
        assert ranking_service.get_user_rank(db_engine, "b").rank == 2
        assert ranking_service.get_user_rank(db_engine, "c").rank == 3
        assert ranking_service.get_user_rank(db_engine, "d").rank == 4

    def test_agrees_with_full_ranking(self, db_engine):
        for uid, points in [("p", 50), ("q", 75), ("r", 50), ("s", 0)]:
            make_user(db_engine, uid, points=points)
        for row in ranking_service.rank(db_engine):
            assert ranking_service.get_user_rank(db_engine, row.user.id).rank == row.rank

    def test_test_account_and_unknown_have_no_rank(self, db_engine):
        make_user(db_engine, "bot", is_test_account=True)
        assert ranking_service.get_user_rank(db_engine, "bot") is None
        assert ranking_service.get_user_rank(db_engine, "ghost") is None
