"""
clubhouse.api.serializers — ORM rows → JSON dicts
==================================================
"""

from __future__ import annotations

from datetime import datetime

from clubhouse.constants import TIER_INFO
from clubhouse.database.models import (
    AdminLog,
    Comment,
    GalleryImage,
    Message,
    Post,
    Reward,
    TierType,
    User,
)
from clubhouse.engine.tiers import next_tier, points_to_next_tier, tier_progress
from clubhouse.services.ranking_service import RankedUser


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def tier_dict(tier: str) -> dict:
    info = TIER_INFO[TierType(tier)]
    return {"id": tier, **info}


def user_dict(u: User) -> dict:
    upcoming = next_tier(u.tier)
    return {
        "uid": u.id,
        "display_name": u.display_name,
        "nickname": u.nickname,
        "name": u.name,
        "photo_url": u.photo_url,
        "points": u.points,
        "tier": tier_dict(u.tier),
        "next_tier": upcoming.value if upcoming else None,
        "points_to_next_tier": points_to_next_tier(u.points, u.tier),
        "progress": tier_progress(u.points, u.tier),
        "is_admin": u.is_admin,
        "is_challenger": u.is_challenger,
        "introduction": u.introduction,
        "favorite_game": u.favorite_game,
        "lol_nickname": u.lol_nickname,
        "main_position": u.main_position,
        "created_at": _iso(u.created_at),
    }


def private_user_dict(u: User) -> dict:
    """Adds fields only the member themself (or an admin) should see."""
    return {
        **user_dict(u),
        "email": u.email,
        "student_id": u.student_id,
        "is_test_account": u.is_test_account,
    }


def ranked_dict(r: RankedUser) -> dict:
    return {
        "rank": r.rank,
        "uid": r.user.id,
        "name": r.user.name,
        "photo_url": r.user.photo_url,
        "points": r.user.points,
        "tier": tier_dict(r.user.tier),
        "next_tier": r.next_tier.value if r.next_tier else None,
        "points_to_next_tier": r.points_to_next_tier,
        "progress": r.progress,
    }


def comment_dict(c: Comment) -> dict:
    return {
        "id": c.id,
        "author_id": c.author_id,
        "author_name": c.author_name,
        "author_photo_url": c.author_photo_url,
        "author_tier": c.author_tier,
        "content": c.content,
        "created_at": _iso(c.created_at),
    }


def post_dict(p: Post) -> dict:
    return {
        "id": p.id,
        "author_id": p.author_id,
        "author_name": p.author_name,
        "author_photo_url": p.author_photo_url,
        "author_tier": p.author_tier,
        "title": p.title,
        "content": p.content,
        "image_url": p.image_url,
        "category": p.category,
        "likes": [like.user_id for like in p.likes],
        "comments": [comment_dict(c) for c in p.comments],
        "created_at": _iso(p.created_at),
        "updated_at": _iso(p.updated_at),
    }


def message_dict(m: Message) -> dict:
    return {
        "id": m.id,
        "sender_id": m.sender_id,
        "sender_name": m.sender_name,
        "sender_photo_url": m.sender_photo_url,
        "sender_tier": m.sender_tier,
        "receiver_id": m.receiver_id,
        "receiver_name": m.receiver_name,
        "title": m.title,
        "content": m.content,
        "is_read": m.is_read,
        "created_at": _iso(m.created_at),
    }


def reward_dict(r: Reward) -> dict:
    return {
        "id": r.id,
        "user_id": r.user_id,
        "user_name": r.user_name,
        "reward_name": r.reward_name,
        "description": r.description,
        "given_at": _iso(r.given_at),
        "given_by": r.given_by,
    }


def gallery_dict(g: GalleryImage) -> dict:
    return {
        "id": g.id,
        "image_url": g.image_url,
        "title": g.title,
        "description": g.description,
        "uploaded_by": g.uploaded_by,
        "uploaded_by_name": g.uploaded_by_name,
        "created_at": _iso(g.created_at),
    }


def audit_dict(a: AdminLog) -> dict:
    return {
        "id": a.id,
        "actor_id": a.actor_id,
        "action_type": a.action_type,
        "target_table": a.target_table,
        "target_id": a.target_id,
        "before": a.before_snapshot,
        "after": a.after_snapshot,
        "reason": a.reason,
        "timestamp": _iso(a.timestamp),
    }
