"""
clubhouse.api.routes.users — Members, profile & ranking
========================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from clubhouse.api.deps import get_config, get_current_user, get_engine
from clubhouse.api.serializers import (
    post_dict,
    private_user_dict,
    ranked_dict,
    tier_dict,
    user_dict,
)
from clubhouse.config import ClubConfig
from clubhouse.constants import POINT_VALUES, TIER_ORDER, TIER_THRESHOLDS
from clubhouse.database.engine import run_db
from clubhouse.database.models import TierType, User
from clubhouse.services import post_service, ranking_service, user_service

router = APIRouter(tags=["users"])


class ProfileUpdate(BaseModel):
    nickname: str | None = None
    photo_url: str | None = None
    introduction: str | None = None
    favorite_game: str | None = None
    student_id: str | None = None
    lol_nickname: str | None = None
    main_position: str | None = None


# ---------------------------------------------------------------------------
# Current member
# ---------------------------------------------------------------------------
@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return private_user_dict(user)


@router.patch("/me")
async def update_me(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    updated = await run_db(
        user_service.update_profile, engine, user.id, **body.model_dump(exclude_unset=True)
    )
    return private_user_dict(updated)


@router.get("/me/rank")
async def my_rank(user: User = Depends(get_current_user), engine=Depends(get_engine)):
    ranked = await run_db(ranking_service.get_user_rank, engine, user.id)
    return {"ranked": ranked_dict(ranked) if ranked else None}


@router.get("/me/posts")
async def my_posts(user: User = Depends(get_current_user), engine=Depends(get_engine)):
    posts = await run_db(post_service.list_user_posts, engine, user.id)
    return {"posts": [post_dict(p) for p in posts]}


# ---------------------------------------------------------------------------
# Other members
# ---------------------------------------------------------------------------
@router.get("/members")
async def list_members(
    _: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    members = await run_db(user_service.list_members, engine)
    return {"members": [user_dict(u) for u in members]}


@router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    _: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return user_dict(await run_db(user_service.get_user, engine, user_id))


@router.get("/users/{user_id}/posts")
async def get_user_posts(
    user_id: str,
    _: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    posts = await run_db(post_service.list_user_posts, engine, user_id)
    return {"posts": [post_dict(p) for p in posts]}


# ---------------------------------------------------------------------------
# Ranking (public)
# ---------------------------------------------------------------------------
@router.get("/ranking")
async def get_ranking(
    limit: int | None = Query(None, ge=1, le=200),
    engine=Depends(get_engine),
    cfg: ClubConfig = Depends(get_config),
):
    rows = await run_db(ranking_service.rank, engine, limit or cfg.ranking_limit)
    return {"ranking": [ranked_dict(r) for r in rows]}


@router.get("/tiers")
def get_tiers():
    """The tier ladder and what each action is worth."""
    ladder = [*TIER_ORDER, TierType.CHALLENGER]
    return {
        "tiers": [
            {
                **tier_dict(t),
                "min": TIER_THRESHOLDS[t].min if t is not TierType.CHALLENGER else None,
                "max": TIER_THRESHOLDS[t].max,
            }
            for t in ladder
        ],
        "points": POINT_VALUES,
    }
