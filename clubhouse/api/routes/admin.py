"""
clubhouse.api.routes.admin — Admin panel endpoints (admin flag required)
=========================================================================
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, StrictInt

from clubhouse.api.deps import get_current_admin, get_engine
from clubhouse.api.serializers import audit_dict, private_user_dict, reward_dict
from clubhouse.database.engine import run_db
from clubhouse.database.models import User
from clubhouse.services import admin_service

router = APIRouter(prefix="/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class FlagUpdate(BaseModel):
    value: bool


class PointAdjustment(BaseModel):
    delta: StrictInt
    reason: str = ""


class RewardCreate(BaseModel):
    user_id: str
    reward_name: str
    description: str = ""


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------
@router.get("/overview")
async def overview(
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    return asdict(await run_db(admin_service.get_overview, engine))


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------
@router.get("/users")
async def list_users(
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    users = await run_db(admin_service.list_users, engine)
    return {"users": [private_user_dict(u) for u in users]}


@router.put("/users/{user_id}/admin")
async def set_admin(
    user_id: str,
    body: FlagUpdate,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    user = await run_db(
        admin_service.set_admin_flag, engine, user_id, body.value, actor_id=admin.id
    )
    return private_user_dict(user)


@router.put("/users/{user_id}/test-account")
async def set_test_account(
    user_id: str,
    body: FlagUpdate,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    user = await run_db(
        admin_service.set_test_account_flag, engine, user_id, body.value, actor_id=admin.id
    )
    return private_user_dict(user)


@router.put("/users/{user_id}/challenger")
async def set_challenger(
    user_id: str,
    body: FlagUpdate,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    user = await run_db(
        admin_service.set_challenger, engine, user_id, body.value, actor_id=admin.id
    )
    return private_user_dict(user)


@router.post("/users/{user_id}/points")
async def adjust_points(
    user_id: str,
    body: PointAdjustment,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    user = await run_db(
        admin_service.adjust_points,
        engine,
        user_id,
        body.delta,
        actor_id=admin.id,
        reason=body.reason,
    )
    return private_user_dict(user)


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    await run_db(admin_service.delete_user, engine, user_id, actor_id=admin.id)


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------
@router.get("/rewards")
async def list_rewards(
    user_id: str | None = None,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    rewards = await run_db(admin_service.list_rewards, engine, user_id)
    return {"rewards": [reward_dict(r) for r in rewards]}


@router.post("/rewards", status_code=201)
async def give_reward(
    body: RewardCreate,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    reward = await run_db(
        admin_service.give_reward,
        engine,
        body.user_id,
        body.reward_name,
        body.description,
        actor_id=admin.id,
    )
    return reward_dict(reward)


@router.delete("/rewards/{reward_id}", status_code=204)
async def delete_reward(
    reward_id: int,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    await run_db(admin_service.delete_reward, engine, reward_id, actor_id=admin.id)


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------
@router.get("/audit")
async def audit_log(
    target_id: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    entries = await run_db(
        admin_service.get_audit_log,
        engine,
        target_id=target_id,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return {"page": page, "page_size": page_size, "entries": [audit_dict(a) for a in entries]}
