"""
clubhouse.api.routes.posts — Boards, comments & likes
======================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from clubhouse.api.deps import get_current_user, get_engine
from clubhouse.api.serializers import comment_dict, post_dict
from clubhouse.database.engine import run_db
from clubhouse.database.models import PostCategory, User
from clubhouse.services import post_service

router = APIRouter(prefix="/posts", tags=["posts"])


class PostCreate(BaseModel):
    title: str
    content: str
    category: PostCategory
    image_url: str | None = None


class PostUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    image_url: str | None = None


class CommentCreate(BaseModel):
    content: str


@router.get("")
async def list_posts(
    category: PostCategory | None = None,
    limit: int | None = Query(None, ge=1, le=200),
    engine=Depends(get_engine),
):
    posts = await run_db(
        post_service.list_posts, engine, category.value if category else None, limit
    )
    return {"posts": [post_dict(p) for p in posts]}


@router.post("", status_code=201)
async def create_post(
    body: PostCreate,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    post = await run_db(
        post_service.create_post,
        engine,
        user.id,
        body.title,
        body.content,
        body.category.value,
        body.image_url,
    )
    return post_dict(post)


@router.get("/{post_id}")
async def get_post(post_id: int, engine=Depends(get_engine)):
    return post_dict(await run_db(post_service.get_post, engine, post_id))


@router.patch("/{post_id}")
async def update_post(
    post_id: int,
    body: PostUpdate,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    post = await run_db(
        post_service.update_post,
        engine,
        post_id,
        user.id,
        **body.model_dump(exclude_unset=True),
    )
    return post_dict(post)


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: int,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    await run_db(post_service.delete_post, engine, post_id, user.id)


@router.post("/{post_id}/like")
async def toggle_like(
    post_id: int,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    result = await run_db(post_service.toggle_like, engine, post_id, user.id)
    return {"liked": result.liked, "like_count": result.like_count}


@router.post("/{post_id}/comments", status_code=201)
async def add_comment(
    post_id: int,
    body: CommentCreate,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    comment = await run_db(post_service.add_comment, engine, post_id, user.id, body.content)
    return comment_dict(comment)


@router.delete("/{post_id}/comments/{comment_id}", status_code=204)
async def delete_comment(
    post_id: int,
    comment_id: str,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    await run_db(post_service.delete_comment, engine, post_id, comment_id, user.id)
