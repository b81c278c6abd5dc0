"""
clubhouse.api.routes.messages — Private messages
=================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from clubhouse.api.deps import get_current_user, get_engine
from clubhouse.api.serializers import message_dict
from clubhouse.database.engine import run_db
from clubhouse.database.models import User
from clubhouse.services import message_service

router = APIRouter(prefix="/messages", tags=["messages"])


class MessageCreate(BaseModel):
    receiver_id: str
    title: str
    content: str


@router.post("", status_code=201)
async def send_message(
    body: MessageCreate,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    message = await run_db(
        message_service.send_message,
        engine,
        user.id,
        body.receiver_id,
        body.title,
        body.content,
    )
    return message_dict(message)


@router.get("/received")
async def received(user: User = Depends(get_current_user), engine=Depends(get_engine)):
    messages = await run_db(message_service.list_received, engine, user.id)
    return {"messages": [message_dict(m) for m in messages]}


@router.get("/sent")
async def sent(user: User = Depends(get_current_user), engine=Depends(get_engine)):
    messages = await run_db(message_service.list_sent, engine, user.id)
    return {"messages": [message_dict(m) for m in messages]}


@router.get("/unread-count")
async def unread_count(user: User = Depends(get_current_user), engine=Depends(get_engine)):
    return {"unread": await run_db(message_service.unread_count, engine, user.id)}


@router.get("/{message_id}")
async def read_message(
    message_id: int,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return message_dict(await run_db(message_service.read_message, engine, message_id, user.id))


@router.delete("/{message_id}", status_code=204)
async def delete_message(
    message_id: int,
    user: User = Depends(get_current_user),
    engine=Depends(get_engine),
):
    await run_db(message_service.delete_message, engine, message_id, user.id)
