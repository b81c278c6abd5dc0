"""
clubhouse.services.message_service — Private Messages
======================================================

One row per message, shared by sender and receiver.  Each party has its
own delete flag: deleting from your inbox or outbox hides the message for
you only.  The row is physically removed once both sides have deleted it.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from clubhouse.database.engine import session_scope
from clubhouse.database.models import Message, User
from clubhouse.errors import InvalidOperation, NotFound, PermissionDenied

logger = logging.getLogger(__name__)


def _require_party(session: Session, message_id: int, user_id: str) -> Message:
    message = session.get(Message, message_id)
    if message is None:
        raise NotFound(f"Message {message_id} not found")
    if user_id == message.sender_id and not message.deleted_by_sender:
        return message
    if user_id == message.receiver_id and not message.deleted_by_receiver:
        return message
    if user_id in (message.sender_id, message.receiver_id):
        raise NotFound(f"Message {message_id} not found")
    raise PermissionDenied("Not your message")


def send_message(
    engine,
    sender_id: str,
    receiver_id: str,
    title: str,
    content: str,
) -> Message:
    """Send a message.  Sender name/photo/tier are snapshotted."""
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise InvalidOperation("Title and content must not be blank")

    with session_scope(engine) as session:
        sender = session.get(User, sender_id)
        if sender is None:
            raise NotFound(f"User {sender_id} not found")
        receiver = session.get(User, receiver_id)
        if receiver is None:
            raise NotFound(f"User {receiver_id} not found")

        message = Message(
            sender_id=sender.id,
            sender_name=sender.name,
            sender_photo_url=sender.photo_url,
            sender_tier=sender.tier,
            receiver_id=receiver.id,
            receiver_name=receiver.name,
            title=title,
            content=content,
            is_read=False,
        )
        session.add(message)
        session.flush()

    logger.info("Message %d sent %s → %s", message.id, sender_id, receiver_id)
    return message


def list_received(engine, user_id: str) -> list[Message]:
    with session_scope(engine) as session:
        return list(session.scalars(
            select(Message)
            .where(Message.receiver_id == user_id, Message.deleted_by_receiver.is_(False))
            .order_by(Message.created_at.desc(), Message.id.desc())
        ).all())


def list_sent(engine, user_id: str) -> list[Message]:
    with session_scope(engine) as session:
        return list(session.scalars(
            select(Message)
            .where(Message.sender_id == user_id, Message.deleted_by_sender.is_(False))
            .order_by(Message.created_at.desc(), Message.id.desc())
        ).all())


def read_message(engine, message_id: int, reader_id: str) -> Message:
    """Open a message.  The receiver's first read marks it as read."""
    with session_scope(engine) as session:
        message = _require_party(session, message_id, reader_id)
        if reader_id == message.receiver_id and not message.is_read:
            message.is_read = True
            session.flush()
        return message


def delete_message(engine, message_id: int, actor_id: str) -> None:
    """Delete the message from *actor_id*'s side only.

    The row goes once both flags are set in the database, whichever side's
    flag landed second.
    """
    with session_scope(engine) as session:
        message = _require_party(session, message_id, actor_id)
        if actor_id == message.sender_id:
            message.deleted_by_sender = True
        if actor_id == message.receiver_id:
            message.deleted_by_receiver = True
        session.flush()

        removed = session.execute(
            delete(Message)
            .where(
                Message.id == message_id,
                Message.deleted_by_sender.is_(True),
                Message.deleted_by_receiver.is_(True),
            )
            .execution_options(synchronize_session=False)
        ).rowcount
        if removed:
            logger.debug("Message %d removed by both parties", message_id)


def unread_count(engine, user_id: str) -> int:
    with session_scope(engine) as session:
        return session.scalar(
            select(func.count())
            .select_from(Message)
            .where(
                Message.receiver_id == user_id,
                Message.is_read.is_(False),
                Message.deleted_by_receiver.is_(False),
            )
        ) or 0
