"""
tests/test_message_service.py — Private Message Tests
======================================================
Per-party deletion, read receipts and unread counts.
"""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from clubhouse.database.models import Message
from clubhouse.errors import InvalidOperation, NotFound, PermissionDenied
from clubhouse.services import message_service
from conftest import make_user


@pytest.fixture
def engine(db_engine):
    make_user(db_engine, "alice", points=120, nickname="Ace")
    make_user(db_engine, "bob")
    make_user(db_engine, "eve")
    return db_engine


def _send(engine, title="Scrim tonight?", content="8pm, discord"):
    return message_service.send_message(engine, "alice", "bob", title, content)


class TestSend:
    def test_snapshot_and_lists(self, engine):
        message = _send(engine)
        assert message.sender_name == "Ace"
        assert message.sender_tier == "silver"
        assert message.receiver_name == "Bob"
        assert message.is_read is False
        assert [m.id for m in message_service.list_sent(engine, "alice")] == [message.id]
        assert [m.id for m in message_service.list_received(engine, "bob")] == [message.id]

    def test_blank_rejected(self, engine):
        with pytest.raises(InvalidOperation):
            _send(engine, title=" ")

    def test_unknown_receiver(self, engine):
        with pytest.raises(NotFound):
            message_service.send_message(engine, "alice", "ghost", "hi", "there")


class TestRead:
    def test_receiver_read_marks_read(self, engine):
        message = _send(engine)
        assert message_service.unread_count(engine, "bob") == 1
        opened = message_service.read_message(engine, message.id, "bob")
        assert opened.is_read is True
        assert message_service.unread_count(engine, "bob") == 0

    def test_sender_read_does_not_mark_read(self, engine):
        message = _send(engine)
        message_service.read_message(engine, message.id, "alice")
        assert message_service.unread_count(engine, "bob") == 1

    def test_outsider_is_denied(self, engine):
        message = _send(engine)
        with pytest.raises(PermissionDenied):
            message_service.read_message(engine, message.id, "eve")


class TestDelete:
    def test_receiver_delete_hides_only_their_copy(self, engine):
        message = _send(engine)
        message_service.delete_message(engine, message.id, "bob")

        assert message_service.list_received(engine, "bob") == []
        assert [m.id for m in message_service.list_sent(engine, "alice")] == [message.id]
        with pytest.raises(NotFound):
            message_service.read_message(engine, message.id, "bob")
        assert message_service.read_message(engine, message.id, "alice").id == message.id

    def test_deleted_unread_message_leaves_unread_count(self, engine):
        message = _send(engine)
        message_service.delete_message(engine, message.id, "bob")
        assert message_service.unread_count(engine, "bob") == 0

    def test_row_removed_once_both_sides_delete(self, engine):
        message = _send(engine)
        message_service.delete_message(engine, message.id, "alice")
        with Session(engine) as session:
            assert session.get(Message, message.id) is not None
        message_service.delete_message(engine, message.id, "bob")
        with Session(engine) as session:
            assert session.get(Message, message.id) is None

    def test_outsider_cannot_delete(self, engine):
        message = _send(engine)
        with pytest.raises(PermissionDenied):
            message_service.delete_message(engine, message.id, "eve")

    def test_missing_message(self, engine):
        with pytest.raises(NotFound):
            message_service.delete_message(engine, 12345, "bob")

    def test_row_removed_when_both_sides_delete_at_once(self, deferred_engine, monkeypatch):
        engine = deferred_engine
        make_user(engine, "alice")
        make_user(engine, "bob")
        message = _send(engine)
        real_require_party = message_service._require_party

        def _sender_deletes_meanwhile(session, message_id, user_id):
            found = real_require_party(session, message_id, user_id)
            if user_id == "bob":
                message_service.delete_message(engine, message_id, "alice")
            return found

        monkeypatch.setattr(message_service, "_require_party", _sender_deletes_meanwhile)
        message_service.delete_message(engine, message.id, "bob")

        with Session(engine) as session:
            assert session.get(Message, message.id) is None
