"""
clubhouse.services.user_service — Member Directory
===================================================

Lazy member creation on first authentication plus the small amount of
self-service profile editing the club site offers.  Nothing here touches
``points`` or ``tier``; those belong to :mod:`clubhouse.services.ledger`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clubhouse.constants import PROFILE_FIELDS
from clubhouse.database.engine import session_scope
from clubhouse.database.models import TierType, User
from clubhouse.errors import InvalidOperation, NotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Principal:
    """An identity already verified by the external identity provider."""

    uid: str
    email: str = ""
    display_name: str = ""
    photo_url: str | None = None


def get_or_create_user(
    engine,
    principal: Principal,
    *,
    admin_uids: Iterable[str] = (),
) -> User:
    """Fetch the member row for *principal*, creating it on first sign-in.

    New members start at 0 points / bronze.  Uids listed in *admin_uids*
    (from ``config.yaml``) are created as admins so a fresh deployment has
    someone who can reach the admin panel.
    """
    with session_scope(engine) as session:
        user = session.get(User, principal.uid)
        if user is not None:
            return user

    try:
        with session_scope(engine) as session:
            user = User(
                id=principal.uid,
                email=principal.email,
                display_name=principal.display_name,
                photo_url=principal.photo_url,
                points=0,
                tier=TierType.BRONZE.value,
                is_admin=principal.uid in set(admin_uids),
                is_challenger=False,
                is_test_account=False,
            )
            session.add(user)
    except IntegrityError:
        # Two first requests raced; the other one created the row.
        with session_scope(engine) as session:
            return _require_user(session, principal.uid)

    logger.info("Created member %s (%s)", principal.uid, principal.display_name)
    return user


def _require_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


def get_user(engine, user_id: str) -> User:
    """Return the member row or raise :class:`NotFound`."""
    with session_scope(engine) as session:
        return _require_user(session, user_id)


def update_profile(engine, user_id: str, **fields: Any) -> User:
    """Update the caller's own profile fields.

    Only keys in ``PROFILE_FIELDS`` are accepted.  A nickname, when given,
    must not be blank.
    """
    unknown = set(fields) - PROFILE_FIELDS
    if unknown:
        raise InvalidOperation(f"Not editable: {', '.join(sorted(unknown))}")

    if "nickname" in fields:
        nickname = (fields["nickname"] or "").strip()
        if not nickname:
            raise InvalidOperation("Nickname must not be blank")
        fields["nickname"] = nickname

    with session_scope(engine) as session:
        user = _require_user(session, user_id)
        for key, value in fields.items():
            if isinstance(value, str) and key != "nickname":
                value = value.strip()
            setattr(user, key, value)
        session.flush()
        session.refresh(user)
        return user


def list_members(engine) -> list[User]:
    """All members except test accounts, oldest first."""
    with session_scope(engine) as session:
        return list(session.scalars(
            select(User)
            .where(User.is_test_account.is_(False))
            .order_by(User.created_at, User.id)
        ).all())
