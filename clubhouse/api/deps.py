"""
clubhouse.api.deps — FastAPI dependency injection
==================================================

Authentication itself happens at the external identity provider.  This
module only verifies the bearer token it issued, turns the claims into a
:class:`Principal`, and loads (or lazily creates) the member row.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from clubhouse.config import ClubConfig, load_config
from clubhouse.database.engine import create_db_engine, run_db
from clubhouse.database.models import User
from clubhouse.services import user_service
from clubhouse.services.user_service import Principal

_WEAK_SECRETS = frozenset({
    "clubhouse-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> ClubConfig:
    return load_config(os.getenv("CLUBHOUSE_CONFIG", "config.yaml"))


def get_principal(
    authorization: Annotated[str | None, Header()] = None,
) -> Principal:
    """Validate the identity-provider JWT. Raises 401 if missing or invalid."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    uid = payload.get("sub")
    if not uid:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token has no subject")
    return Principal(
        uid=str(uid),
        email=payload.get("email", ""),
        display_name=payload.get("name", ""),
        photo_url=payload.get("picture"),
    )


async def get_current_user(
    principal: Principal = Depends(get_principal),
    engine: Engine = Depends(get_engine),
    cfg: ClubConfig = Depends(get_config),
) -> User:
    """The signed-in member, created on their first authenticated request."""
    return await run_db(
        user_service.get_or_create_user, engine, principal, admin_uids=cfg.admin_uids
    )


def get_current_admin(user: User = Depends(get_current_user)) -> User:
    """The signed-in member, if they hold the admin flag. Raises 403 otherwise."""
    if not user.is_admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not admin")
    return user
