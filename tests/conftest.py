"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of clubhouse.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite doesn't support JSONB natively, but SQLAlchemy's JSON type works.
# We register a custom type compiler so SQLite renders JSONB as TEXT.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from clubhouse.config import ClubConfig  # noqa: E402
from clubhouse.database.engine import create_db_engine, init_db  # noqa: E402
from clubhouse.database.models import Base, User  # noqa: E402
from clubhouse.engine.tiers import resolve_tier  # noqa: E402

_jsonb_sqlite_registered = False


def _register_jsonb_sqlite_compat():
    """Register SQLite compilation for PG JSONB type (idempotent)."""
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()


ADMIN_UID = "admin-uid"


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Clubhouse tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` behind ``run_db``).  Tests on this
    engine must not hold a session open across a service call.
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def file_engine(tmp_path) -> Engine:
    """A file-backed SQLite engine built by the production factory.

    Real connections per thread with ``BEGIN IMMEDIATE`` transactions, for
    tests that run service calls concurrently.
    """
    engine = create_db_engine(f"sqlite:///{tmp_path / 'clubhouse.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def deferred_engine(tmp_path) -> Engine:
    """A file-backed SQLite engine with the driver's deferred BEGIN.

    Reads take no lock until the first write, so a test can run a second
    service call to completion in between another call's read and write.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'deferred.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


def make_user(
    engine: Engine,
    uid: str,
    *,
    points: int = 0,
    is_admin: bool = False,
    is_challenger: bool = False,
    is_test_account: bool = False,
    display_name: str | None = None,
    nickname: str | None = None,
) -> User:
    """Insert a member row whose tier agrees with its points."""
    with Session(engine, expire_on_commit=False) as session:
        user = User(
            id=uid,
            email=f"{uid}@club.test",
            display_name=display_name or uid.title(),
            nickname=nickname,
            points=points,
            tier=resolve_tier(points, is_challenger).value,
            is_admin=is_admin,
            is_challenger=is_challenger,
            is_test_account=is_test_account,
        )
        session.add(user)
        session.commit()
    return user


def load_user(engine: Engine, uid: str) -> User | None:
    with Session(engine) as session:
        return session.get(User, uid)


def make_token(sub: str, name: str = "", email: str = "", picture: str | None = None) -> str:
    """Sign an identity-provider style token for API tests."""
    import jwt

    from clubhouse.api.deps import JWT_ALGORITHM, JWT_SECRET

    claims = {"sub": sub, "email": email or f"{sub}@club.test", "name": name or sub.title()}
    if picture is not None:
        claims["picture"] = picture
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def auth(sub: str, **claims) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, **claims)}"}


@pytest.fixture
def club_config() -> ClubConfig:
    return ClubConfig(community_name="Test Club", ranking_limit=50, admin_uids=(ADMIN_UID,))


@pytest.fixture
def client(db_engine, club_config):
    """A FastAPI TestClient wired to the in-memory engine.

    ``raise_server_exceptions=False`` so error mapping can be asserted.
    Overrides are keyed on the dependency objects the routers captured at
    import time, which survive a reload of ``clubhouse.api.deps``.
    """
    from fastapi.testclient import TestClient

    from clubhouse.api.main import app
    from clubhouse.api.routes import users as users_routes

    app.dependency_overrides[users_routes.get_engine] = lambda: db_engine
    app.dependency_overrides[users_routes.get_config] = lambda: club_config
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


