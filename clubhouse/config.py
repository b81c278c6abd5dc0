"""
clubhouse.config — YAML Configuration Loader
============================================

Reads ``config.yaml`` for soft, non-secret settings.  Secrets and
connection strings (``DATABASE_URL``, ``JWT_SECRET``) stay in the
environment / ``.env``.

Usage::

    from clubhouse.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.community_name)    # "Respawn Gaming Club"
    print(cfg.admin_uids)        # ("firebase-uid-of-the-president",)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ClubConfig:
    """Immutable configuration loaded from ``config.yaml``.

    Point values and tier thresholds are *not* configurable; they live in
    :mod:`clubhouse.constants`.
    """

    # Identity
    community_name: str

    # API
    api_port: int = 8000
    ranking_limit: int = 50

    # Members created as admins on first sign-in
    admin_uids: tuple[str, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> ClubConfig:
    """Read *path* and return a :class:`ClubConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return ClubConfig(
        community_name=raw["community_name"],
        api_port=int(raw.get("api_port", 8000)),
        ranking_limit=int(raw.get("ranking_limit", 50)),
        admin_uids=tuple(str(uid) for uid in raw.get("admin_uids") or ()),
    )
