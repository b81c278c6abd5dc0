"""
Clubhouse — Community Backend for a University Gaming Club
===========================================================
Members write posts, comment, like and message each other, and earn
points that climb a tier ladder from bronze to master.  Admins can adjust
points, crown challengers, hand out rewards and curate the photo gallery.

Package layout::

    clubhouse/
    ├── __main__.py        # `python -m clubhouse` → uvicorn
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Tier table + point values
    ├── errors.py          # NotFound / PermissionDenied / …
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine, session scope, async bridge
    │   └── models.py      # All ORM models
    ├── engine/
    │   └── tiers.py       # Pure tier resolution + progress math
    ├── services/
    │   ├── ledger.py          # Atomic point deltas + tier recompute
    │   ├── post_service.py    # Posts, comments, likes (and their points)
    │   ├── admin_service.py   # Audit-logged admin overrides, rewards
    │   ├── ranking_service.py # Leaderboard projection
    │   ├── user_service.py    # Lazy member creation, profiles
    │   ├── message_service.py # Private messages
    │   └── gallery_service.py # Gallery metadata
    └── api/
        ├── main.py        # FastAPI app + error mapping
        ├── deps.py        # Token verification, engine/config injection
        ├── serializers.py # ORM → JSON
        └── routes/        # users, posts, messages, gallery, admin
"""

__version__ = "0.1.0"
