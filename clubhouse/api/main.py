"""
clubhouse.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn clubhouse.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from clubhouse import __version__  # noqa: E402
from clubhouse.api.deps import get_engine  # noqa: E402
from clubhouse.api.routes.admin import router as admin_router  # noqa: E402
from clubhouse.api.routes.gallery import router as gallery_router  # noqa: E402
from clubhouse.api.routes.messages import router as messages_router  # noqa: E402
from clubhouse.api.routes.posts import router as posts_router  # noqa: E402
from clubhouse.api.routes.users import router as users_router  # noqa: E402
from clubhouse.errors import (  # noqa: E402
    ClubhouseError,
    InvalidOperation,
    NotFound,
    PermissionDenied,
    TransientStoreFailure,
)

logger = logging.getLogger(__name__)

# Most specific first; ClubhouseError is the catch-all.
_ERROR_STATUS: list[tuple[type[ClubhouseError], int]] = [
    (NotFound, status.HTTP_404_NOT_FOUND),
    (PermissionDenied, status.HTTP_403_FORBIDDEN),
    (InvalidOperation, status.HTTP_400_BAD_REQUEST),
    (TransientStoreFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine."""
    engine = get_engine()
    logger.info("Clubhouse API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("Clubhouse API shutting down")


app = FastAPI(
    title="Clubhouse API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ClubhouseError)
async def clubhouse_error_handler(request: Request, exc: ClubhouseError) -> JSONResponse:
    """Map service errors to denial messages the frontend can show as-is."""
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, error_status in _ERROR_STATUS:
        if isinstance(exc, error_type):
            code = error_status
            break
    if code == status.HTTP_503_SERVICE_UNAVAILABLE:
        detail = "The club database is temporarily unavailable. Please try again."
    else:
        detail = str(exc)
    return JSONResponse(status_code=code, content={"detail": detail})


# Mount routers
app.include_router(users_router, prefix="/api")
app.include_router(posts_router, prefix="/api")
app.include_router(messages_router, prefix="/api")
app.include_router(gallery_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
