"""
clubhouse.services.gallery_service — Club Photo Gallery
========================================================

Stores gallery metadata only.  Uploading the file and producing its URL is
the storage provider's job; this module receives the finished URL.
"""

from __future__ import annotations

import logging

from sqlalchemy import select

from clubhouse.database.engine import session_scope
from clubhouse.database.models import GalleryImage, User
from clubhouse.errors import InvalidOperation, NotFound

logger = logging.getLogger(__name__)


def add_image(
    engine,
    uploader_id: str,
    image_url: str,
    title: str,
    description: str | None = None,
) -> GalleryImage:
    image_url = (image_url or "").strip()
    title = (title or "").strip()
    if not image_url or not title:
        raise InvalidOperation("Image URL and title are required")

    with session_scope(engine) as session:
        uploader = session.get(User, uploader_id)
        if uploader is None:
            raise NotFound(f"User {uploader_id} not found")
        image = GalleryImage(
            image_url=image_url,
            title=title,
            description=(description or "").strip() or None,
            uploaded_by=uploader.id,
            uploaded_by_name=uploader.name,
        )
        session.add(image)
        session.flush()

    logger.info("Gallery image %d added by %s", image.id, uploader_id)
    return image


def list_images(engine) -> list[GalleryImage]:
    with session_scope(engine) as session:
        return list(session.scalars(
            select(GalleryImage).order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc())
        ).all())


def delete_image(engine, image_id: int) -> None:
    with session_scope(engine) as session:
        image = session.get(GalleryImage, image_id)
        if image is None:
            raise NotFound(f"Gallery image {image_id} not found")
        session.delete(image)
