"""
clubhouse.api.routes.gallery — Club photo gallery
==================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from clubhouse.api.deps import get_current_admin, get_engine
from clubhouse.api.serializers import gallery_dict
from clubhouse.database.engine import run_db
from clubhouse.database.models import User
from clubhouse.services import gallery_service

router = APIRouter(prefix="/gallery", tags=["gallery"])


class GalleryCreate(BaseModel):
    image_url: str
    title: str
    description: str | None = None


@router.get("")
async def list_images(engine=Depends(get_engine)):
    images = await run_db(gallery_service.list_images, engine)
    return {"images": [gallery_dict(g) for g in images]}


@router.post("", status_code=201)
async def add_image(
    body: GalleryCreate,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    image = await run_db(
        gallery_service.add_image,
        engine,
        admin.id,
        body.image_url,
        body.title,
        body.description,
    )
    return gallery_dict(image)


@router.delete("/{image_id}", status_code=204)
async def delete_image(
    image_id: int,
    admin: User = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    await run_db(gallery_service.delete_image, engine, image_id)
