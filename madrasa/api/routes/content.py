"""News/event and gallery content routes.

GET    /news-events         list, newest first (optional ?category=)
POST   /news-events         create (slug generated from the title)
DELETE /news-events/{id}    delete
GET    /gallery             list by display order (optional ?category=)
POST   /gallery             create
DELETE /gallery/{id}        delete

Deleting an item does not touch homepage selections that reference it;
the homepage resolver skips ids that no longer exist.
"""
from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from madrasa.api.deps import get_db
from madrasa.api.serializers import gallery_image_dict, news_event_dict
from madrasa.content.slug import make_slug
from madrasa.core.constants import NEWS_CATEGORIES
from madrasa.db.models import GalleryImage, NewsEvent
from madrasa.db.repositories import GalleryImageRepository, NewsEventRepository

logger = logging.getLogger(__name__)

news_router = APIRouter(prefix="/news-events", tags=["content"])
gallery_router = APIRouter(prefix="/gallery", tags=["content"])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class CreateNewsEventBody(BaseModel):
    title: str
    excerpt: str
    content: str
    image_url: str = Field(alias="imageUrl")
    author: str
    category: str = "news"
    date: datetime | None = None
    time: str | None = None
    tags: list[str] = Field(default_factory=list)


class CreateGalleryImageBody(BaseModel):
    title: str
    category: str
    image_url: str = Field(alias="imageUrl")
    location: str
    description: str
    date: datetime | None = None
    order: int = 0


# ---------------------------------------------------------------------------
# News / events
# ---------------------------------------------------------------------------

@news_router.get("", summary="List news and events")
def list_news_events(category: str | None = None, db: Session = Depends(get_db)):
    stmt = select(NewsEvent).order_by(NewsEvent.date.desc())
    if category and category != "all":
        stmt = stmt.where(NewsEvent.category == category)
    return [news_event_dict(n) for n in db.execute(stmt).scalars().all()]


@news_router.post("", status_code=201, summary="Create a news item or event")
def create_news_event(body: CreateNewsEventBody, db: Session = Depends(get_db)):
    if body.category not in NEWS_CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Invalid category {body.category!r}")

    fields = body.model_dump(exclude_none=True)
    try:
        news_event = NewsEventRepository(db).create(slug=make_slug(body.title), **fields)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail="A news item with this slug already exists") from exc
    logger.info("Created news item %s", news_event.id)
    return {"message": "News/Event created successfully", "newsEvent": news_event_dict(news_event)}


@news_router.delete("/{item_id}", summary="Delete a news item or event")
def delete_news_event(item_id: UUID, db: Session = Depends(get_db)):
    repo = NewsEventRepository(db)
    news_event = repo.get(item_id)
    if news_event is None:
        raise HTTPException(status_code=404, detail="News/Event not found")
    repo.delete(news_event)
    logger.info("Deleted news item %s", item_id)
    return {"message": "News/Event deleted successfully"}


# ---------------------------------------------------------------------------
# Gallery
# ---------------------------------------------------------------------------

@gallery_router.get("", summary="List gallery images")
def list_gallery_images(category: str | None = None, db: Session = Depends(get_db)):
    stmt = select(GalleryImage).order_by(GalleryImage.order.asc(), GalleryImage.date.desc())
    if category and category != "all":
        stmt = stmt.where(GalleryImage.category == category)
    return [gallery_image_dict(g) for g in db.execute(stmt).scalars().all()]


@gallery_router.post("", status_code=201, summary="Create a gallery image")
def create_gallery_image(body: CreateGalleryImageBody, db: Session = Depends(get_db)):
    image = GalleryImageRepository(db).create(**body.model_dump(exclude_none=True))
    logger.info("Created gallery image %s", image.id)
    return {"message": "Gallery image created successfully", "image": gallery_image_dict(image)}


@gallery_router.delete("/{item_id}", summary="Delete a gallery image")
def delete_gallery_image(item_id: UUID, db: Session = Depends(get_db)):
    repo = GalleryImageRepository(db)
    image = repo.get(item_id)
    if image is None:
        raise HTTPException(status_code=404, detail="Gallery image not found")
    repo.delete(image)
    logger.info("Deleted gallery image %s", item_id)
    return {"message": "Gallery image deleted successfully"}
