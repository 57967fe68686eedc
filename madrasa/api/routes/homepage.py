"""Homepage selection routes, one set per content type.

GET    /homepage-{type}  items to render (curated or latest)
POST   /homepage-{type}  save a new active selection
PUT    /homepage-{type}  update selection ``id`` in place, else save
DELETE /homepage-{type}  reset to the automatic fallback
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from madrasa.api.deps import get_db
from madrasa.api.serializers import content_item_dict, selection_dict
from madrasa.homepage.selection import (
    GALLERY,
    NEWS,
    HomepageSelectionService,
    SelectionKind,
    SelectionNotFoundError,
    SelectionValidationError,
)


class SelectionBody(BaseModel):
    item_ids: list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("itemIds", "newsEventIds", "galleryImageIds"),
    )
    max_items: int | None = Field(default=None, validation_alias=AliasChoices("maxItems", "max_items"))
    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "_id"))


def build_router(kind: SelectionKind) -> APIRouter:
    router = APIRouter(prefix=f"/homepage-{kind.content_type}", tags=["homepage"])

    def get_service(db: Session = Depends(get_db)) -> HomepageSelectionService:
        return HomepageSelectionService(db, kind)

    @router.get("", summary=f"Homepage {kind.content_type} items")
    def resolve_selection(service: HomepageSelectionService = Depends(get_service)):
        resolved = service.resolve()
        body = {
            "items": [content_item_dict(i) for i in resolved.items],
            "maxItems": resolved.max_items,
            "isCustomSelection": resolved.is_custom_selection,
        }
        if resolved.selection_id is not None:
            body["id"] = str(resolved.selection_id)
        return body

    @router.post("", status_code=201, summary=f"Save homepage {kind.content_type} selection")
    def save_selection(body: SelectionBody, service: HomepageSelectionService = Depends(get_service)):
        try:
            selection = service.save(body.item_ids, body.max_items)
        except SelectionValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return selection_dict(selection, service.items_for(selection))

    @router.put("", summary=f"Update homepage {kind.content_type} selection")
    def update_selection(body: SelectionBody, service: HomepageSelectionService = Depends(get_service)):
        try:
            if body.id:
                selection = service.update(body.id, body.item_ids, body.max_items)
            else:
                selection = service.save(body.item_ids, body.max_items)
        except SelectionValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except SelectionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return selection_dict(selection, service.items_for(selection))

    @router.delete("", summary=f"Reset homepage {kind.content_type} selection")
    def reset_selection(service: HomepageSelectionService = Depends(get_service)):
        service.reset()
        return {"message": f"Homepage {kind.content_type} selection removed"}

    return router


news_router = build_router(NEWS)
gallery_router = build_router(GALLERY)
