"""Homepage selection resolver.

One implementation serves every homepage section.  A ``SelectionKind``
carries what differs between sections: the content model, the fallback
ordering, and the default/allowed ``max_items``.

Only one selection per content type is active at a time.  ``save``
deactivates the previous rows before inserting, ``reset`` deactivates
everything so ``resolve`` falls back to the freshest items.  Concurrent
saves are last-writer-wins.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from madrasa.core.constants import CONTENT_GALLERY, CONTENT_NEWS
from madrasa.db import models
from madrasa.db.repositories import (
    ContentRepository,
    GalleryImageRepository,
    HomepageSelectionRepository,
    NewsEventRepository,
    coerce_uuid,
)

logger = logging.getLogger(__name__)


class SelectionValidationError(ValueError):
    """Raised when a selection payload is rejected before any write."""


class SelectionNotFoundError(LookupError):
    """Raised when an explicit selection id does not exist."""


# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SelectionKind:
    content_type: str
    repository: Callable[[Session], ContentRepository]
    fallback_order: Callable[[], Sequence[Any]]
    default_max_items: int
    min_max_items: int
    max_max_items: int
    empty_message: str


NEWS = SelectionKind(
    content_type=CONTENT_NEWS,
    repository=NewsEventRepository,
    fallback_order=lambda: (models.NewsEvent.date.desc(),),
    default_max_items=3,
    min_max_items=1,
    max_max_items=6,
    empty_message="Please select at least one news item",
)

GALLERY = SelectionKind(
    content_type=CONTENT_GALLERY,
    repository=GalleryImageRepository,
    fallback_order=lambda: (models.GalleryImage.order.asc(), models.GalleryImage.date.desc()),
    default_max_items=6,
    min_max_items=3,
    max_max_items=12,
    empty_message="Please select at least one gallery image",
)

# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class ResolvedSelection:
    """What a homepage section should render."""

    items: list[Any] = field(default_factory=list)
    max_items: int = 0
    is_custom_selection: bool = False
    selection_id: UUID | None = None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class HomepageSelectionService:
    """Resolve, save and reset the homepage selection for one kind."""

    def __init__(self, db_session: Session, kind: SelectionKind) -> None:
        self.db = db_session
        self.kind = kind
        self.selections = HomepageSelectionRepository(db_session)
        self.content = kind.repository(db_session)

    # -- read ---------------------------------------------------------------

    def resolve(self) -> ResolvedSelection:
        selection = self.selections.get_active(self.kind.content_type)

        if selection is None or not selection.item_ids:
            items = self.content.list_active(
                self.kind.fallback_order(), limit=self.kind.default_max_items
            )
            return ResolvedSelection(
                items=items,
                max_items=self.kind.default_max_items,
                is_custom_selection=False,
            )

        return ResolvedSelection(
            items=self.items_for(selection),
            max_items=selection.max_items,
            is_custom_selection=True,
            selection_id=selection.id,
        )

    def items_for(self, selection: models.HomepageSelection) -> list[Any]:
        """Return the selection's items in stored order, capped at ``max_items``.

        Ids whose content has since been deleted are skipped.
        """
        found = self.content.find_by_ids(selection.item_ids)
        ordered: list[Any] = []
        seen: set[UUID] = set()
        for raw_id in selection.item_ids:
            uid = coerce_uuid(raw_id)
            if uid is None or uid in seen:
                continue
            seen.add(uid)
            item = found.get(uid)
            if item is None:
                logger.debug(
                    "Homepage %s selection %s references missing item %s",
                    self.kind.content_type, selection.id, raw_id,
                )
                continue
            ordered.append(item)
            if len(ordered) >= selection.max_items:
                break
        return ordered

    # -- write --------------------------------------------------------------

    def save(
        self,
        item_ids: Sequence[UUID | str] | None,
        max_items: int | None = None,
    ) -> models.HomepageSelection:
        """Make a new active selection, deactivating the previous ones."""
        ids, limit = self._validate(item_ids, max_items)

        deactivated = self.selections.deactivate_all(self.kind.content_type)
        selection = self.selections.create(
            content_type=self.kind.content_type,
            item_ids=ids,
            max_items=limit,
            is_active=True,
        )
        logger.info(
            "Saved homepage %s selection %s (%d items, max %d, %d deactivated)",
            self.kind.content_type, selection.id, len(ids), limit, deactivated,
        )
        return selection

    def update(
        self,
        selection_id: UUID | str,
        item_ids: Sequence[UUID | str] | None,
        max_items: int | None = None,
    ) -> models.HomepageSelection:
        """Rewrite an existing selection in place."""
        ids, limit = self._validate(item_ids, max_items)

        uid = coerce_uuid(selection_id)
        selection = self.selections.get(uid) if uid is not None else None
        if selection is None or selection.content_type != self.kind.content_type:
            raise SelectionNotFoundError(f"Homepage {self.kind.content_type} selection not found")

        self.selections.update(selection, item_ids=ids, max_items=limit)
        logger.info("Updated homepage %s selection %s", self.kind.content_type, selection.id)
        return selection

    def reset(self) -> int:
        """Deactivate every selection of this kind.  Safe to repeat."""
        count = self.selections.deactivate_all(self.kind.content_type)
        logger.info("Reset homepage %s selection (%d deactivated)", self.kind.content_type, count)
        return count

    # -- helpers ------------------------------------------------------------

    def _validate(
        self,
        item_ids: Sequence[UUID | str] | None,
        max_items: int | None,
    ) -> tuple[list[str], int]:
        if not item_ids:
            raise SelectionValidationError(self.kind.empty_message)

        ids: list[str] = []
        for raw_id in item_ids:
            uid = coerce_uuid(raw_id)
            if uid is None:
                raise SelectionValidationError(f"Invalid item id {raw_id!r}")
            ids.append(str(uid))

        limit = self.kind.default_max_items if max_items is None else max_items
        if not self.kind.min_max_items <= limit <= self.kind.max_max_items:
            raise SelectionValidationError(
                f"maxItems must be between {self.kind.min_max_items} "
                f"and {self.kind.max_max_items}"
            )
        return ids, limit
