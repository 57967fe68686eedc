"""Tests for madrasa/homepage/selection.py."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from madrasa.db.models import GalleryImage, HomepageSelection, NewsEvent
from madrasa.homepage.selection import (
    GALLERY,
    NEWS,
    HomepageSelectionService,
    SelectionNotFoundError,
    SelectionValidationError,
)

_NOW = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _news(db, title: str, days_ago: int = 0, *, is_active: bool = True) -> NewsEvent:
    item = NewsEvent(
        title=title,
        slug=f"{title.lower().replace(' ', '-')}-{uuid4().hex[:6]}",
        date=_NOW - timedelta(days=days_ago),
        excerpt="excerpt",
        content="content",
        image_url="https://img.example/n.jpg",
        author="Admin",
        is_active=is_active,
    )
    db.add(item)
    db.flush()
    return item


def _image(db, title: str, order: int = 0, days_ago: int = 0) -> GalleryImage:
    item = GalleryImage(
        title=title,
        category="campus",
        image_url="https://img.example/g.jpg",
        date=_NOW - timedelta(days=days_ago),
        location="Main Campus",
        description="description",
        order=order,
    )
    db.add(item)
    db.flush()
    return item


def _titles(items) -> list[str]:
    return [i.title for i in items]


# ===========================================================================
# resolve: fallback mode
# ===========================================================================

class TestResolveFallback:
    def test_news_fallback_is_latest_three_by_date(self, db_session):
        for days_ago, title in [(5, "E"), (1, "B"), (3, "D"), (0, "A"), (2, "C")]:
            _news(db_session, title, days_ago)

        resolved = HomepageSelectionService(db_session, NEWS).resolve()

        assert resolved.is_custom_selection is False
        assert resolved.max_items == 3
        assert resolved.selection_id is None
        assert _titles(resolved.items) == ["A", "B", "C"]

    def test_news_fallback_skips_inactive_items(self, db_session):
        _news(db_session, "Hidden", 0, is_active=False)
        _news(db_session, "Shown", 1)

        resolved = HomepageSelectionService(db_session, NEWS).resolve()

        assert _titles(resolved.items) == ["Shown"]

    def test_gallery_fallback_orders_by_order_then_newest(self, db_session):
        _image(db_session, "order2", order=2)
        _image(db_session, "order0-old", order=0, days_ago=3)
        _image(db_session, "order0-new", order=0, days_ago=0)
        _image(db_session, "order1", order=1)

        resolved = HomepageSelectionService(db_session, GALLERY).resolve()

        assert resolved.max_items == 6
        assert _titles(resolved.items) == ["order0-new", "order0-old", "order1", "order2"]

    def test_gallery_fallback_caps_at_six(self, db_session):
        for i in range(9):
            _image(db_session, f"img{i}", order=i)

        resolved = HomepageSelectionService(db_session, GALLERY).resolve()

        assert len(resolved.items) == 6
        assert _titles(resolved.items) == [f"img{i}" for i in range(6)]

    def test_empty_collection_returns_no_items(self, db_session):
        resolved = HomepageSelectionService(db_session, NEWS).resolve()

        assert resolved.items == []
        assert resolved.is_custom_selection is False

    def test_active_selection_with_empty_ids_falls_back(self, db_session):
        _news(db_session, "Latest", 0)
        db_session.add(HomepageSelection(content_type="news", item_ids=[], max_items=3, is_active=True))
        db_session.flush()

        resolved = HomepageSelectionService(db_session, NEWS).resolve()

        assert resolved.is_custom_selection is False
        assert _titles(resolved.items) == ["Latest"]


# ===========================================================================
# resolve: custom selection
# ===========================================================================

class TestResolveCustom:
    def test_items_follow_selection_order_not_date(self, db_session):
        a = _news(db_session, "A", 0)
        b = _news(db_session, "B", 1)
        c = _news(db_session, "C", 2)
        service = HomepageSelectionService(db_session, NEWS)

        service.save([c.id, a.id, b.id], max_items=3)
        resolved = service.resolve()

        assert resolved.is_custom_selection is True
        assert _titles(resolved.items) == ["C", "A", "B"]

    def test_truncates_to_max_items(self, db_session):
        items = [_news(db_session, f"N{i}", i) for i in range(5)]
        service = HomepageSelectionService(db_session, NEWS)

        service.save([str(i.id) for i in reversed(items)], max_items=2)
        resolved = service.resolve()

        assert resolved.max_items == 2
        assert _titles(resolved.items) == ["N4", "N3"]

    def test_deleted_item_is_dropped_and_order_kept(self, db_session):
        a = _image(db_session, "A")
        b = _image(db_session, "B")
        c = _image(db_session, "C")
        service = HomepageSelectionService(db_session, GALLERY)
        service.save([str(c.id), str(a.id), str(b.id)], max_items=6)

        db_session.delete(c)
        db_session.flush()
        resolved = service.resolve()

        assert resolved.is_custom_selection is True
        assert resolved.max_items == 6
        assert _titles(resolved.items) == ["A", "B"]

    def test_duplicate_ids_render_once(self, db_session):
        a = _news(db_session, "A")
        b = _news(db_session, "B")
        service = HomepageSelectionService(db_session, NEWS)

        service.save([a.id, b.id, a.id], max_items=3)

        assert _titles(service.resolve().items) == ["A", "B"]

    def test_all_referenced_items_deleted_returns_empty_custom(self, db_session):
        a = _news(db_session, "A")
        service = HomepageSelectionService(db_session, NEWS)
        service.save([a.id])
        db_session.delete(a)
        db_session.flush()

        resolved = service.resolve()

        assert resolved.is_custom_selection is True
        assert resolved.items == []

    def test_kinds_are_independent(self, db_session):
        n = _news(db_session, "N")
        _image(db_session, "G")
        HomepageSelectionService(db_session, NEWS).save([n.id])

        gallery = HomepageSelectionService(db_session, GALLERY).resolve()

        assert gallery.is_custom_selection is False


# ===========================================================================
# save / update / reset
# ===========================================================================

class TestSave:
    def test_save_deactivates_previous_selection(self, db_session):
        a = _news(db_session, "A")
        b = _news(db_session, "B")
        service = HomepageSelectionService(db_session, NEWS)

        first = service.save([a.id])
        second = service.save([b.id])
        db_session.refresh(first)

        assert first.is_active is False
        assert second.is_active is True
        assert _titles(service.resolve().items) == ["B"]

    def test_default_max_items_per_kind(self, db_session):
        n = _news(db_session, "N")
        g = _image(db_session, "G")

        assert HomepageSelectionService(db_session, NEWS).save([n.id]).max_items == 3
        assert HomepageSelectionService(db_session, GALLERY).save([g.id]).max_items == 6

    @pytest.mark.parametrize("item_ids", [[], None])
    def test_empty_ids_rejected_without_touching_active(self, db_session, item_ids):
        a = _news(db_session, "A")
        service = HomepageSelectionService(db_session, NEWS)
        existing = service.save([a.id])

        with pytest.raises(SelectionValidationError, match="at least one news item"):
            service.save(item_ids)

        db_session.refresh(existing)
        assert existing.is_active is True
        assert service.resolve().is_custom_selection is True

    def test_invalid_id_rejected(self, db_session):
        with pytest.raises(SelectionValidationError, match="Invalid item id"):
            HomepageSelectionService(db_session, NEWS).save(["not-a-uuid"])

    @pytest.mark.parametrize("kind,max_items", [(NEWS, 0), (NEWS, 7), (GALLERY, 2), (GALLERY, 13)])
    def test_max_items_out_of_range_rejected(self, db_session, kind, max_items):
        with pytest.raises(SelectionValidationError, match="maxItems must be between"):
            HomepageSelectionService(db_session, kind).save([str(uuid4())], max_items=max_items)

    def test_ids_stored_as_strings(self, db_session):
        a = _news(db_session, "A")

        selection = HomepageSelectionService(db_session, NEWS).save([a.id])

        assert selection.item_ids == [str(a.id)]


class TestUpdate:
    def test_update_rewrites_in_place(self, db_session):
        a = _news(db_session, "A")
        b = _news(db_session, "B")
        service = HomepageSelectionService(db_session, NEWS)
        selection = service.save([a.id])

        updated = service.update(selection.id, [b.id, a.id], max_items=2)

        assert updated.id == selection.id
        assert _titles(service.resolve().items) == ["B", "A"]

    def test_unknown_id_raises(self, db_session):
        a = _news(db_session, "A")

        with pytest.raises(SelectionNotFoundError):
            HomepageSelectionService(db_session, NEWS).update(uuid4(), [a.id])

    def test_id_of_other_kind_raises(self, db_session):
        g = _image(db_session, "G")
        gallery_selection = HomepageSelectionService(db_session, GALLERY).save([g.id])

        with pytest.raises(SelectionNotFoundError):
            HomepageSelectionService(db_session, NEWS).update(gallery_selection.id, [g.id])


class TestReset:
    def test_reset_returns_to_fallback(self, db_session):
        a = _news(db_session, "A", 2)
        _news(db_session, "Newest", 0)
        service = HomepageSelectionService(db_session, NEWS)
        service.save([a.id])

        service.reset()
        resolved = service.resolve()

        assert resolved.is_custom_selection is False
        assert _titles(resolved.items)[0] == "Newest"

    def test_reset_is_idempotent_and_keeps_history(self, db_session):
        a = _news(db_session, "A")
        service = HomepageSelectionService(db_session, NEWS)
        service.save([a.id])

        assert service.reset() == 1
        assert service.reset() == 0
        assert len(service.selections.list()) == 1
