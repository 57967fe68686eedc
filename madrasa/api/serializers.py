"""JSON shapes for API responses.

Keys are camelCase to match what the public site's pages consume.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from madrasa.db.models import (
    ExamResult,
    GalleryImage,
    HomepageSelection,
    NewsEvent,
    Scholarship,
    Subscriber,
    TodaysAbsence,
)


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


def news_event_dict(n: NewsEvent) -> dict:
    return {
        "id": str(n.id),
        "title": n.title,
        "slug": n.slug,
        "category": n.category,
        "date": _iso(n.date),
        "time": n.time,
        "excerpt": n.excerpt,
        "content": n.content,
        "imageUrl": n.image_url,
        "author": n.author,
        "tags": n.tags or [],
        "views": n.views,
        "isActive": n.is_active,
        "createdAt": _iso(n.created_at),
    }


def gallery_image_dict(g: GalleryImage) -> dict:
    return {
        "id": str(g.id),
        "title": g.title,
        "category": g.category,
        "imageUrl": g.image_url,
        "date": _iso(g.date),
        "location": g.location,
        "description": g.description,
        "order": g.order,
        "isActive": g.is_active,
        "createdAt": _iso(g.created_at),
    }


def content_item_dict(item: Any) -> dict:
    if isinstance(item, NewsEvent):
        return news_event_dict(item)
    if isinstance(item, GalleryImage):
        return gallery_image_dict(item)
    raise TypeError(f"Unsupported content item {type(item).__name__}")


def selection_dict(s: HomepageSelection, items: list[Any]) -> dict:
    return {
        "id": str(s.id),
        "contentType": s.content_type,
        "itemIds": list(s.item_ids),
        "maxItems": s.max_items,
        "isActive": s.is_active,
        "items": [content_item_dict(i) for i in items],
        "createdAt": _iso(s.created_at),
        "updatedAt": _iso(s.updated_at),
    }


def subscriber_dict(s: Subscriber) -> dict:
    return {
        "id": str(s.id),
        "email": s.email,
        "status": s.status,
        "subscribedAt": _iso(s.subscribed_at),
    }


def exam_result_dict(r: ExamResult) -> dict:
    return {
        "id": str(r.id),
        "className": r.class_name,
        "examName": r.exam_name,
        "examType": r.exam_type,
        "publishedDate": _iso(r.published_date),
        "pdfUrl": r.pdf_url,
        "passPercentage": r.pass_percentage,
        "isActive": r.is_active,
    }


def scholarship_dict(s: Scholarship) -> dict:
    return {
        "id": str(s.id),
        "className": s.class_name,
        "studentId": s.student_id,
        "studentName": s.student_name,
        "benefactorId": s.benefactor_id,
        "benefactorName": s.benefactor_name,
        "amount": s.amount,
        "date": s.date,
        "isActive": s.is_active,
    }


def absence_dict(a: TodaysAbsence) -> dict:
    return {
        "id": str(a.id),
        "className": a.class_name,
        "section": a.section,
        "title": a.title,
        "imageUrl": a.image_url,
        "date": _iso(a.report_date),
        "isActive": a.is_active,
    }
