"""Enumerations shared by the models, services and routes.

Class names and exam types mirror the options offered by the admin forms.
"""
from __future__ import annotations

# ---------------------------------------------------------------------------
# Newsletter
# ---------------------------------------------------------------------------

SUBSCRIBER_ACTIVE = "active"
SUBSCRIBER_UNSUBSCRIBED = "unsubscribed"

SUBSCRIBER_STATUSES: frozenset[str] = frozenset({SUBSCRIBER_ACTIVE, SUBSCRIBER_UNSUBSCRIBED})

NOTIFICATION_NEWS = "news"
NOTIFICATION_ACADEMIC = "academic"

NOTIFICATION_TYPES: frozenset[str] = frozenset({NOTIFICATION_NEWS, NOTIFICATION_ACADEMIC})

# ---------------------------------------------------------------------------
# Homepage content types
# ---------------------------------------------------------------------------

CONTENT_NEWS = "news"
CONTENT_GALLERY = "gallery"

# ---------------------------------------------------------------------------
# Academic records
# ---------------------------------------------------------------------------

NEWS_CATEGORIES: tuple[str, ...] = ("news", "event", "achievement", "announcement")

EXAM_TYPES: tuple[str, ...] = ("Midterm", "Final", "Terminal")

CLASS_NAMES: tuple[str, ...] = (
    "Play Group",
    "Nursery",
    "Class 1",
    "Class 2",
    "Class 3",
    "Class 4",
    "Class 5",
    "Class 6",
    "Class 7",
    "Class 8",
    "Class 9",
    "Class 10",
)
