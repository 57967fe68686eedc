#!/usr/bin/env python3
"""Seed demo data: news items, gallery images, subscribers, homepage selections.

Usage:
    python scripts/seed_demo.py          # uses DATABASE_URL from env / .env
    DATABASE_URL=... python scripts/seed_demo.py
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from madrasa.content.slug import make_slug
from madrasa.db.base import Base
from madrasa.db.repositories import (
    GalleryImageRepository,
    NewsEventRepository,
    SubscriberRepository,
)
from madrasa.db.session import get_engine
from madrasa.homepage.selection import GALLERY, NEWS, HomepageSelectionService


def seed(session: Session) -> None:
    """Insert demo content and curate the homepage from it."""
    now = datetime.now(timezone.utc)

    news_repo = NewsEventRepository(session)
    demo_news = [
        # (title, category, days ago)
        ("Annual Quran Recitation Competition", "event", 2),
        ("Class 5 Students Win District Science Fair", "achievement", 5),
        ("Admissions Open for the New Session", "announcement", 9),
        ("Parent-Teacher Meeting Schedule", "news", 14),
    ]
    news = []
    for offset, (title, category, days_ago) in enumerate(demo_news):
        news.append(
            news_repo.create(
                title=title,
                slug=make_slug(title, int(now.timestamp() * 1000) + offset),
                category=category,
                date=now - timedelta(days=days_ago),
                excerpt=f"{title}.",
                content=f"{title}. Details will be shared on the notice board.",
                image_url="https://placehold.co/800x450",
                author="Admin",
            )
        )

    gallery_repo = GalleryImageRepository(session)
    images = [
        gallery_repo.create(
            title=f"Campus Life {i + 1}",
            category="campus",
            image_url=f"https://placehold.co/600x400?text=Campus+{i + 1}",
            date=now - timedelta(days=i),
            location="Main Campus",
            description="Students during the daily assembly.",
            order=i,
        )
        for i in range(8)
    ]

    subscriber_repo = SubscriberRepository(session)
    for email in ("parent.one@example.com", "parent.two@example.com", "alumni@example.com"):
        subscriber_repo.create(email=email, status="active")

    HomepageSelectionService(session, NEWS).save([str(n.id) for n in news[:3]], max_items=3)
    HomepageSelectionService(session, GALLERY).save([str(g.id) for g in images[:6]], max_items=6)

    session.commit()
    print(f"Seeded {len(news)} news items, {len(images)} gallery images, 3 subscribers.")


def main() -> None:
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    with Session(engine) as session:
        seed(session)


if __name__ == "__main__":
    main()
