from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, DateTime, Float, Integer, JSON, String, Text, func, text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from madrasa.db.base import Base


class Subscriber(Base):
    """A newsletter signup.  Unsubscribing flips ``status``; rows are kept."""

    __tablename__ = "newsletter_subscribers"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="active", server_default=sql_text("'active'")
    )
    subscribed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class NewsEvent(Base):
    __tablename__ = "news_events"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(
        String(32), nullable=False, default="news", server_default=sql_text("'news'")
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    time: Mapped[str | None] = mapped_column(String(32), nullable=True)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    author: Mapped[str] = mapped_column(String(256), nullable=False)
    tags: Mapped[list | None] = mapped_column(JSON, nullable=True)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=sql_text("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=sql_text("true"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class GalleryImage(Base):
    __tablename__ = "gallery_images"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    image_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    location: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=sql_text("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=sql_text("true"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class HomepageSelection(Base):
    """Admin-curated homepage content for one content type.

    Every save inserts a new row and deactivates the previous ones, so
    at most one row per ``content_type`` has ``is_active = true`` and the
    inactive rows form the selection history.  ``item_ids`` keeps the
    admin's ordering.
    """

    __tablename__ = "homepage_selections"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    content_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    item_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    max_items: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=sql_text("true"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class ExamResult(Base):
    __tablename__ = "exam_results"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    class_name: Mapped[str] = mapped_column(String(32), nullable=False)
    exam_name: Mapped[str] = mapped_column(String(256), nullable=False)
    exam_type: Mapped[str] = mapped_column(String(32), nullable=False)
    published_date: Mapped[date] = mapped_column(Date, nullable=False)
    pdf_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    pass_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=sql_text("true"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class Scholarship(Base):
    __tablename__ = "scholarships"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    class_name: Mapped[str] = mapped_column(String(32), nullable=False)
    student_id: Mapped[str] = mapped_column(String(64), nullable=False)
    student_name: Mapped[str] = mapped_column(String(256), nullable=False)
    benefactor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    benefactor_name: Mapped[str] = mapped_column(String(256), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=sql_text("true"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TodaysAbsence(Base):
    __tablename__ = "todays_absences"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    class_name: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    section: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    image_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    report_date: Mapped[date] = mapped_column("date", Date, nullable=False, default=date.today, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=sql_text("true"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
