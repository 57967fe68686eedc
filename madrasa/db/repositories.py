from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from madrasa.core.constants import SUBSCRIBER_ACTIVE
from madrasa.db import models

ModelT = TypeVar("ModelT")


def coerce_uuid(value: UUID | str) -> UUID | None:
    """Return *value* as a ``UUID``, or ``None`` when it is not a valid id."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class BaseRepository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def create(self, **kwargs) -> ModelT:
        entity = self.model(**kwargs)
        self.db.add(entity)
        self.db.flush()
        return entity

    def get(self, entity_id: UUID) -> ModelT | None:
        return self.db.get(self.model, entity_id)

    def list(self, limit: int = 100, offset: int = 0) -> list[ModelT]:
        stmt = select(self.model).offset(offset).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def update(self, entity: ModelT, **kwargs) -> ModelT:
        for key, value in kwargs.items():
            setattr(entity, key, value)
        self.db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.db.flush()


class ContentRepository(BaseRepository[ModelT]):
    """Read side of a homepage content collection (news, gallery)."""

    def list_active(self, order_by: Sequence[Any], limit: int | None = None) -> list[ModelT]:
        stmt = select(self.model).where(self.model.is_active.is_(True)).order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def find_by_ids(self, ids: Sequence[UUID | str]) -> dict[UUID, ModelT]:
        """Return the rows matching *ids*, keyed by id.  Unknown ids are absent."""
        wanted = [uid for uid in (coerce_uuid(i) for i in ids) if uid is not None]
        if not wanted:
            return {}
        stmt = select(self.model).where(self.model.id.in_(wanted))
        return {row.id: row for row in self.db.execute(stmt).scalars().all()}


class NewsEventRepository(ContentRepository[models.NewsEvent]):
    model = models.NewsEvent


class GalleryImageRepository(ContentRepository[models.GalleryImage]):
    model = models.GalleryImage


class HomepageSelectionRepository(BaseRepository[models.HomepageSelection]):
    model = models.HomepageSelection

    def get_active(self, content_type: str) -> models.HomepageSelection | None:
        stmt = (
            select(models.HomepageSelection)
            .where(
                models.HomepageSelection.content_type == content_type,
                models.HomepageSelection.is_active.is_(True),
            )
            .order_by(models.HomepageSelection.created_at.desc())
        )
        return self.db.execute(stmt).scalars().first()

    def deactivate_all(self, content_type: str) -> int:
        stmt = (
            update(models.HomepageSelection)
            .where(
                models.HomepageSelection.content_type == content_type,
                models.HomepageSelection.is_active.is_(True),
            )
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        result = self.db.execute(stmt)
        self.db.flush()
        return result.rowcount or 0


class SubscriberRepository(BaseRepository[models.Subscriber]):
    model = models.Subscriber

    def get_by_email(self, email: str) -> models.Subscriber | None:
        stmt = select(models.Subscriber).where(models.Subscriber.email == email)
        return self.db.execute(stmt).scalars().first()

    def list_by_status(self, status: str = SUBSCRIBER_ACTIVE) -> list[models.Subscriber]:
        stmt = (
            select(models.Subscriber)
            .where(models.Subscriber.status == status)
            .order_by(models.Subscriber.subscribed_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())


class ExamResultRepository(BaseRepository[models.ExamResult]):
    model = models.ExamResult


class ScholarshipRepository(BaseRepository[models.Scholarship]):
    model = models.Scholarship


class TodaysAbsenceRepository(BaseRepository[models.TodaysAbsence]):
    model = models.TodaysAbsence
