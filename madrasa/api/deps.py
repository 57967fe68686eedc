"""FastAPI dependencies: database sessions, settings and the email provider."""
from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from madrasa.core.settings import Settings, get_settings
from madrasa.db import session as db_session
from madrasa.db.repositories import SubscriberRepository
from madrasa.notification.dispatcher import EmailProvider, NotificationDispatcher
from madrasa.notification.email_provider import ResendClient


def get_session_factory() -> sessionmaker:
    """Return the process-wide session factory.  Tests override this."""
    return db_session.get_session_factory()


def get_db(factory: sessionmaker = Depends(get_session_factory)) -> Generator[Session, None, None]:
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_email_provider(settings: Settings = Depends(get_settings)) -> EmailProvider | None:
    """Return a Resend client, or ``None`` in preview mode."""
    if not settings.email_enabled:
        return None
    return ResendClient.from_settings(settings)


def get_dispatcher(
    db: Session = Depends(get_db),
    provider: EmailProvider | None = Depends(get_email_provider),
    settings: Settings = Depends(get_settings),
) -> NotificationDispatcher:
    return NotificationDispatcher(SubscriberRepository(db), provider, settings)
