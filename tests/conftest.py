from __future__ import annotations

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from madrasa.core.settings import Settings
from madrasa.db.base import Base
from madrasa.notification.email_provider import EmailProviderError


class FakeEmailProvider:
    """Records every send; raises for addresses listed in *fail_for*."""

    def __init__(self, fail_for: set[str] | None = None, error: Exception | None = None) -> None:
        self.fail_for = fail_for or set()
        self.error = error
        self.sent: list[dict] = []

    async def send(self, from_address: str, to: str, subject: str, html: str, text: str) -> str:
        self.sent.append(
            {"from": from_address, "to": to, "subject": subject, "html": html, "text": text}
        )
        if self.error is not None:
            raise self.error
        if to in self.fail_for:
            raise EmailProviderError("Resend returned HTTP 422: invalid recipient", status_code=422)
        return f"msg-{len(self.sent)}"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch):
    """Keep a developer's real Resend key or database out of the tests."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.delenv("RESEND_API_KEY", raising=False)

    from madrasa.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def session_factory():
    """Session factory over one shared in-memory SQLite connection."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory: sessionmaker):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def preview_settings() -> Settings:
    return Settings(RESEND_API_KEY=None, SITE_URL="https://madrasa.example", SITE_NAME="Test Madrasa")


@pytest.fixture()
def live_settings() -> Settings:
    return Settings(
        RESEND_API_KEY="re_test_key",
        RESEND_FROM_EMAIL="news@madrasa.example",
        SITE_URL="https://madrasa.example",
        SITE_NAME="Test Madrasa",
        EMAIL_SEND_TIMEOUT_SECONDS=2,
    )


@pytest.fixture()
def make_client(session_factory: sessionmaker) -> Callable[..., TestClient]:
    """Build a TestClient wired to the in-memory database.

    ``settings`` and ``provider`` replace the configured settings and the
    Resend client for every route.
    """
    from madrasa.api.deps import get_email_provider, get_session_factory
    from madrasa.api.main import app
    from madrasa.core.settings import get_settings

    clients: list[TestClient] = []

    def _make(settings: Settings | None = None, provider: object | None = None) -> TestClient:
        app.dependency_overrides[get_session_factory] = lambda: session_factory
        if settings is not None:
            app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_email_provider] = lambda: provider
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
    app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client: Callable[..., TestClient], preview_settings: Settings) -> TestClient:
    """Client in preview mode: no email provider configured."""
    return make_client(settings=preview_settings, provider=None)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_provider() -> FakeEmailProvider:
    return FakeEmailProvider()


@pytest.fixture()
def provider_factory() -> type[FakeEmailProvider]:
    return FakeEmailProvider


@pytest.fixture()
def add_subscribers(db_session: Session) -> Callable[..., list]:
    from madrasa.db.repositories import SubscriberRepository

    def _add(*emails: str, status: str = "active") -> list:
        repo = SubscriberRepository(db_session)
        rows = [repo.create(email=email, status=status) for email in emails]
        db_session.commit()
        return rows

    return _add
