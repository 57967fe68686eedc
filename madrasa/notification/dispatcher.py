"""Newsletter notification dispatcher.

Fans one ``NotificationRequest`` out to every active subscriber:

1. Validate the request (type, title, message).
2. Load active subscribers in a worker thread.  None is a successful no-op.
3. Render one subject, HTML body and text body.
4. Without a real Resend key, stop and return a preview of what would
   be sent.
5. Otherwise send one message per subscriber concurrently.  Each send is
   bounded by a timeout and a concurrency semaphore, and records its own
   outcome; a failing recipient never cancels its siblings.
6. Tally successes and failures.

Safety: subscriber addresses are never logged, only subscriber ids.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from madrasa.core.constants import NOTIFICATION_TYPES, SUBSCRIBER_ACTIVE
from madrasa.core.settings import Settings
from madrasa.db.models import Subscriber
from madrasa.db.repositories import SubscriberRepository
from madrasa.notification.email_provider import EmailProviderError
from madrasa.notification.renderer import RenderedEmail, render_email

logger = logging.getLogger(__name__)

AUTOMATIC_FOOTER = "This is an automatic notification"
MANUAL_FOOTER = "Thank you for staying connected with us!"


class NotificationValidationError(ValueError):
    """Raised when a notification request is missing required fields."""


class EmailProvider(Protocol):
    async def send(
        self,
        from_address: str,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> str: ...


# ---------------------------------------------------------------------------
# Request / result
# ---------------------------------------------------------------------------

@dataclass
class NotificationRequest:
    """One announcement, consumed once by ``NotificationDispatcher.dispatch``."""

    type: str | None
    title: str | None
    message: str | None
    link: str | None = None
    automatic: bool = False

    def validate(self) -> None:
        if not (self.type and self.title and self.title.strip() and self.message and self.message.strip()):
            raise NotificationValidationError("Type, title, and message are required")
        if self.type not in NOTIFICATION_TYPES:
            raise NotificationValidationError(
                f"Invalid notification type {self.type!r}; "
                f"must be one of {sorted(NOTIFICATION_TYPES)}"
            )


@dataclass
class RecipientResult:
    subscriber_id: UUID
    email: str
    success: bool
    message_id: str | None = None
    error: str | None = None


@dataclass
class DispatchResult:
    success: bool
    message: str
    subscribers_count: int = 0
    successful: int = 0
    failed: int = 0
    results: list[RecipientResult] = field(default_factory=list)
    preview: bool = False
    subject: str | None = None
    recipients: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# NotificationDispatcher
# ---------------------------------------------------------------------------

class NotificationDispatcher:
    """Deliver newsletter notifications to all active subscribers."""

    def __init__(
        self,
        subscribers: SubscriberRepository,
        provider: EmailProvider | None,
        settings: Settings,
    ) -> None:
        self.subscribers = subscribers
        self.provider = provider
        self.settings = settings

    @property
    def preview_mode(self) -> bool:
        return self.provider is None or not self.settings.email_enabled

    def render(self, request: NotificationRequest) -> RenderedEmail:
        return render_email(
            request.type,
            request.title,
            request.message,
            request.link,
            site_name=self.settings.site_name,
            site_url=self.settings.site_url,
            footer_note=AUTOMATIC_FOOTER if request.automatic else MANUAL_FOOTER,
        )

    async def dispatch(self, request: NotificationRequest) -> DispatchResult:
        request.validate()

        # Blocking query; keep it off the event loop.
        recipients = await asyncio.to_thread(self.subscribers.list_by_status, SUBSCRIBER_ACTIVE)
        if not recipients:
            logger.info("No active subscribers; notification %r not sent", request.title)
            return DispatchResult(success=True, message="No active subscribers", subscribers_count=0)

        email = self.render(request)

        if self.preview_mode:
            logger.info(
                "Email provider not configured; prepared preview for %d subscriber(s)",
                len(recipients),
            )
            return DispatchResult(
                success=True,
                message=(
                    f"Email preview prepared for {len(recipients)} subscriber(s). "
                    "Configure RESEND_API_KEY to send actual emails."
                ),
                subscribers_count=len(recipients),
                preview=True,
                subject=email.subject,
                recipients=[s.email for s in recipients],
            )

        logger.info("Sending %r to %d subscriber(s)", email.subject, len(recipients))
        semaphore = asyncio.Semaphore(max(1, self.settings.email_max_concurrency))
        results = await asyncio.gather(
            *(self._send_one(subscriber, email, semaphore) for subscriber in recipients)
        )

        successful = sum(1 for r in results if r.success)
        failed = len(results) - successful
        if failed:
            logger.warning("Notification %r: %d sent, %d failed", request.title, successful, failed)
        else:
            logger.info("Notification %r: %d sent", request.title, successful)

        message = f"Email notifications sent to {successful} subscriber(s)"
        if failed:
            message += f" ({failed} failed)"
        return DispatchResult(
            success=successful > 0,
            message=message,
            subscribers_count=len(recipients),
            successful=successful,
            failed=failed,
            results=list(results),
            subject=email.subject,
            recipients=[s.email for s in recipients],
        )

    async def _send_one(
        self,
        subscriber: Subscriber,
        email: RenderedEmail,
        semaphore: asyncio.Semaphore,
    ) -> RecipientResult:
        async with semaphore:
            try:
                message_id = await asyncio.wait_for(
                    self.provider.send(
                        from_address=self.settings.resend_from_email,
                        to=subscriber.email,
                        subject=email.subject,
                        html=email.html,
                        text=email.text,
                    ),
                    timeout=self.settings.email_send_timeout_seconds,
                )
            except asyncio.TimeoutError:
                error = f"timed out after {self.settings.email_send_timeout_seconds}s"
            except EmailProviderError as exc:
                error = str(exc)
            except Exception as exc:
                logger.exception("Unexpected error sending to subscriber %s", subscriber.id)
                error = str(exc) or exc.__class__.__name__
            else:
                logger.debug("Delivered notification to subscriber %s", subscriber.id)
                return RecipientResult(
                    subscriber_id=subscriber.id,
                    email=subscriber.email,
                    success=True,
                    message_id=message_id,
                )

        logger.warning("Delivery to subscriber %s failed: %s", subscriber.id, error)
        return RecipientResult(
            subscriber_id=subscriber.id,
            email=subscriber.email,
            success=False,
            error=error,
        )
