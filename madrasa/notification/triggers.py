"""Automatic notifications fired after academic content is published.

Route handlers schedule ``send_automatic_notification`` with FastAPI
``BackgroundTasks`` so it runs after the response has been produced.
It opens its own database session and never raises: the content save
has already succeeded and a mail outage must not surface to the admin.
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from madrasa.core.constants import NOTIFICATION_ACADEMIC
from madrasa.core.settings import Settings
from madrasa.db.models import ExamResult, Scholarship, TodaysAbsence
from madrasa.db.repositories import SubscriberRepository
from madrasa.notification.dispatcher import (
    DispatchResult,
    EmailProvider,
    NotificationDispatcher,
    NotificationRequest,
)

logger = logging.getLogger(__name__)


async def send_automatic_notification(
    session_factory: Callable[[], Session],
    provider: EmailProvider | None,
    settings: Settings,
    request: NotificationRequest,
) -> DispatchResult | None:
    """Dispatch *request*, logging instead of raising on any failure."""
    request.automatic = True
    try:
        with session_factory() as db:
            dispatcher = NotificationDispatcher(SubscriberRepository(db), provider, settings)
            result = await dispatcher.dispatch(request)
    except Exception:
        logger.exception("Automatic notification %r failed", request.title)
        return None

    if result.preview:
        logger.info(
            "Automatic notification %r previewed for %d subscriber(s)",
            request.title, result.subscribers_count,
        )
    elif result.failed:
        logger.warning(
            "Automatic notification %r: %d sent, %d failed",
            request.title, result.successful, result.failed,
        )
    else:
        logger.info(
            "Automatic notification %r sent to %d subscriber(s)",
            request.title, result.successful,
        )
    return result


# ---------------------------------------------------------------------------
# Message builders, one per content mutation
# ---------------------------------------------------------------------------

def exam_result_published(result: ExamResult) -> NotificationRequest:
    pass_rate = f"{result.pass_percentage:g}"
    return NotificationRequest(
        type=NOTIFICATION_ACADEMIC,
        title="Exam Results Published",
        message=(
            f"{result.exam_name} results for {result.class_name} have been published. "
            f"Pass rate: {pass_rate}%. View the complete results now."
        ),
        link="/academic/results",
    )


def scholarship_awarded(scholarship: Scholarship) -> NotificationRequest:
    return NotificationRequest(
        type=NOTIFICATION_ACADEMIC,
        title="New Scholarship Awarded",
        message=(
            f"{scholarship.student_name} of {scholarship.class_name} has been awarded "
            f"a scholarship by {scholarship.benefactor_name}."
        ),
        link="/academic/scholarship",
    )


def absence_report_published(absence: TodaysAbsence) -> NotificationRequest:
    return NotificationRequest(
        type=NOTIFICATION_ACADEMIC,
        title="Absence Report Published",
        message=f"{absence.title} - Absence report for {absence.class_name} {absence.section}.",
        link="/absences",
    )
