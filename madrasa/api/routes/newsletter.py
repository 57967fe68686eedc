"""Newsletter routes.

GET    /newsletter          active subscribers
POST   /newsletter          subscribe (or resubscribe)
DELETE /newsletter/{email}  unsubscribe
POST   /newsletter/notify   send a notification to all active subscribers
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from madrasa.api.deps import get_db, get_dispatcher
from madrasa.api.serializers import subscriber_dict
from madrasa.core.constants import SUBSCRIBER_ACTIVE, SUBSCRIBER_UNSUBSCRIBED
from madrasa.db.repositories import SubscriberRepository
from madrasa.notification.dispatcher import (
    DispatchResult,
    NotificationDispatcher,
    NotificationRequest,
    NotificationValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newsletter", tags=["newsletter"])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class SubscribeBody(BaseModel):
    email: str | None = None


class NotifyBody(BaseModel):
    type: str | None = None
    title: str | None = None
    message: str | None = None
    link: str | None = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("", summary="List active subscribers")
def list_subscribers(db: Session = Depends(get_db)):
    subscribers = SubscriberRepository(db).list_by_status(SUBSCRIBER_ACTIVE)
    return {
        "success": True,
        "subscribers": [subscriber_dict(s) for s in subscribers],
        "count": len(subscribers),
    }


@router.post("", summary="Subscribe to the newsletter")
def subscribe(body: SubscribeBody, db: Session = Depends(get_db)):
    email = (body.email or "").strip().lower()
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    repo = SubscriberRepository(db)
    existing = repo.get_by_email(email)
    if existing is not None:
        if existing.status == SUBSCRIBER_ACTIVE:
            raise HTTPException(status_code=400, detail="This email is already subscribed")
        repo.update(existing, status=SUBSCRIBER_ACTIVE, subscribed_at=datetime.now(timezone.utc))
        logger.info("Subscriber %s resubscribed", existing.id)
        return {
            "success": True,
            "message": "Welcome back! You have been resubscribed to our newsletter.",
            "subscriber": subscriber_dict(existing),
        }

    try:
        subscriber = repo.create(email=email, status=SUBSCRIBER_ACTIVE)
    except IntegrityError as exc:
        # Concurrent signup for the same address won the unique index.
        db.rollback()
        raise HTTPException(status_code=409, detail="This email is already subscribed") from exc
    logger.info("Subscriber %s created", subscriber.id)
    return {
        "success": True,
        "message": "Successfully subscribed to newsletter!",
        "subscriber": subscriber_dict(subscriber),
    }


@router.delete("/{email}", summary="Unsubscribe from the newsletter")
def unsubscribe(email: str, db: Session = Depends(get_db)):
    repo = SubscriberRepository(db)
    subscriber = repo.get_by_email(email.strip().lower())
    if subscriber is None:
        raise HTTPException(status_code=404, detail="Email not found")

    repo.update(subscriber, status=SUBSCRIBER_UNSUBSCRIBED)
    logger.info("Subscriber %s unsubscribed", subscriber.id)
    return {"success": True, "message": "Successfully unsubscribed from newsletter"}


@router.post("/notify", summary="Send a notification to all active subscribers")
async def notify(body: NotifyBody, dispatcher: NotificationDispatcher = Depends(get_dispatcher)):
    request = NotificationRequest(
        type=body.type,
        title=body.title,
        message=body.message,
        link=body.link,
    )
    try:
        result = await dispatcher.dispatch(request)
    except NotificationValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _dispatch_payload(result)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _dispatch_payload(result: DispatchResult) -> dict:
    if result.preview:
        return {
            "success": result.success,
            "preview": True,
            "message": result.message,
            "subscribersCount": result.subscribers_count,
            "note": "Resend API key not configured. Add RESEND_API_KEY to your .env file.",
            "emailPreview": {
                "subject": result.subject,
                "recipients": result.recipients,
            },
        }
    return {
        "success": result.success,
        "preview": False,
        "message": result.message,
        "subscribersCount": result.subscribers_count,
        "successful": result.successful,
        "failed": result.failed,
        "results": [
            {
                "email": r.email,
                "success": r.success,
                "id": r.message_id,
                "error": r.error,
            }
            for r in result.results
        ],
    }
