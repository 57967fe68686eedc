"""Academic record routes that announce new content to subscribers.

GET  /exam-results      active results, newest first
POST /exam-results      publish a result, sends "Exam Results Published"
GET  /scholarship       active scholarships
POST /scholarship       award a scholarship, sends "New Scholarship Awarded"
GET  /todays-absences   active absence reports
POST /todays-absences   publish a report, sends "Absence Report Published"

Notifications are scheduled as background tasks: the record is saved and
the 201 response returned regardless of what happens to the emails.
Each handler commits before scheduling so the record is durable before
any subscriber hears about it.
"""
from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from madrasa.api.deps import get_db, get_email_provider, get_session_factory
from madrasa.api.serializers import absence_dict, exam_result_dict, scholarship_dict
from madrasa.core.constants import CLASS_NAMES, EXAM_TYPES
from madrasa.core.settings import Settings, get_settings
from madrasa.db.models import ExamResult, Scholarship, TodaysAbsence
from madrasa.db.repositories import ExamResultRepository, ScholarshipRepository, TodaysAbsenceRepository
from madrasa.notification.dispatcher import EmailProvider, NotificationRequest
from madrasa.notification.triggers import (
    absence_report_published,
    exam_result_published,
    scholarship_awarded,
    send_automatic_notification,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["academic"])


class Notifier:
    """Schedules automatic notifications on the request's background tasks."""

    def __init__(
        self,
        background_tasks: BackgroundTasks,
        session_factory: sessionmaker = Depends(get_session_factory),
        provider: EmailProvider | None = Depends(get_email_provider),
        settings: Settings = Depends(get_settings),
    ) -> None:
        self.background_tasks = background_tasks
        self.session_factory = session_factory
        self.provider = provider
        self.settings = settings

    def schedule(self, request: NotificationRequest) -> None:
        self.background_tasks.add_task(
            send_automatic_notification,
            self.session_factory,
            self.provider,
            self.settings,
            request,
        )


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class CreateExamResultBody(BaseModel):
    class_name: str | None = Field(default=None, alias="className")
    exam_name: str | None = Field(default=None, alias="examName")
    exam_type: str | None = Field(default=None, alias="examType")
    published_date: date | None = Field(default=None, alias="publishedDate")
    pdf_url: str | None = Field(default=None, alias="pdfUrl")
    pass_percentage: float | None = Field(default=None, alias="passPercentage")


class CreateScholarshipBody(BaseModel):
    class_name: str | None = Field(default=None, alias="className")
    student_id: str | None = Field(default=None, alias="studentId")
    student_name: str | None = Field(default=None, alias="studentName")
    benefactor_id: str | None = Field(default=None, alias="benefactorId")
    benefactor_name: str | None = Field(default=None, alias="benefactorName")
    amount: float | None = None
    date: str | None = None


class CreateAbsenceBody(BaseModel):
    class_name: str | None = Field(default=None, alias="className")
    section: str | None = None
    title: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    report_date: date | None = Field(default=None, alias="date")


def _require_all(body: BaseModel) -> None:
    missing = [name for name, value in body.model_dump().items() if value in (None, "")]
    if missing:
        raise HTTPException(status_code=400, detail="All fields are required")


# ---------------------------------------------------------------------------
# Exam results
# ---------------------------------------------------------------------------

@router.get("/exam-results", summary="List published exam results")
def list_exam_results(db: Session = Depends(get_db)):
    stmt = (
        select(ExamResult)
        .where(ExamResult.is_active.is_(True))
        .order_by(ExamResult.published_date.desc(), ExamResult.class_name.asc())
    )
    return [exam_result_dict(r) for r in db.execute(stmt).scalars().all()]


@router.post("/exam-results", status_code=201, summary="Publish an exam result")
def create_exam_result(
    body: CreateExamResultBody,
    notifier: Notifier = Depends(),
    db: Session = Depends(get_db),
):
    _require_all(body)
    if not 0 <= body.pass_percentage <= 100:
        raise HTTPException(status_code=400, detail="Pass percentage must be between 0 and 100")
    if body.class_name not in CLASS_NAMES:
        raise HTTPException(status_code=400, detail=f"Invalid class {body.class_name!r}")
    if body.exam_type not in EXAM_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid exam type {body.exam_type!r}")

    result = ExamResultRepository(db).create(**body.model_dump(), is_active=True)
    db.commit()
    logger.info("Published exam result %s", result.id)

    notifier.schedule(exam_result_published(result))
    return exam_result_dict(result)


# ---------------------------------------------------------------------------
# Scholarships
# ---------------------------------------------------------------------------

@router.get("/scholarship", summary="List scholarships")
def list_scholarships(db: Session = Depends(get_db)):
    stmt = (
        select(Scholarship)
        .where(Scholarship.is_active.is_(True))
        .order_by(Scholarship.class_name.asc(), Scholarship.date.desc())
    )
    return [scholarship_dict(s) for s in db.execute(stmt).scalars().all()]


@router.post("/scholarship", status_code=201, summary="Award a scholarship")
def create_scholarship(
    body: CreateScholarshipBody,
    notifier: Notifier = Depends(),
    db: Session = Depends(get_db),
):
    _require_all(body)
    if body.amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be greater than 0")

    scholarship = ScholarshipRepository(db).create(**body.model_dump(), is_active=True)
    db.commit()
    logger.info("Created scholarship %s", scholarship.id)

    notifier.schedule(scholarship_awarded(scholarship))
    return scholarship_dict(scholarship)


# ---------------------------------------------------------------------------
# Today's absences
# ---------------------------------------------------------------------------

@router.get("/todays-absences", summary="List absence reports")
def list_absences(db: Session = Depends(get_db)):
    stmt = (
        select(TodaysAbsence)
        .where(TodaysAbsence.is_active.is_(True))
        .order_by(TodaysAbsence.report_date.desc(), TodaysAbsence.created_at.desc())
    )
    return {"absences": [absence_dict(a) for a in db.execute(stmt).scalars().all()]}


@router.post("/todays-absences", status_code=201, summary="Publish an absence report")
def create_absence(
    body: CreateAbsenceBody,
    notifier: Notifier = Depends(),
    db: Session = Depends(get_db),
):
    fields = body.model_dump(exclude={"report_date"})
    if any(value in (None, "") for value in fields.values()):
        raise HTTPException(status_code=400, detail="All fields are required")
    if body.class_name not in CLASS_NAMES:
        raise HTTPException(status_code=400, detail=f"Invalid class {body.class_name!r}")

    absence = TodaysAbsenceRepository(db).create(
        **fields,
        report_date=body.report_date or date.today(),
        is_active=True,
    )
    db.commit()
    logger.info("Published absence report %s", absence.id)

    notifier.schedule(absence_report_published(absence))
    return {"message": "Absence created successfully", "absence": absence_dict(absence)}
