import asyncio
from datetime import date
from unittest.mock import MagicMock

from madrasa.db.models import ExamResult, Scholarship, TodaysAbsence
from madrasa.notification.dispatcher import AUTOMATIC_FOOTER, NotificationRequest
from madrasa.notification.triggers import (
    absence_report_published,
    exam_result_published,
    scholarship_awarded,
    send_automatic_notification,
)


def _request() -> NotificationRequest:
    return NotificationRequest(type="academic", title="Exam Results Published", message="Results are out")


class TestSendAutomaticNotification:
    def test_sends_with_automatic_footer(self, session_factory, fake_provider, live_settings, add_subscribers):
        add_subscribers("parent@example.com")

        result = asyncio.run(
            send_automatic_notification(session_factory, fake_provider, live_settings, _request())
        )

        assert result.successful == 1
        assert AUTOMATIC_FOOTER in fake_provider.sent[0]["text"]
        assert AUTOMATIC_FOOTER in fake_provider.sent[0]["html"]

    def test_preview_mode_sends_nothing(self, session_factory, fake_provider, preview_settings, add_subscribers):
        add_subscribers("parent@example.com")

        result = asyncio.run(
            send_automatic_notification(session_factory, fake_provider, preview_settings, _request())
        )

        assert result.preview is True
        assert fake_provider.sent == []

    def test_database_failure_is_logged_not_raised(self, fake_provider, live_settings, caplog):
        broken_factory = MagicMock(side_effect=RuntimeError("database unavailable"))

        with caplog.at_level("ERROR"):
            result = asyncio.run(
                send_automatic_notification(broken_factory, fake_provider, live_settings, _request())
            )

        assert result is None
        assert "Automatic notification 'Exam Results Published' failed" in caplog.text
        assert fake_provider.sent == []

    def test_invalid_request_is_logged_not_raised(self, session_factory, fake_provider, live_settings, caplog):
        request = NotificationRequest(type="sports", title="Match day", message="Go team")

        with caplog.at_level("ERROR"):
            result = asyncio.run(
                send_automatic_notification(session_factory, fake_provider, live_settings, request)
            )

        assert result is None
        assert "Invalid notification type" in caplog.text

    def test_total_outage_still_returns_result(
        self, session_factory, provider_factory, live_settings, add_subscribers
    ):
        add_subscribers("a@example.com", "b@example.com")
        provider = provider_factory(error=ConnectionError("provider down"))

        result = asyncio.run(
            send_automatic_notification(session_factory, provider, live_settings, _request())
        )

        assert result.success is False
        assert result.failed == 2


class TestMessageBuilders:
    def test_exam_result_message(self):
        exam = ExamResult(
            class_name="Class 5",
            exam_name="Annual Exam 2025",
            exam_type="Final",
            published_date=date(2025, 3, 1),
            pdf_url="https://cdn.example/r.pdf",
            pass_percentage=92.5,
        )

        request = exam_result_published(exam)

        assert request.type == "academic"
        assert request.title == "Exam Results Published"
        assert request.link == "/academic/results"
        assert "Annual Exam 2025 results for Class 5" in request.message
        assert "Pass rate: 92.5%" in request.message

    def test_whole_pass_rate_has_no_decimal(self):
        exam = ExamResult(class_name="Class 1", exam_name="Midterm", pass_percentage=100.0)

        assert "Pass rate: 100%" in exam_result_published(exam).message

    def test_scholarship_message(self):
        scholarship = Scholarship(
            class_name="Class 7", student_name="Amina", benefactor_name="Local Trust"
        )

        request = scholarship_awarded(scholarship)

        assert request.title == "New Scholarship Awarded"
        assert request.link == "/academic/scholarship"
        assert "Amina of Class 7" in request.message
        assert "Local Trust" in request.message

    def test_absence_message(self):
        absence = TodaysAbsence(class_name="Class 3", section="A", title="Monday roll call")

        request = absence_report_published(absence)

        assert request.title == "Absence Report Published"
        assert request.link == "/absences"
        assert request.message == "Monday roll call - Absence report for Class 3 A."
