import logging

from madrasa.core.logging import EmailRedactionFilter


def _filtered_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.filters = []
    logger.addFilter(EmailRedactionFilter())
    return logger


def test_filter_redacts_address_in_message(caplog):
    logger = _filtered_logger("test.redact.msg")

    with caplog.at_level(logging.INFO, logger="test.redact.msg"):
        logger.info("Subscribed parent.one@example.com to the newsletter")

    assert "parent.one@example.com" not in caplog.text
    assert "Subscribed [REDACTED] to the newsletter" in caplog.text


def test_filter_redacts_address_in_args(caplog):
    logger = _filtered_logger("test.redact.args")

    with caplog.at_level(logging.INFO, logger="test.redact.args"):
        logger.info("Delivery to %s failed after %d attempt(s)", "Parent@School.org", 1)

    assert "Parent@School.org" not in caplog.text
    assert "Delivery to [REDACTED] failed after 1 attempt(s)" in caplog.text


def test_filter_leaves_other_text_alone(caplog):
    logger = _filtered_logger("test.redact.plain")

    with caplog.at_level(logging.INFO, logger="test.redact.plain"):
        logger.info("Notification %r sent to %d subscriber(s)", "Exam Results Published", 3)

    assert "'Exam Results Published' sent to 3 subscriber(s)" in caplog.text
    assert "[REDACTED]" not in caplog.text
