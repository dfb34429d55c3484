"""Tests for logging configuration."""

import logging

from registration_desk.app_logging import ContextFormatter, configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("registration_desk")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert isinstance(logger.handlers[0].formatter, ContextFormatter)


def test_formatter_appends_pipeline_context() -> None:
    formatter = ContextFormatter("%(levelname)s: %(message)s")
    record = logging.LogRecord(
        "registration_desk.services.submissions",
        logging.WARNING,
        __file__,
        1,
        "Registration write rejected",
        None,
        None,
    )
    record.path = "registrations/anon-1"
    record.operation = "create"

    assert formatter.format(record) == (
        "WARNING: Registration write rejected "
        "[path=registrations/anon-1 operation=create]"
    )


def test_formatter_leaves_plain_messages_untouched() -> None:
    formatter = ContextFormatter("%(message)s")
    record = logging.LogRecord(
        "registration_desk", logging.INFO, "", 0, "ok", None, None
    )

    assert formatter.format(record) == "ok"
