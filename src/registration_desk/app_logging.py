"""Logging configuration helpers."""

import logging

# Keys passed through ``extra=`` by the submission pipeline.
CONTEXT_KEYS = (
    "flow_id",
    "kind",
    "path",
    "operation",
    "uid",
    "channel",
    "fallback",
    "photo_url",
    "image",
)


class ContextFormatter(logging.Formatter):
    """Formatter that appends pipeline context fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if getattr(record, key, None) is not None
        ]
        if not context:
            return message
        return f"{message} [{' '.join(context)}]"


def configure_logging() -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger("registration_desk")
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
