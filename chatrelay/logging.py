"""
Logging configuration for the chat relay.

Every log line can carry:
- the correlation ID of the HTTP request or WebSocket connection
- fields bound with `set_log_context` (e.g. `connection_id`)
- fields passed through `extra=...`

The console shows either human-readable lines or JSON, depending on
`LOG_CONSOLE_FORMAT`. Errors are additionally written as JSON lines to
`LOG_FILE_PATH`.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

from chatrelay.constants import MAX_LOG_SIZE_BYTES
from chatrelay.fields.iso_timestamp import format_timestamp
from chatrelay.settings import Settings, app_settings

# Fields bound to the current request or connection
log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

# Attributes every LogRecord has; anything else came from `extra=...`
_STANDARD_RECORD_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
    "correlation_id",
}

_TRUNCATED_SUFFIX = "... [TRUNCATED]"


def get_correlation_id() -> str:
    """
    Correlation ID of the current context, or an empty string.

    Imported lazily: the middleware module imports starlette, which must not
    be required just to configure logging.
    """
    try:
        from chatrelay.middlewares.correlation_id import correlation_id
    except ImportError:
        return ""

    return correlation_id.get()


def set_log_context(**kwargs: Any) -> None:
    """
    Bind fields to every log line emitted in the current context.

    The endpoint binds `connection_id` once per WebSocket connection, so
    coordinator logs for that connection carry it without passing it around.

    Example:
        >>> set_log_context(connection_id="6f1c...")
        >>> logger.info("alice joined the chat")
    """
    log_context.set({**log_context.get(), **kwargs})


def get_log_context() -> dict[str, Any]:
    return log_context.get()


def clear_log_context() -> None:
    log_context.set({})


class StructuredJSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Timestamps use the same ISO-8601 UTC format as the chat envelopes, so
    server logs and client transcripts can be lined up directly. Lines
    longer than MAX_LOG_SIZE_BYTES get their message truncated.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "timestamp": format_timestamp(created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            "environment": app_settings.ENV.value,
        }

        cid = get_correlation_id()
        if cid:
            payload["request_id"] = cid

        payload.update(get_log_context())
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_KEYS
        )

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        line = json.dumps(payload, default=str)
        if len(line) <= MAX_LOG_SIZE_BYTES:
            return line

        overflow = len(line) - MAX_LOG_SIZE_BYTES + len(_TRUNCATED_SUFFIX)
        payload["message"] = payload["message"][:-overflow] + _TRUNCATED_SUFFIX
        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Console formatter for development.

    INFO lines are short. Every other level also shows where the line was
    logged from, which is what you want for debug output and warnings.
    """

    BRIEF_FMT = "%(asctime)s - [%(correlation_id)s] %(levelname)s: %(message)s"
    DETAILED_FMT = (
        "%(asctime)s - [%(correlation_id)s] %(levelname)s: "
        "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
    )
    DATE_FMT = "%Y-%m-%d %H:%M:%S"

    def __init__(self) -> None:
        super().__init__(datefmt=self.DATE_FMT)
        self._brief = logging.Formatter(self.BRIEF_FMT, datefmt=self.DATE_FMT)
        self._detailed = logging.Formatter(
            self.DETAILED_FMT, datefmt=self.DATE_FMT
        )

    def format(self, record: logging.LogRecord) -> str:
        record.correlation_id = get_correlation_id() or "-"

        if record.levelno == logging.INFO:
            return self._brief.format(record)
        return self._detailed.format(record)


def _console_handler(settings: Settings) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    if settings.LOG_CONSOLE_FORMAT == "json":
        handler.setFormatter(StructuredJSONFormatter())
    else:
        handler.setFormatter(HumanReadableFormatter())
    return handler


def _error_file_handler(path: str) -> logging.Handler:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    handler = logging.FileHandler(path)
    handler.setLevel(logging.ERROR)
    handler.setFormatter(StructuredJSONFormatter())
    return handler


def setup_logging(settings: Settings = app_settings) -> logging.Logger:
    """
    Configure the root logger.

    Installs the console handler and the JSON error file handler, replacing
    any handlers configured before. An unwritable log file only costs the
    file handler.

    Args:
        settings: Source of LOG_LEVEL, LOG_CONSOLE_FORMAT and LOG_FILE_PATH.

    Returns:
        The root logger.
    """
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL.upper())
    root.handlers.clear()
    root.addHandler(_console_handler(settings))

    try:
        root.addHandler(_error_file_handler(settings.LOG_FILE_PATH))
    except OSError as e:
        root.warning(f"Error log file disabled: {e}")

    # Keep test output clean
    if os.path.basename(sys.argv[0]) == "pytest":
        logging.disable(logging.ERROR)

    return root


logger = setup_logging()
