"""Structured logging configuration.

Records carry turn context from two places: keys passed through ``extra=``
and the fields bound by :func:`turn_context` for the running task. JSON
output is used outside development.
"""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from guider.config import Environment, get_settings

# Structured context keys that end up in formatted output
CONTEXT_FIELDS = (
    "conversation_id",
    "user_id",
    "message_id",
    "model",
    "requested_model",
    "tier",
    "verdict",
    "rules",
    "severity",
    "error_code",
    "duration_ms",
    "topic",
    "persona_source",
    "history_turns",
    "attempts",
)

# Third-party loggers held at WARNING regardless of the configured level
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")

_turn_fields: ContextVar[dict[str, Any]] = ContextVar("turn_fields", default={})


@contextmanager
def turn_context(**fields: Any) -> Iterator[None]:
    """Bind context fields to every record logged inside the block.

    Fields set to None are ignored. Explicit ``extra=`` values win over
    bound ones.
    """
    bound = {**_turn_fields.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _turn_fields.set(bound)
    try:
        yield
    finally:
        _turn_fields.reset(token)


class TurnContextFilter(logging.Filter):
    """Copies bound turn fields onto records that lack them."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _turn_fields.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Collect the whitelisted context fields present on a record."""
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = record_context(record)
        if context:
            log_data["context"] = context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if record.funcName:
            log_data["function"] = record.funcName
        if record.pathname:
            log_data["file"] = f"{record.pathname}:{record.lineno}"

        return json.dumps(log_data, default=str, ensure_ascii=False)


class DevFormatter(logging.Formatter):
    """Single-line console format with trailing ``key=value`` context."""

    FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self) -> None:
        super().__init__(fmt=self.FORMAT, datefmt=self.DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} | {pairs}"


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> logging.Logger:
    """Install a single stdout handler on the root logger.

    Args:
        level: Log level override (default from settings).
        json_output: Force JSON output (default: everywhere but development).

    Returns:
        Root logger instance.
    """
    settings = get_settings()
    numeric_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if json_output is None:
        json_output = settings.environment != Environment.DEVELOPMENT

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if json_output else DevFormatter())
    handler.addFilter(TurnContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a named logger."""
    return logging.getLogger(name)
