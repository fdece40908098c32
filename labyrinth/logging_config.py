"""
Logging configuration for the labyrinth service.

Sets up one root handler with either JSON lines (for log aggregation) or
coloured single-line output (for a terminal). Every record carries the
request id of the HTTP request that produced it, when there is one.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional
from uuid import uuid4

request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "multipart", "python_multipart")


class StructuredFormatter(logging.Formatter):
    """
    Formats records as one JSON object per line.

    Fields passed as ``extra={"extra_fields": {...}}`` are merged into the
    top-level object.
    """

    def __init__(self, service_name: str, datefmt: Optional[str] = DATE_FORMAT):
        super().__init__(datefmt=datefmt)
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "service": self.service_name,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        request_id = request_id_context.get()
        if request_id:
            log_data["request_id"] = request_id

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Coloured, single-line formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        parts = [
            self.formatTime(record, self.datefmt),
            f"{color}{record.levelname:8}{self.RESET}",
            f"[{record.name}]",
        ]

        request_id = request_id_context.get()
        if request_id:
            parts.append(f"[req:{request_id[:8]}]")

        parts.append(record.getMessage())

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            parts.append(
                " ".join(f"{key}={value}" for key, value in extra_fields.items())
            )

        message = " ".join(parts)
        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"
        return message


def setup_logging(
    log_level: str = "INFO",
    service_name: str = "labyrinth",
    use_json: bool = False,
) -> logging.Logger:
    """
    Configure the root logger.

    Replaces any handlers already installed, so calling it twice
    (for example from tests) does not duplicate output.

    Args:
        log_level: Logging level name
        service_name: Service name stamped on JSON records
        use_json: Use StructuredFormatter instead of HumanReadableFormatter

    Returns:
        The service logger
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    formatter: logging.Formatter
    if use_json:
        formatter = StructuredFormatter(service_name)
    else:
        formatter = HumanReadableFormatter(datefmt=DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger(service_name)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger for a module (typically ``__name__``)."""
    return logging.getLogger(name or "labyrinth")


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind a request id to the current context.

    Args:
        request_id: Id to bind, a new UUID when None

    Returns:
        The bound request id
    """
    if request_id is None:
        request_id = str(uuid4())
    request_id_context.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_context.get()


def clear_request_id() -> None:
    request_id_context.set(None)
