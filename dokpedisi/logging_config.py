"""Logging configuration

Every record can carry the document it is about (doc_id, agenda_no,
sheet_row). Callers attach it with `extra=log_context(...)`:

    logger.info("Expedition recorded", extra=log_context(agenda_no="001/SM/2024"))

On Cloud Run the context becomes top-level fields of the JSON line, so a
document's trail can be filtered in Cloud Logging (jsonPayload.agenda_no).
Locally it is appended to the text line as [agenda_no=... sheet_row=...].

Environment variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)
    LOG_FORMAT: "json" or "text" (default: json on Cloud Run, text elsewhere)
    K_SERVICE / CLOUD_RUN_JOB: set by Cloud Run
"""

import json
import logging
import os
from typing import Any

CONTEXT_FIELDS = ("doc_id", "agenda_no", "sheet_row")

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def log_context(**fields: Any) -> dict[str, dict[str, Any]]:
    """
    `extra` mapping for a log call; None values are dropped.

    Returns:
        {"extra_fields": {...}}, read by both formatters
    """
    return {"extra_fields": {k: v for k, v in fields.items() if v is not None}}


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    return dict(getattr(record, "extra_fields", None) or {})


class CloudLoggingFormatter(logging.Formatter):
    """JSON formatter compatible with Cloud Logging

    `severity` maps the line to a log level. Document context is merged in
    as top-level fields.
    """

    LEVEL_TO_SEVERITY = {
        "DEBUG": "DEBUG",
        "INFO": "INFO",
        "WARNING": "WARNING",
        "ERROR": "ERROR",
        "CRITICAL": "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict = {
            "severity": self.LEVEL_TO_SEVERITY.get(record.levelname, "DEFAULT"),
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = self.formatException(record.exc_info)
        log_entry.update(_context_of(record))
        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain text line followed by the document context, if any"""

    def __init__(self) -> None:
        super().__init__(_TEXT_FORMAT, datefmt=_TEXT_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context_of(record)
        if not context:
            return line
        # Known fields first, in a fixed order
        keys = [k for k in CONTEXT_FIELDS if k in context]
        keys += sorted(k for k in context if k not in CONTEXT_FIELDS)
        suffix = " ".join(f"{k}={context[k]}" for k in keys)

        # Keep a traceback below the context
        head, sep, tail = line.partition("\n")
        return f"{head} [{suffix}]{sep}{tail}"


def _use_json() -> bool:
    log_format = os.getenv("LOG_FORMAT", "").lower()
    if log_format in ("json", "text"):
        return log_format == "json"
    return bool(os.getenv("K_SERVICE") or os.getenv("CLOUD_RUN_JOB"))


def setup_logging() -> None:
    """Initialize the root logger

    Installs a single stream handler; calling it again replaces the
    handler instead of adding another one.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(CloudLoggingFormatter() if _use_json() else ContextTextFormatter())

    root_logger.handlers.clear()
    root_logger.addHandler(handler)
