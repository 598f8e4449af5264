"""
Logging setup for the portal.

Every record leaving the root handler passes through ``RequestContextFilter``,
which stamps it with the request id and the authenticated user taken from
``g``. Services therefore log plain messages and only pass ``extra=`` for
report-specific context (``report_id``) or when the actor differs from the
caller.

Output format:
    LOG_FORMAT=json   one JSON object per line (default in production)
    LOG_FORMAT=text   single-line text (default in development / testing)
Level: LOG_LEVEL (default INFO in production, DEBUG otherwise).
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

from flask import g, has_request_context, request

# Context keys emitted after the message when present on the record
CONTEXT_FIELDS = (
    "request_id",
    "user_id",
    "report_id",
    "method",
    "path",
    "status",
    "duration_ms",
)

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [req=%(request_id)s user=%(user_id)s] %(message)s"


class RequestContextFilter(logging.Filter):
    """Attach request id, user id, method and path from the active request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            defaults = {
                "request_id": getattr(g, "request_id", None),
                "user_id": getattr(g, "current_user_id", None),
                "method": request.method,
                "path": request.path,
            }
        else:
            defaults = {"request_id": None, "user_id": None}
        for key, value in defaults.items():
            if getattr(record, key, None) is None:
                setattr(record, key, value)
        return True


class PortalJSONFormatter(logging.Formatter):
    """One JSON object per record; context keys are included when set."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def build_handler(fmt: str, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(RequestContextFilter())
    if fmt == "json":
        handler.setFormatter(PortalJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler.setLevel(level)
    return handler


def configure_logging(app):
    """Install the portal handler on the root logger (replacing earlier ones)."""
    is_prod = not app.config.get("DEBUG", False) and not app.config.get("TESTING", False)

    fmt = os.getenv("LOG_FORMAT", "json" if is_prod else "text").lower()
    level_name = os.getenv("LOG_LEVEL", "INFO" if is_prod else "DEBUG").upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(build_handler(fmt, level))
    root.setLevel(level)

    for noisy in ("werkzeug", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    app.logger.info("Logging configured: level=%s format=%s", level_name, fmt)
