"""
Report Portal — ORM models.

``db`` is the single Flask-SQLAlchemy handle; it is bound to an application
by ``create_app`` and never creates an engine on its own.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

from report_portal.models.directory import ROLES, Organization, User  # noqa: E402
from report_portal.models.report import (  # noqa: E402
    REPORT_STATUSES,
    REPORT_TRANSITIONS,
    Report,
)

__all__ = [
    "db",
    "ROLES",
    "Organization",
    "User",
    "REPORT_STATUSES",
    "REPORT_TRANSITIONS",
    "Report",
]
