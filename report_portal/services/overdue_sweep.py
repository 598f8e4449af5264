"""
Overdue Sweep — moves reports that missed their due date to ``overdue``.

Only reports still waiting for the internal approval stage are swept; a
report already internally approved is waiting on the parent organization,
not on its submitter.

Run from cron:
    flask --app wsgi sweep-overdue
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select

from report_portal.models import db
from report_portal.models.report import STATUS_PENDING_INTERNAL, Report
from report_portal.services.report_lifecycle import transition_report

logger = logging.getLogger(__name__)


def sweep_overdue(today: date | None = None) -> int:
    """Mark every pending_internal report due before ``today`` as overdue.

    Returns the number of reports changed. All changes commit together.
    """
    today = today or date.today()
    overdue = db.session.execute(
        select(Report)
        .where(Report.status == STATUS_PENDING_INTERNAL, Report.due_date < today)
        .with_for_update(skip_locked=True)
    ).scalars().all()

    for report in overdue:
        transition_report(report, "mark_overdue")

    db.session.commit()
    logger.info("Overdue sweep (today=%s): %d report(s) marked overdue", today, len(overdue))
    return len(overdue)
