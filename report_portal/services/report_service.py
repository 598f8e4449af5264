"""
Report Service — submission, role-scoped reads, approval and deletion.

Visibility rules (applied to every read):
  admin              → all reports
  submitter          → reports they submitted
  internal_approver  → reports of their own organization
  lga_approver       → reports of organizations whose parent is theirs

Service layer owns all commits; blueprints never touch db.session.
"""

import logging
from datetime import date, datetime

from sqlalchemy import false, select, true

from report_portal.core.exceptions import NotFoundError, ValidationError
from report_portal.models import db
from report_portal.models.directory import (
    ROLE_ADMIN,
    ROLE_INTERNAL_APPROVER,
    ROLE_LGA_APPROVER,
    ROLE_SUBMITTER,
    Organization,
    User,
)
from report_portal.models.report import REPORT_STATUSES, STATUS_PENDING_INTERNAL, Report
from report_portal.services.report_lifecycle import APPROVAL_ACTIONS, transition_report

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════
# Visibility
# ═══════════════════════════════════════════════════════════════
def visibility_filter(role: str, user_id: int):
    """SQL criterion selecting the reports visible to a caller.

    The caller's organization is resolved inside the query, so the filter
    always reflects the current affiliation rather than the one at login.
    """
    if role == ROLE_ADMIN:
        return true()
    if role == ROLE_SUBMITTER:
        return Report.submitter_id == user_id

    caller_org = select(User.organization_id).where(User.id == user_id).scalar_subquery()
    if role == ROLE_INTERNAL_APPROVER:
        return Report.organization_id == caller_org
    if role == ROLE_LGA_APPROVER:
        child_orgs = select(Organization.id).where(Organization.parent_id == caller_org)
        return Report.organization_id.in_(child_orgs)
    return false()


def list_reports(role: str, user_id: int, status: str | None = None) -> list[Report]:
    """Reports visible to the caller, newest submission first."""
    if status is not None and status not in REPORT_STATUSES:
        raise ValidationError(
            f"status must be one of {list(REPORT_STATUSES)}", details={"status": status}
        )

    q = Report.query.filter(visibility_filter(role, user_id))
    if status is not None:
        q = q.filter(Report.status == status)
    return q.order_by(Report.submitted_date.desc(), Report.id.desc()).all()


def get_report(role: str, user_id: int, report_id: int) -> Report:
    """A single report, or NotFoundError when absent or outside the caller's scope."""
    report = Report.query.filter(
        Report.id == report_id, visibility_filter(role, user_id)
    ).first()
    if not report:
        raise NotFoundError(resource="Report", resource_id=report_id)
    return report


# ═══════════════════════════════════════════════════════════════
# Submission
# ═══════════════════════════════════════════════════════════════
def _parse_due_date(value) -> date:
    """Accept an ISO date or a full ISO datetime (trailing ``Z`` allowed)."""
    if not value:
        raise ValidationError("due_date is required", details={"due_date": "required"})
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise ValidationError(
        "due_date must be an ISO date (YYYY-MM-DD)", details={"due_date": str(value)}
    )


def submit_report(user_id: int, data: dict) -> Report:
    """Create a report in pending_internal for the submitting user.

    The submitter's organization is read under a shared row lock and the
    report inserted in the same transaction, so a concurrent change of
    affiliation cannot produce a report filed under a stale organization.
    """
    raw_title = data.get("title")
    title = raw_title.strip() if isinstance(raw_title, str) else ""
    if not title:
        raise ValidationError("title is required", details={"title": "required"})
    content = data.get("content")
    if content is not None and not isinstance(content, str):
        raise ValidationError("content must be a string", details={"content": "must be a string"})
    due_date = _parse_due_date(data.get("due_date"))

    submitter = db.session.execute(
        select(User).where(User.id == user_id).with_for_update(read=True)
    ).scalar_one_or_none()
    if submitter is None or submitter.organization_id is None:
        db.session.rollback()
        raise ValidationError("User organization not found")

    report = Report(
        title=title,
        content=content,
        organization_id=submitter.organization_id,
        submitter_id=submitter.id,
        status=STATUS_PENDING_INTERNAL,
        due_date=due_date,
        submitted_date=date.today(),
    )
    db.session.add(report)
    db.session.commit()
    logger.info("Report submitted id=%d org=%d submitter=%d due=%s",
                report.id, report.organization_id, report.submitter_id, report.due_date,
                extra={"report_id": report.id, "user_id": user_id})
    return report


# ═══════════════════════════════════════════════════════════════
# Transitions
# ═══════════════════════════════════════════════════════════════
def _locked_report(report_id: int) -> Report:
    report = db.session.execute(
        select(Report).where(Report.id == report_id).with_for_update()
    ).scalar_one_or_none()
    if report is None:
        raise NotFoundError(resource="Report", resource_id=report_id)
    return report


def approve_report(report_id: int, approval_type, actor_id: int) -> Report:
    """Approve a report at the internal or parent-organization stage."""
    action = APPROVAL_ACTIONS.get(approval_type) if isinstance(approval_type, str) else None
    if action is None:
        raise ValidationError(
            "Invalid approval type", details={"approval_type": "must be 'internal' or 'parent'"}
        )

    report = _locked_report(report_id)
    try:
        transition_report(report, action, actor_id=actor_id)
    except ValidationError:
        db.session.rollback()
        raise
    db.session.commit()
    return report


def reject_report(report_id: int, actor_id: int) -> Report:
    """Reject a report. Rejecting an already rejected report is a no-op."""
    report = _locked_report(report_id)
    try:
        transition_report(report, "reject", actor_id=actor_id)
    except ValidationError:
        db.session.rollback()
        raise
    db.session.commit()
    return report


def delete_report(report_id: int) -> None:
    report = db.session.get(Report, report_id)
    if not report:
        raise NotFoundError(resource="Report", resource_id=report_id)
    db.session.delete(report)
    db.session.commit()
    logger.info("Report deleted id=%d", report_id, extra={"report_id": report_id})
