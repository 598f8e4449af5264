"""
Report model and its lifecycle transition table.

Lifecycle:
    pending_internal → internally_approved → approved
    pending_internal → overdue (due-date sweep) → internally_approved
    any active state → rejected
"""

from datetime import date, datetime, timezone

from report_portal.models import db
from report_portal.models.directory import _in_list

STATUS_PENDING_INTERNAL = "pending_internal"
STATUS_INTERNALLY_APPROVED = "internally_approved"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
STATUS_OVERDUE = "overdue"

REPORT_STATUSES = (
    STATUS_PENDING_INTERNAL,
    STATUS_INTERNALLY_APPROVED,
    STATUS_APPROVED,
    STATUS_REJECTED,
    STATUS_OVERDUE,
)

# action → allowed source states and target state
REPORT_TRANSITIONS = {
    "approve_internal": {
        "from": [STATUS_PENDING_INTERNAL, STATUS_OVERDUE],
        "to": STATUS_INTERNALLY_APPROVED,
    },
    "approve_parent": {
        "from": [STATUS_INTERNALLY_APPROVED],
        "to": STATUS_APPROVED,
    },
    # rejected → rejected keeps repeated rejection idempotent
    "reject": {
        "from": [
            STATUS_PENDING_INTERNAL,
            STATUS_INTERNALLY_APPROVED,
            STATUS_OVERDUE,
            STATUS_REJECTED,
        ],
        "to": STATUS_REJECTED,
    },
    "mark_overdue": {
        "from": [STATUS_PENDING_INTERNAL],
        "to": STATUS_OVERDUE,
    },
}


def _utcnow():
    return datetime.now(timezone.utc)


class Report(db.Model):
    __tablename__ = "reports"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(500), nullable=False)
    content = db.Column(db.Text)
    organization_id = db.Column(
        db.Integer, db.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True
    )
    submitter_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    status = db.Column(db.String(50), nullable=False, default=STATUS_PENDING_INTERNAL)
    due_date = db.Column(db.Date, nullable=False)
    submitted_date = db.Column(db.Date, nullable=False, default=date.today)
    internal_approver_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    lga_approver_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        db.CheckConstraint(_in_list("status", REPORT_STATUSES), name="ck_reports_status"),
        db.Index("ix_reports_organization_id", "organization_id"),
        db.Index("ix_reports_submitter_id", "submitter_id"),
        db.Index("ix_reports_status_due_date", "status", "due_date"),
    )

    # Relationships
    organization = db.relationship("Organization")
    submitter = db.relationship("User", foreign_keys=[submitter_id])

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "organization_id": self.organization_id,
            "submitter_id": self.submitter_id,
            "status": self.status,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "submitted_date": self.submitted_date.isoformat() if self.submitted_date else None,
            "internal_approver_id": self.internal_approver_id,
            "lga_approver_id": self.lga_approver_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
