"""
Report Lifecycle Service

Manages report status transitions with:
  - Transition validation against REPORT_TRANSITIONS
  - Side effects (approve → record the approver)
  - Logging of every applied transition

Actions:
  approve_internal, approve_parent, reject, mark_overdue

Usage:
    from report_portal.services.report_lifecycle import transition_report

    result = transition_report(report, "approve_internal", actor_id=3)
"""

import logging

from report_portal.core.exceptions import ValidationError
from report_portal.models.report import REPORT_TRANSITIONS, Report

logger = logging.getLogger(__name__)

# approval_type (wire value) → lifecycle action
APPROVAL_ACTIONS = {
    "internal": "approve_internal",
    "parent": "approve_parent",
    "lga": "approve_parent",
}


class TransitionError(ValidationError):
    """Raised when a report transition is not allowed from its current status."""

    def __init__(self, report_id: int | None, action: str, current: str, reason: str | None = None):
        msg = f"Cannot '{action}' report {report_id} (status={current})"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, details={"action": action, "status": current})
        self.report_id = report_id
        self.action = action
        self.current_status = current
        self.reason = reason


def validate_transition(report: Report, action: str) -> dict:
    """
    Validate whether an action is valid for the report's current status.

    Returns:
        {"valid": bool, "from": str, "to": str|None, "reason": str|None}
    """
    rule = REPORT_TRANSITIONS.get(action)
    if not rule:
        return {"valid": False, "from": report.status, "to": None,
                "reason": f"Unknown action: {action}"}

    if report.status not in rule["from"]:
        return {"valid": False, "from": report.status, "to": rule["to"],
                "reason": f"Cannot '{action}' from status '{report.status}'"}

    return {"valid": True, "from": report.status, "to": rule["to"], "reason": None}


def transition_report(report: Report, action: str, actor_id: int | None = None) -> dict:
    """
    Apply a lifecycle transition to a report (caller commits).

    Args:
        report: The report row, ideally loaded with a row lock.
        action: One of the REPORT_TRANSITIONS keys.
        actor_id: The user performing the action; recorded by approvals.

    Returns:
        {"report_id", "previous_status", "new_status", "action"}

    Raises:
        TransitionError
    """
    validation = validate_transition(report, action)
    if not validation["valid"]:
        raise TransitionError(report.id, action, report.status, validation["reason"])

    previous_status = report.status
    report.status = validation["to"]

    if action == "approve_internal":
        report.internal_approver_id = actor_id
    elif action == "approve_parent":
        report.lga_approver_id = actor_id

    logger.info(
        "Report %s: %s → %s (action=%s, actor=%s)",
        report.id, previous_status, report.status, action, actor_id,
        extra={"report_id": report.id, "user_id": actor_id},
    )
    return {
        "report_id": report.id,
        "previous_status": previous_status,
        "new_status": report.status,
        "action": action,
    }
