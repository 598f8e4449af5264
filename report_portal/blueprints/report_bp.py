"""
Report Blueprint — submission, role-scoped listing and the approval chain.

Routes:
  GET    /api/reports                 – reports visible to the caller (?status=)
  GET    /api/reports/<id>            – one visible report
  POST   /api/reports                 – submit a report
  PUT    /api/reports/<id>/approve    – approve; body: { approval_type: internal|parent }
  PUT    /api/reports/<id>/reject     – reject
  DELETE /api/reports/<id>            – delete (admin)
"""

from flask import Blueprint, jsonify, request

from report_portal.blueprints import (
    current_user_id,
    current_user_role,
    json_body,
    register_error_handlers,
)
from report_portal.middleware.role_required import require_admin
from report_portal.services import report_service

report_bp = Blueprint("report_bp", __name__, url_prefix="/api/reports")
register_error_handlers(report_bp)


@report_bp.route("", methods=["GET"])
def list_reports():
    reports = report_service.list_reports(
        current_user_role(), current_user_id(), status=request.args.get("status") or None,
    )
    return jsonify([r.to_dict() for r in reports])


@report_bp.route("/<int:report_id>", methods=["GET"])
def get_report(report_id):
    report = report_service.get_report(current_user_role(), current_user_id(), report_id)
    return jsonify(report.to_dict())


@report_bp.route("", methods=["POST"])
def submit_report():
    """Body: { title, content, due_date (YYYY-MM-DD) }"""
    report = report_service.submit_report(current_user_id(), json_body())
    return jsonify(report.to_dict()), 201


@report_bp.route("/<int:report_id>/approve", methods=["PUT"])
def approve_report(report_id):
    report = report_service.approve_report(
        report_id, json_body().get("approval_type"), current_user_id(),
    )
    return jsonify(report.to_dict())


@report_bp.route("/<int:report_id>/reject", methods=["PUT"])
def reject_report(report_id):
    report = report_service.reject_report(report_id, current_user_id())
    return jsonify(report.to_dict())


@report_bp.route("/<int:report_id>", methods=["DELETE"])
@require_admin
def delete_report(report_id):
    report_service.delete_report(report_id)
    return jsonify({"message": "Report deleted successfully"})
