"""
Organization Blueprint — organization directory.

Routes:
  GET    /api/organizations          – list (ordered by name)
  GET    /api/organizations/<id>     – detail
  POST   /api/organizations          – create (admin)
  PUT    /api/organizations/<id>     – update (admin)
  DELETE /api/organizations/<id>     – delete (admin)
"""

from flask import Blueprint, jsonify

from report_portal.blueprints import json_body, register_error_handlers
from report_portal.middleware.role_required import require_admin
from report_portal.services import organization_service

organization_bp = Blueprint("organization_bp", __name__, url_prefix="/api/organizations")
register_error_handlers(organization_bp)


@organization_bp.route("", methods=["GET"])
def list_organizations():
    orgs = organization_service.list_organizations()
    return jsonify([o.to_dict() for o in orgs])


@organization_bp.route("/<int:org_id>", methods=["GET"])
def get_organization(org_id):
    return jsonify(organization_service.get_organization(org_id).to_dict())


@organization_bp.route("", methods=["POST"])
@require_admin
def create_organization():
    """Body: { name, type, parent_id }"""
    org = organization_service.create_organization(json_body())
    return jsonify(org.to_dict()), 201


@organization_bp.route("/<int:org_id>", methods=["PUT"])
@require_admin
def update_organization(org_id):
    org = organization_service.update_organization(org_id, json_body())
    return jsonify(org.to_dict())


@organization_bp.route("/<int:org_id>", methods=["DELETE"])
@require_admin
def delete_organization(org_id):
    organization_service.delete_organization(org_id)
    return jsonify({"message": "Organization deleted successfully"})
