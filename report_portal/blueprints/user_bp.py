"""
User Blueprint — user directory administration. Every route is admin-only.

Routes:
  GET    /api/users                      – list (no password hashes)
  GET    /api/users/<id>                 – detail
  POST   /api/users                      – create
  PUT    /api/users/<id>                 – update profile (never the password)
  PUT    /api/users/<id>/reset-password  – replace the password
  DELETE /api/users/<id>                 – delete
"""

from flask import Blueprint, jsonify

from report_portal.blueprints import json_body, register_error_handlers
from report_portal.middleware.role_required import require_admin
from report_portal.services import user_service

user_bp = Blueprint("user_bp", __name__, url_prefix="/api/users")
register_error_handlers(user_bp)


@user_bp.route("", methods=["GET"])
@require_admin
def list_users():
    return jsonify([u.to_dict() for u in user_service.list_users()])


@user_bp.route("/<int:user_id>", methods=["GET"])
@require_admin
def get_user(user_id):
    return jsonify(user_service.get_user(user_id).to_dict())


@user_bp.route("", methods=["POST"])
@require_admin
def create_user():
    """Body: { name, email, username, password, role, organization_id }"""
    user = user_service.create_user(json_body())
    return jsonify(user.to_dict()), 201


@user_bp.route("/<int:user_id>", methods=["PUT"])
@require_admin
def update_user(user_id):
    """Body: { name, email, username, role, organization_id }. A password key is ignored."""
    user = user_service.update_user(user_id, json_body())
    return jsonify(user.to_dict())


@user_bp.route("/<int:user_id>/reset-password", methods=["PUT"])
@require_admin
def reset_password(user_id):
    """Body: { password }"""
    user_service.reset_password(user_id, json_body().get("password"))
    return jsonify({"message": "Password reset successfully"})


@user_bp.route("/<int:user_id>", methods=["DELETE"])
@require_admin
def delete_user(user_id):
    user_service.delete_user(user_id)
    return jsonify({"message": "User deleted successfully"})
