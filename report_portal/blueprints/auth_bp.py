"""
Auth Blueprint — JWT authentication endpoints.

  POST /api/auth/login   — username + password → access token + profile
  GET  /api/auth/me      — current user profile
"""

from flask import Blueprint, jsonify

from report_portal.blueprints import current_user_id, json_body, register_error_handlers
from report_portal.core.exceptions import AuthenticationError
from report_portal.services.jwt_service import issue_login_token
from report_portal.services.user_service import authenticate_user, get_user_by_id
from report_portal.utils.errors import E, api_error

auth_bp = Blueprint("auth_bp", __name__, url_prefix="/api/auth")
register_error_handlers(auth_bp)


# ═══════════════════════════════════════════════════════════════
# POST /api/auth/login
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate with username + password, return a 24h access token.

    Body: { "username": "...", "password": "..." }
    """
    data = json_body()
    username = data.get("username")
    password = data.get("password")

    if not isinstance(username, str) or not isinstance(password, str) \
            or not username.strip() or not password:
        return api_error(E.VALIDATION_REQUIRED, "Username and password are required")

    user = authenticate_user(username.strip(), password)
    tokens = issue_login_token(user)

    return jsonify({
        **tokens,
        "user": user.to_dict(),
    }), 200


# ═══════════════════════════════════════════════════════════════
# GET /api/auth/me
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/me", methods=["GET"])
def me():
    """Return the authenticated user's profile."""
    user = get_user_by_id(current_user_id())
    if not user:
        raise AuthenticationError("User no longer exists")
    return jsonify(user.to_dict()), 200
