"""
JWT Auth Middleware — Parses the bearer token from the Authorization header
and blocks the request when it is missing, invalid or expired.

Every ``/api/`` path is protected except the ones in ``JWT_SKIP_PREFIXES``.
On success the decoded identity is placed on ``g``:

    g.current_user_id, g.current_username, g.current_user_role
"""

import logging

import jwt as pyjwt
from flask import g, request

from report_portal.services.jwt_service import decode_access_token
from report_portal.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# Paths that skip JWT auth entirely
JWT_SKIP_PREFIXES = (
    "/api/auth/login",
    "/api/health",
)


def _bearer_token():
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.current_user_id = None
        g.current_username = None
        g.current_user_role = None

        path = request.path
        if not path.startswith("/api/") or request.method == "OPTIONS":
            return None
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return None

        token = _bearer_token()
        if token is None:
            return api_error(E.AUTH_REQUIRED, "Access token required")

        try:
            payload = decode_access_token(token)
        except pyjwt.ExpiredSignatureError:
            logger.info("Expired token rejected on %s %s", request.method, path)
            return api_error(E.AUTH_EXPIRED, "Token expired")
        except pyjwt.InvalidTokenError as exc:
            logger.warning("Invalid token rejected on %s %s: %s", request.method, path, exc)
            return api_error(E.AUTH_INVALID, "Invalid token")

        g.current_user_id = payload["user_id"]
        g.current_username = payload.get("username")
        g.current_user_role = payload.get("role")
        return None
