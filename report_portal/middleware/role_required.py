"""
Admin Decorator — route protection by the role carried in the access token.

Usage:
    @bp.route("/api/users", methods=["GET"])
    @require_admin
    def list_users():
        ...

The JWT middleware has already rejected unauthenticated requests by the time
this runs; a missing identity here is still treated as 401.
"""

import functools
import logging

from flask import g

from report_portal.models.directory import ROLE_ADMIN
from report_portal.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def require_admin(f):
    """Decorator: only callers whose token carries the admin role get through."""
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        user_id = getattr(g, "current_user_id", None)
        if user_id is None:
            return api_error(E.AUTH_REQUIRED, "Access token required")

        role = getattr(g, "current_user_role", None)
        if role != ROLE_ADMIN:
            logger.warning("User %d (role=%s) denied: %s is admin-only",
                           user_id, role, f.__name__)
            return api_error(E.FORBIDDEN, "Admin access required")

        return f(*args, **kwargs)
    return decorated
