"""
Rate limiting configuration.

The Limiter instance is created in report_portal/__init__.py with no default
limits; this module applies the login limit (brute-force protection) and
exempts the health probe.

Usage:
    from report_portal.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

DEFAULT_LOGIN_LIMIT = "10/minute"


def init_rate_limits(app, limiter):
    """
    Apply rate limits after blueprints are registered.

    Limits (per remote IP):
        - POST /api/auth/login:  LOGIN_RATE_LIMIT (default 10/minute)
        - Health check:          exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING") or not app.config.get("RATELIMIT_ENABLED", True):
        app.logger.info("Rate limiter disabled")
        return

    login_limit = app.config.get("LOGIN_RATE_LIMIT", DEFAULT_LOGIN_LIMIT)
    login_view = app.view_functions.get("auth_bp.login")
    if login_view is not None:
        app.view_functions["auth_bp.login"] = limiter.limit(login_limit)(login_view)

    bp = app.blueprints.get("health_bp")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured — login: %s", login_limit)
