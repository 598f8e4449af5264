"""
Report Portal
Flask Application Factory.

Usage:
    from report_portal import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

from report_portal.config import config
from report_portal.models import db
from report_portal.middleware.logging_config import configure_logging
from report_portal.middleware.timing import init_request_timing
from report_portal.middleware.security_headers import init_security_headers
from report_portal.middleware.rate_limiter import init_rate_limits
from report_portal.middleware.jwt_auth import init_jwt_middleware
from report_portal.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import event as _sa_event, engine as _sa_engine


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit — login only
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiated so ProductionConfig can refuse missing secrets
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Security headers & request timing ────────────────────────────────
    init_security_headers(app)
    init_request_timing(app)

    # ── JWT auth gate (blocks unauthenticated /api/ requests) ────────────
    init_jwt_middleware(app)

    # ── Auto-create tables outside of production (migrations own prod) ───
    if config_name != "production":
        with app.app_context():
            try:
                db.create_all()
                app.logger.info("db.create_all() completed successfully")
            except Exception as e:
                app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from report_portal.blueprints.auth_bp import auth_bp
    from report_portal.blueprints.health_bp import health_bp
    from report_portal.blueprints.organization_bp import organization_bp
    from report_portal.blueprints.report_bp import report_bp
    from report_portal.blueprints.user_bp import user_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(organization_bp)
    app.register_blueprint(user_bp)
    app.register_blueprint(report_bp)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("sweep-overdue")
    def sweep_overdue_cmd():
        """Mark pending reports past their due date as overdue."""
        from report_portal.services.overdue_sweep import sweep_overdue
        count = sweep_overdue()
        logger.info("Marked %s report(s) overdue.", count)

    @app.cli.command("seed-demo")
    def seed_demo_cmd():
        """Reset organizations, users and reports to the demo data set."""
        from report_portal.services.seed_service import seed_demo_data
        counts = seed_demo_data()
        logger.info("Seeded demo data: %s", counts)

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return {"error": "Not found", "code": E.NOT_FOUND, "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(429)
    def rate_limited(e):
        return {"error": "Too many requests", "retry_after": e.description}, 429

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Server error")

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
