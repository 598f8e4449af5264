"""
Health check blueprint.

Endpoints:
    GET /api/health        — liveness probe, no auth
    GET /api/health/ready  — readiness probe with a database round trip
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from report_portal.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/health")


@health_bp.route("", methods=["GET"])
def health():
    """Liveness probe — always 200 if the app is running."""
    return jsonify({
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Readiness probe — 503 when the database is unreachable."""
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
    except Exception as exc:
        db.session.rollback()
        logger.error("Health check — database failed: %s", exc)
        return jsonify({"status": "error", "database": {"status": "error"}}), 503

    return jsonify({
        "status": "OK",
        "database": {"status": "ok", "latency_ms": round(db_ms, 1)},
    }), 200
