"""
Report Portal
Blueprint registry and shared error handling.
"""

import logging

from flask import g, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from report_portal.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from report_portal.models import db
from report_portal.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def current_user_id():
    """Authenticated user id placed on ``g`` by the JWT middleware."""
    return getattr(g, "current_user_id", None)


def current_user_role():
    return getattr(g, "current_user_role", None)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_error_handlers(bp):
    """Map service-layer exceptions to JSON responses for a blueprint."""

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_error(E.NOT_FOUND, f"{error.resource} not found")

    @bp.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        return api_error(
            E.CONFLICT_DUPLICATE,
            f"{error.field.capitalize()} already exists",
            details={error.field: error.value},
        )

    @bp.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @bp.errorhandler(AuthenticationError)
    def _handle_auth(error: AuthenticationError):
        return api_error(E.AUTH_FAILED, str(error))

    @bp.errorhandler(IntegrityError)
    def _handle_integrity(error: IntegrityError):
        db.session.rollback()
        logger.info("Constraint violation on %s: %s", request.endpoint, error.orig)
        return api_error(E.VALIDATION_CONSTRAINT, "Request violates a data constraint")

    @bp.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return error
        db.session.rollback()
        logger.exception("Unexpected error in %s endpoint=%s", bp.name, request.endpoint)
        return api_error(E.INTERNAL, "Server error")

    return bp
