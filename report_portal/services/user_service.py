"""
User Service — CRUD operations, credential reset and authentication.
"""

import logging

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError

from report_portal.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from report_portal.models import db
from report_portal.models.directory import ROLES, User
from report_portal.utils.crypto import hash_password, verify_password

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("name", "email", "username", "role", "organization_id")


# ═══════════════════════════════════════════════════════════════
# Validation helpers
# ═══════════════════════════════════════════════════════════════
def _normalize_email(email: str) -> str:
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": str(e)})


def _clean_profile(data: dict) -> dict:
    """Validate the profile fields shared by create and update."""
    errors = {}
    cleaned = {}
    for key in ("name", "email", "username"):
        raw = data.get(key)
        val = raw.strip() if isinstance(raw, str) else ""
        if not val:
            errors[key] = "required"
        cleaned[key] = val

    role = data.get("role")
    if role not in ROLES:
        errors["role"] = f"must be one of {list(ROLES)}"
    cleaned["role"] = role

    org_id = data.get("organization_id")
    if org_id in ("", None):
        org_id = None
    else:
        try:
            org_id = int(org_id)
        except (TypeError, ValueError):
            errors["organization_id"] = "must be an integer"
    cleaned["organization_id"] = org_id

    if errors:
        raise ValidationError(
            "; ".join(f"{k} {v}" for k, v in errors.items()), details=errors
        )

    cleaned["email"] = _normalize_email(cleaned["email"])
    return cleaned


def _clean_password(password) -> str:
    if not isinstance(password, str) or not password:
        raise ValidationError(
            "password is required and must be a string", details={"password": "required"}
        )
    return password


def _ensure_unique(username: str, email: str, exclude_id: int | None = None) -> None:
    q = User.query.filter(User.username == username)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    if q.first():
        raise ConflictError(resource="User", field="username", value=username)

    q = User.query.filter(User.email == email)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    if q.first():
        raise ConflictError(resource="User", field="email", value=email)


def _commit_or_invalid(action: str) -> None:
    """Commit; a constraint failure (unknown organization, race on a unique
    column) becomes a ValidationError after rollback."""
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.info("User %s rejected by constraint: %s", action, exc.orig)
        raise ValidationError(
            "User violates a database constraint (unknown organization or duplicate value)"
        ) from exc


# ═══════════════════════════════════════════════════════════════
# User CRUD
# ═══════════════════════════════════════════════════════════════
def list_users() -> list[User]:
    """All users ordered by name."""
    return User.query.order_by(User.name, User.id).all()


def get_user_by_id(user_id: int) -> User | None:
    """Find a user by ID."""
    return db.session.get(User, user_id)


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError(resource="User", resource_id=user_id)
    return user


def create_user(data: dict) -> User:
    """Create a user.

    Body keys: name, email, username, password, role, organization_id.
    Username and email uniqueness is checked before the insert.
    """
    fields = _clean_profile(data)
    password = _clean_password(data.get("password"))

    _ensure_unique(fields["username"], fields["email"])

    user = User(password_hash=hash_password(password), **fields)
    db.session.add(user)
    _commit_or_invalid("create")
    logger.info("User created id=%d username=%s role=%s org=%s",
                user.id, user.username, user.role, user.organization_id)
    return user


def update_user(user_id: int, data: dict) -> User:
    """Replace a user's profile fields. The credential is never touched here."""
    user = get_user(user_id)
    fields = _clean_profile(data)
    _ensure_unique(fields["username"], fields["email"], exclude_id=user.id)

    for key in _PROFILE_FIELDS:
        setattr(user, key, fields[key])
    _commit_or_invalid("update")
    logger.info("User updated id=%d", user.id)
    return user


def reset_password(user_id: int, password: str) -> User:
    """Re-hash and replace a user's credential."""
    user = get_user(user_id)
    user.password_hash = hash_password(_clean_password(password))
    db.session.commit()
    logger.info("Password reset for user id=%d", user.id)
    return user


def delete_user(user_id: int) -> None:
    """Delete a user; their submitted reports go with them."""
    user = get_user(user_id)
    db.session.delete(user)
    db.session.commit()
    logger.info("User deleted id=%d", user_id)


# ═══════════════════════════════════════════════════════════════
# Authentication
# ═══════════════════════════════════════════════════════════════
def authenticate_user(username: str, password: str) -> User:
    """Return the user for a username/password pair.

    Raises AuthenticationError with the same message whether the username is
    unknown or the password is wrong.
    """
    user = User.query.filter_by(username=username).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Login failed for username=%r", username)
        raise AuthenticationError()
    logger.info("Login succeeded for user id=%d", user.id)
    return user
