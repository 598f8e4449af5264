"""
Organization Service — CRUD for the organization directory.

Parent references are enforced by the database foreign key; a violation is
rolled back and re-raised as ValidationError so callers get a 400.
"""

import logging

from sqlalchemy.exc import IntegrityError

from report_portal.core.exceptions import NotFoundError, ValidationError
from report_portal.models import db
from report_portal.models.directory import Organization

logger = logging.getLogger(__name__)


def _text(data: dict, key: str, errors: dict) -> str:
    raw = data.get(key)
    if raw is not None and not isinstance(raw, str):
        errors[key] = "must be a string"
        return ""
    val = (raw or "").strip()
    if not val:
        errors[key] = "required"
    return val


def _clean_fields(data: dict) -> dict:
    errors = {}
    name = _text(data, "name", errors)
    org_type = _text(data, "type", errors)
    parent_id = data.get("parent_id")

    if parent_id in ("", None):
        parent_id = None
    elif isinstance(parent_id, bool):
        errors["parent_id"] = "must be an integer"
    elif not isinstance(parent_id, int):
        try:
            parent_id = int(parent_id)
        except (TypeError, ValueError):
            errors["parent_id"] = "must be an integer"
    if errors:
        raise ValidationError(
            "; ".join(f"{k} {v}" for k, v in errors.items()), details=errors
        )
    return {"name": name, "type": org_type, "parent_id": parent_id}


def _commit_or_invalid(action: str) -> None:
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.info("Organization %s rejected by constraint: %s", action, exc.orig)
        raise ValidationError(
            "parent_id does not reference an existing organization",
            details={"parent_id": "unknown organization"},
        ) from exc


def _ancestor_ids(org_id: int) -> set[int]:
    """``org_id`` and every organization above it. Unknown ids end the walk."""
    seen = set()
    current = org_id
    while current is not None and current not in seen:
        seen.add(current)
        current = db.session.execute(
            db.select(Organization.parent_id).where(Organization.id == current)
        ).scalar_one_or_none()
    return seen


def list_organizations() -> list[Organization]:
    """All organizations ordered by name."""
    return Organization.query.order_by(Organization.name, Organization.id).all()


def get_organization(org_id: int) -> Organization:
    org = db.session.get(Organization, org_id)
    if not org:
        raise NotFoundError(resource="Organization", resource_id=org_id)
    return org


def create_organization(data: dict) -> Organization:
    """Create an organization. Body keys: name, type, parent_id (optional)."""
    fields = _clean_fields(data)
    org = Organization(**fields)
    db.session.add(org)
    _commit_or_invalid("create")
    logger.info("Organization created id=%d name=%r parent=%s",
                org.id, org.name, org.parent_id)
    return org


def update_organization(org_id: int, data: dict) -> Organization:
    """Replace name, type and parent of an organization."""
    org = get_organization(org_id)
    fields = _clean_fields(data)
    if fields["parent_id"] is not None and fields["parent_id"] == org.id:
        raise ValidationError(
            "An organization cannot be its own parent",
            details={"parent_id": "self reference"},
        )
    if fields["parent_id"] is not None and org.id in _ancestor_ids(fields["parent_id"]):
        raise ValidationError(
            "An organization cannot be placed under one of its descendants",
            details={"parent_id": "cycle"},
        )

    org.name = fields["name"]
    org.type = fields["type"]
    org.parent_id = fields["parent_id"]
    _commit_or_invalid("update")
    logger.info("Organization updated id=%d", org.id)
    return org


def delete_organization(org_id: int) -> None:
    """Delete an organization.

    The database cascades the delete to the organization's reports and nulls
    the affiliation of its users and the parent of its children.
    """
    org = get_organization(org_id)
    db.session.delete(org)
    db.session.commit()
    logger.info("Organization deleted id=%d", org_id)
