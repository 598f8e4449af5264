"""
Directory Models — organizations and the users affiliated with them.

Organizations form a shallow tree through ``parent_id`` (council →
department). Users carry exactly one role from ``ROLES`` and an optional
organization affiliation.
"""

from datetime import datetime, timezone

from report_portal.models import db


# Wire values for User.role
ROLE_ADMIN = "admin"
ROLE_SUBMITTER = "submitter"
ROLE_INTERNAL_APPROVER = "internal_approver"
ROLE_LGA_APPROVER = "lga_approver"

ROLES = (ROLE_ADMIN, ROLE_SUBMITTER, ROLE_INTERNAL_APPROVER, ROLE_LGA_APPROVER)


def _utcnow():
    return datetime.now(timezone.utc)


def _in_list(column, values):
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


# ═══════════════════════════════════════════════════════════════
# 1. ORGANIZATIONS
# ═══════════════════════════════════════════════════════════════
class Organization(db.Model):
    __tablename__ = "organizations"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(100), nullable=False)  # LGA, Atoll Council, Department, ...
    parent_id = db.Column(
        db.Integer, db.ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True
    )
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        db.Index("ix_organizations_parent_id", "parent_id"),
    )

    # Relationships
    parent = db.relationship("Organization", remote_side=[id], back_populates="children")
    children = db.relationship(
        "Organization", back_populates="parent", passive_deletes=True,
    )
    users = db.relationship("User", back_populates="organization", passive_deletes=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "parent_id": self.parent_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


# ═══════════════════════════════════════════════════════════════
# 2. USERS
# ═══════════════════════════════════════════════════════════════
class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    username = db.Column(db.String(100), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), nullable=False)
    organization_id = db.Column(
        db.Integer, db.ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True
    )
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        db.CheckConstraint(_in_list("role", ROLES), name="ck_users_role"),
        db.Index("ix_users_organization_id", "organization_id"),
    )

    # Relationships
    organization = db.relationship("Organization", back_populates="users")

    def to_dict(self):
        """Public profile. The password hash is never serialised."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "username": self.username,
            "role": self.role,
            "organization_id": self.organization_id,
        }
