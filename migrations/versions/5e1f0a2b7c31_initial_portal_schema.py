"""initial_portal_schema

Create `organizations`, `users` and `reports` with role/status CHECK
constraints and the FK delete rules of the directory.

Revision ID: 5e1f0a2b7c31
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "5e1f0a2b7c31"
down_revision = None
branch_labels = None
depends_on = None

ROLES = ("admin", "submitter", "internal_approver", "lga_approver")
STATUSES = ("pending_internal", "internally_approved", "approved", "rejected", "overdue")


def _in_list(column, values):
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    if "organizations" not in existing_tables:
        op.create_table(
            "organizations",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("type", sa.String(length=100), nullable=False),
            sa.Column("parent_id", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["parent_id"], ["organizations.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_organizations_parent_id", "organizations", ["parent_id"])

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("username", sa.String(length=100), nullable=False),
            sa.Column("password_hash", sa.String(length=255), nullable=False),
            sa.Column("role", sa.String(length=50), nullable=False),
            sa.Column("organization_id", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.CheckConstraint(_in_list("role", ROLES), name="ck_users_role"),
            sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("email"),
            sa.UniqueConstraint("username"),
        )
        op.create_index("ix_users_organization_id", "users", ["organization_id"])

    if "reports" not in existing_tables:
        op.create_table(
            "reports",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("title", sa.String(length=500), nullable=False),
            sa.Column("content", sa.Text(), nullable=True),
            sa.Column("organization_id", sa.Integer(), nullable=True),
            sa.Column("submitter_id", sa.Integer(), nullable=True),
            sa.Column("status", sa.String(length=50), nullable=False),
            sa.Column("due_date", sa.Date(), nullable=False),
            sa.Column("submitted_date", sa.Date(), nullable=False),
            sa.Column("internal_approver_id", sa.Integer(), nullable=True),
            sa.Column("lga_approver_id", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.CheckConstraint(_in_list("status", STATUSES), name="ck_reports_status"),
            sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["submitter_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["internal_approver_id"], ["users.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["lga_approver_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_reports_organization_id", "reports", ["organization_id"])
        op.create_index("ix_reports_submitter_id", "reports", ["submitter_id"])
        op.create_index("ix_reports_status_due_date", "reports", ["status", "due_date"])


def downgrade():
    op.drop_table("reports")
    op.drop_table("users")
    op.drop_table("organizations")
