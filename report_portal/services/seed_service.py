"""
Demo data seed — organizations, one user per role and sample reports.

Destructive: clears reports, users and organizations first.

Login credentials created:
    admin / admin123    (admin)
    john  / john123     (submitter, Health Department - Male)
    sarah / sarah123    (internal_approver, Health Department - Male)
    ahmed / ahmed123    (lga_approver, Male City Council)
"""

import logging
from datetime import date

from report_portal.models import db
from report_portal.models.directory import Organization, User
from report_portal.models.report import Report
from report_portal.utils.crypto import hash_password

logger = logging.getLogger(__name__)


DEMO_USERS = [
    # (name, email, username, password, role, organization key)
    ("Admin User", "admin@portal.gov", "admin", "admin123", "admin", None),
    ("John Submitter", "john@health.gov", "john", "john123", "submitter", "health"),
    ("Sarah Approver", "sarah@health.gov", "sarah", "sarah123", "internal_approver", "health"),
    ("Ahmed LGA", "ahmed@male.gov", "ahmed", "ahmed123", "lga_approver", "male"),
]


def clear_directory() -> None:
    """Delete every report, user and organization (children first)."""
    Report.query.delete()
    User.query.delete()
    Organization.query.update({"parent_id": None})
    Organization.query.delete()
    db.session.flush()


def seed_demo_data() -> dict:
    """Reset the directory to the demo data set. Returns row counts."""
    clear_directory()

    male = Organization(name="Male City Council", type="LGA")
    addu = Organization(name="Addu City Council", type="Atoll Council")
    db.session.add_all([male, addu])
    db.session.flush()
    health = Organization(name="Health Department - Male", type="Department", parent_id=male.id)
    education = Organization(name="Education Department - Male", type="Department", parent_id=male.id)
    db.session.add_all([health, education])
    db.session.flush()
    orgs = {"male": male, "addu": addu, "health": health, "education": education}

    users = {}
    for name, email, username, password, role, org_key in DEMO_USERS:
        user = User(
            name=name,
            email=email,
            username=username,
            password_hash=hash_password(password),
            role=role,
            organization_id=orgs[org_key].id if org_key else None,
        )
        db.session.add(user)
        users[username] = user
    db.session.flush()

    john = users["john"]
    reports = [
        Report(
            title="Monthly Health Report - September",
            content="Comprehensive health statistics for September 2025...",
            organization_id=health.id, submitter_id=john.id,
            status="pending_internal",
            due_date=date(2025, 10, 25), submitted_date=date(2025, 10, 15),
        ),
        Report(
            title="Quarterly Budget Report",
            content="Budget analysis and expenditure report for Q3 2025...",
            organization_id=health.id, submitter_id=john.id,
            status="internally_approved", internal_approver_id=users["sarah"].id,
            due_date=date(2025, 10, 30), submitted_date=date(2025, 10, 10),
        ),
        Report(
            title="Annual Performance Report",
            content="Year-end performance review and achievements...",
            organization_id=education.id, submitter_id=john.id,
            status="approved",
            internal_approver_id=users["sarah"].id, lga_approver_id=users["ahmed"].id,
            due_date=date(2025, 10, 20), submitted_date=date(2025, 10, 5),
        ),
    ]
    db.session.add_all(reports)
    db.session.commit()

    counts = {"organizations": len(orgs), "users": len(users), "reports": len(reports)}
    logger.info("Demo data seeded: %s", counts)
    return counts
