"""
Shared pytest fixtures for the Report Portal test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - directory: The demo organizations and one user per role
    - auth_headers: Builds an Authorization header for a user
"""

import os

# Cheap bcrypt cost for the suite; must be set before report_portal imports
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402

from report_portal import create_app  # noqa: E402
from report_portal.models import db as _db  # noqa: E402
from report_portal.models.directory import Organization, User  # noqa: E402
from report_portal.services.jwt_service import generate_access_token  # noqa: E402
from report_portal.utils.crypto import hash_password  # noqa: E402


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Directory fixtures ───────────────────────────────────────────────────


def make_user(username, role, organization_id=None, password=None, name=None):
    """Insert a user row directly (bypasses the API)."""
    user = User(
        name=name or username.title(),
        email=f"{username}@portal.gov",
        username=username,
        password_hash=hash_password(password or f"{username}123"),
        role=role,
        organization_id=organization_id,
    )
    _db.session.add(user)
    _db.session.commit()
    return user


@pytest.fixture()
def directory():
    """Demo hierarchy:

        Male City Council (LGA)            ← ahmed (lga_approver)
          ├─ Health Department - Male      ← john (submitter), sarah (internal_approver)
          └─ Education Department - Male   ← mary (submitter), omar (internal_approver)
        Addu City Council (Atoll Council)  ← hassan (lga_approver)
          └─ Addu Hospital                 ← aisha (submitter)
        admin (no organization)
    """
    male = Organization(name="Male City Council", type="LGA")
    addu = Organization(name="Addu City Council", type="Atoll Council")
    _db.session.add_all([male, addu])
    _db.session.flush()
    health = Organization(name="Health Department - Male", type="Department", parent_id=male.id)
    education = Organization(name="Education Department - Male", type="Department", parent_id=male.id)
    hospital = Organization(name="Addu Hospital", type="Department", parent_id=addu.id)
    _db.session.add_all([health, education, hospital])
    _db.session.commit()

    users = {
        "admin": make_user("admin", "admin"),
        "john": make_user("john", "submitter", health.id),
        "sarah": make_user("sarah", "internal_approver", health.id),
        "ahmed": make_user("ahmed", "lga_approver", male.id),
        "mary": make_user("mary", "submitter", education.id),
        "omar": make_user("omar", "internal_approver", education.id),
        "hassan": make_user("hassan", "lga_approver", addu.id),
        "aisha": make_user("aisha", "submitter", hospital.id),
    }
    orgs = {
        "male": male, "addu": addu,
        "health": health, "education": education, "hospital": hospital,
    }
    return {"orgs": orgs, "users": users}


@pytest.fixture()
def auth_headers():
    """Return a function building bearer headers for a User row."""
    def _headers(user):
        token = generate_access_token(user.id, user.username, user.role)
        return {"Authorization": f"Bearer {token}"}
    return _headers
