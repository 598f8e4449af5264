"""
Directory API Tests — organizations and users.

Tests cover:
  - Organizations: list order, detail, create / update / delete (admin)
  - Parent references: unknown parent, self parent
  - Delete rules: reports cascade, users and children are detached
  - Users: CRUD (admin), uniqueness, role / email validation
  - Profile updates never touch the credential
"""

import pytest

from report_portal.models import db
from report_portal.models.directory import Organization, User
from report_portal.models.report import Report


@pytest.fixture()
def admin(directory, auth_headers):
    return auth_headers(directory["users"]["admin"])


def _user_body(**overrides):
    body = {
        "name": "Mariyam Submitter",
        "email": "mariyam@health.gov",
        "username": "mariyam",
        "password": "mariyam123",
        "role": "submitter",
        "organization_id": None,
    }
    body.update(overrides)
    return body


# ═══════════════════════════════════════════════════════════════
# BLOCK 1: Organizations
# ═══════════════════════════════════════════════════════════════

class TestOrganizations:
    def test_list_ordered_by_name(self, client, directory, auth_headers):
        res = client.get("/api/organizations", headers=auth_headers(directory["users"]["john"]))
        assert res.status_code == 200
        names = [o["name"] for o in res.get_json()]
        assert names == sorted(names)
        assert len(names) == 5

    def test_get_one(self, client, directory, auth_headers):
        health = directory["orgs"]["health"]
        res = client.get(f"/api/organizations/{health.id}",
                         headers=auth_headers(directory["users"]["john"]))
        assert res.status_code == 200
        data = res.get_json()
        assert data["name"] == "Health Department - Male"
        assert data["parent_id"] == directory["orgs"]["male"].id

    def test_get_unknown(self, client, admin):
        assert client.get("/api/organizations/9999", headers=admin).status_code == 404

    def test_create(self, client, directory, admin):
        res = client.post("/api/organizations", headers=admin, json={
            "name": "Addu Schools", "type": "Department",
            "parent_id": directory["orgs"]["addu"].id,
        })
        assert res.status_code == 201
        data = res.get_json()
        assert data["id"]
        assert data["parent_id"] == directory["orgs"]["addu"].id

    def test_create_root(self, client, admin):
        res = client.post("/api/organizations", headers=admin,
                          json={"name": "Fuvahmulah City Council", "type": "LGA"})
        assert res.status_code == 201
        assert res.get_json()["parent_id"] is None

    def test_create_missing_fields(self, client, admin):
        res = client.post("/api/organizations", headers=admin, json={"name": "No type"})
        assert res.status_code == 400
        assert "type" in res.get_json()["details"]

    @pytest.mark.parametrize("body", [
        {"name": 123, "type": "LGA"},
        {"name": "Council", "type": ["LGA"]},
        {"name": {"en": "Council"}, "type": "LGA"},
    ])
    def test_create_non_string_fields(self, client, admin, body):
        res = client.post("/api/organizations", headers=admin, json=body)
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"

    def test_create_unknown_parent(self, client, admin):
        res = client.post("/api/organizations", headers=admin,
                          json={"name": "Orphan", "type": "Department", "parent_id": 9999})
        assert res.status_code == 400
        assert Organization.query.filter_by(name="Orphan").count() == 0

    def test_create_requires_admin(self, client, directory, auth_headers):
        res = client.post("/api/organizations", headers=auth_headers(directory["users"]["ahmed"]),
                          json={"name": "X", "type": "Department"})
        assert res.status_code == 403

    def test_update(self, client, directory, admin):
        edu = directory["orgs"]["education"]
        res = client.put(f"/api/organizations/{edu.id}", headers=admin, json={
            "name": "Education Department - Addu", "type": "Department",
            "parent_id": directory["orgs"]["addu"].id,
        })
        assert res.status_code == 200
        assert res.get_json()["parent_id"] == directory["orgs"]["addu"].id

    def test_update_self_parent(self, client, directory, admin):
        edu = directory["orgs"]["education"]
        res = client.put(f"/api/organizations/{edu.id}", headers=admin,
                         json={"name": edu.name, "type": edu.type, "parent_id": edu.id})
        assert res.status_code == 400

    def test_update_parent_cycle(self, client, directory, admin):
        male = directory["orgs"]["male"]
        health_id = directory["orgs"]["health"].id
        res = client.put(f"/api/organizations/{male.id}", headers=admin,
                         json={"name": male.name, "type": male.type, "parent_id": health_id})
        assert res.status_code == 400
        assert res.get_json()["details"]["parent_id"] == "cycle"
        db.session.expire_all()
        assert db.session.get(Organization, male.id).parent_id is None

    def test_update_deep_cycle(self, client, directory, admin):
        male = directory["orgs"]["male"]
        unit = client.post("/api/organizations", headers=admin, json={
            "name": "Health Unit", "type": "Unit", "parent_id": directory["orgs"]["health"].id,
        }).get_json()
        res = client.put(f"/api/organizations/{male.id}", headers=admin,
                         json={"name": male.name, "type": male.type, "parent_id": unit["id"]})
        assert res.status_code == 400

    def test_update_reparent_across_branches(self, client, directory, admin):
        health = directory["orgs"]["health"]
        addu_id = directory["orgs"]["addu"].id
        res = client.put(f"/api/organizations/{health.id}", headers=admin,
                         json={"name": health.name, "type": health.type, "parent_id": addu_id})
        assert res.status_code == 200
        assert res.get_json()["parent_id"] == addu_id

    def test_update_unknown(self, client, admin):
        res = client.put("/api/organizations/9999", headers=admin,
                         json={"name": "Ghost", "type": "LGA"})
        assert res.status_code == 404

    def test_delete_cascades_reports_and_detaches(self, client, directory, auth_headers, admin):
        users = directory["users"]
        male_id = directory["orgs"]["male"].id
        health_id = directory["orgs"]["health"].id
        john_id, sarah_id = users["john"].id, users["sarah"].id

        client.post("/api/reports", headers=auth_headers(users["john"]),
                    json={"title": "Health stats", "due_date": "2025-10-25"})
        client.post("/api/reports", headers=auth_headers(users["mary"]),
                    json={"title": "School stats", "due_date": "2025-10-25"})

        res = client.delete(f"/api/organizations/{health_id}", headers=admin)
        assert res.status_code == 200
        assert res.get_json()["message"] == "Organization deleted successfully"

        db.session.expire_all()
        assert Report.query.filter_by(organization_id=health_id).count() == 0
        assert Report.query.count() == 1
        assert db.session.get(User, john_id).organization_id is None
        assert db.session.get(User, sarah_id).organization_id is None

        res = client.delete(f"/api/organizations/{male_id}", headers=admin)
        assert res.status_code == 200
        db.session.expire_all()
        education = Organization.query.filter_by(name="Education Department - Male").one()
        assert education.parent_id is None
        assert db.session.get(User, users["ahmed"].id).organization_id is None

    def test_delete_unknown(self, client, admin):
        assert client.delete("/api/organizations/9999", headers=admin).status_code == 404


# ═══════════════════════════════════════════════════════════════
# BLOCK 2: Users
# ═══════════════════════════════════════════════════════════════

class TestUsers:
    def test_list_excludes_password_hash(self, client, admin):
        res = client.get("/api/users", headers=admin)
        assert res.status_code == 200
        users = res.get_json()
        assert len(users) == 8
        for u in users:
            assert "password_hash" not in u
            assert "password" not in u

    def test_get_one(self, client, directory, admin):
        john = directory["users"]["john"]
        res = client.get(f"/api/users/{john.id}", headers=admin)
        assert res.status_code == 200
        assert res.get_json()["email"] == "john@portal.gov"

    def test_get_unknown(self, client, admin):
        assert client.get("/api/users/9999", headers=admin).status_code == 404

    def test_create(self, client, directory, admin):
        res = client.post("/api/users", headers=admin,
                          json=_user_body(organization_id=directory["orgs"]["health"].id))
        assert res.status_code == 201
        data = res.get_json()
        assert data["username"] == "mariyam"
        assert data["role"] == "submitter"
        assert "password_hash" not in data
        stored = User.query.filter_by(username="mariyam").one()
        assert stored.password_hash != "mariyam123"

    def test_create_duplicate_username(self, client, admin):
        res = client.post("/api/users", headers=admin,
                          json=_user_body(username="john", email="other@health.gov"))
        assert res.status_code == 400
        assert res.get_json()["error"] == "Username already exists"
        assert User.query.filter_by(email="other@health.gov").count() == 0

    def test_create_duplicate_email(self, client, admin):
        res = client.post("/api/users", headers=admin,
                          json=_user_body(email="john@portal.gov"))
        assert res.status_code == 400
        assert User.query.filter_by(username="mariyam").count() == 0

    @pytest.mark.parametrize("role", ["superuser", "", None, "Admin"])
    def test_create_invalid_role(self, client, admin, role):
        res = client.post("/api/users", headers=admin, json=_user_body(role=role))
        assert res.status_code == 400
        assert "role" in res.get_json()["details"]

    def test_create_invalid_email(self, client, admin):
        res = client.post("/api/users", headers=admin, json=_user_body(email="not-an-email"))
        assert res.status_code == 400

    def test_create_missing_password(self, client, admin):
        res = client.post("/api/users", headers=admin, json=_user_body(password=""))
        assert res.status_code == 400

    def test_create_unknown_organization(self, client, admin):
        res = client.post("/api/users", headers=admin, json=_user_body(organization_id=9999))
        assert res.status_code == 400
        assert User.query.filter_by(username="mariyam").count() == 0

    def test_update_keeps_password(self, client, directory, admin):
        john = directory["users"]["john"]
        res = client.put(f"/api/users/{john.id}", headers=admin, json={
            "name": "John Approver", "email": "john@portal.gov", "username": "john",
            "role": "internal_approver", "organization_id": directory["orgs"]["health"].id,
            "password": "ignored-password",
        })
        assert res.status_code == 200
        assert res.get_json()["role"] == "internal_approver"

        ok = client.post("/api/auth/login", json={"username": "john", "password": "john123"})
        assert ok.status_code == 200
        bad = client.post("/api/auth/login",
                          json={"username": "john", "password": "ignored-password"})
        assert bad.status_code == 401

    def test_update_to_taken_username(self, client, directory, admin):
        john = directory["users"]["john"]
        res = client.put(f"/api/users/{john.id}", headers=admin, json={
            "name": "John", "email": "john@portal.gov", "username": "sarah",
            "role": "submitter", "organization_id": None,
        })
        assert res.status_code == 400
        db.session.expire_all()
        assert db.session.get(User, john.id).username == "john"

    def test_update_unknown(self, client, admin):
        res = client.put("/api/users/9999", headers=admin, json=_user_body())
        assert res.status_code == 404

    def test_reset_password_missing(self, client, directory, admin):
        john = directory["users"]["john"]
        res = client.put(f"/api/users/{john.id}/reset-password", headers=admin, json={})
        assert res.status_code == 400

    @pytest.mark.parametrize("password", [12345678, ["secret"], {"p": "secret"}])
    def test_create_non_string_password(self, client, admin, password):
        res = client.post("/api/users", headers=admin, json=_user_body(password=password))
        assert res.status_code == 400
        assert "password" in res.get_json()["details"]
        assert User.query.filter_by(username="mariyam").count() == 0

    @pytest.mark.parametrize("password", [12345678, True, ["secret"]])
    def test_reset_non_string_password(self, client, directory, admin, password):
        john = directory["users"]["john"]
        res = client.put(f"/api/users/{john.id}/reset-password", headers=admin,
                         json={"password": password})
        assert res.status_code == 400
        ok = client.post("/api/auth/login", json={"username": "john", "password": "john123"})
        assert ok.status_code == 200

    def test_reset_password_unknown(self, client, admin):
        res = client.put("/api/users/9999/reset-password", headers=admin,
                         json={"password": "x"})
        assert res.status_code == 404

    def test_delete_cascades_reports(self, client, directory, auth_headers, admin):
        mary = directory["users"]["mary"]
        mary_id = mary.id
        client.post("/api/reports", headers=auth_headers(mary),
                    json={"title": "School stats", "due_date": "2025-10-25"})
        res = client.delete(f"/api/users/{mary_id}", headers=admin)
        assert res.status_code == 200
        assert res.get_json()["message"] == "User deleted successfully"
        db.session.expire_all()
        assert Report.query.filter_by(submitter_id=mary_id).count() == 0
        assert User.query.filter_by(id=mary_id).count() == 0

    def test_delete_approver_keeps_report(self, client, directory, auth_headers, admin):
        users = directory["users"]
        omar_id = users["omar"].id
        rid = client.post("/api/reports", headers=auth_headers(users["mary"]),
                          json={"title": "School stats", "due_date": "2025-10-25"}).get_json()["id"]
        client.put(f"/api/reports/{rid}/approve", headers=auth_headers(users["omar"]),
                   json={"approval_type": "internal"})
        client.delete(f"/api/users/{omar_id}", headers=admin)
        db.session.expire_all()
        report = db.session.get(Report, rid)
        assert report.status == "internally_approved"
        assert report.internal_approver_id is None

    def test_delete_unknown(self, client, admin):
        assert client.delete("/api/users/9999", headers=admin).status_code == 404

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/users"),
        ("post", "/api/users"),
        ("put", "/api/users/1"),
        ("put", "/api/users/1/reset-password"),
        ("delete", "/api/users/1"),
    ])
    def test_non_admin_forbidden(self, client, directory, auth_headers, method, path):
        headers = auth_headers(directory["users"]["sarah"])
        res = getattr(client, method)(path, headers=headers, json={})
        assert res.status_code == 403
