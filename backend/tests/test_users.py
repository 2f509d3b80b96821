"""Tests for User CRUD endpoints and secondary e-mail addresses."""
from tests.conftest import create_test_user


class TestUserCRUD:
    """User create / get / update / list."""

    def test_create_user(self, client):
        data = create_test_user(client, name="Alice", email="Alice@Example.com", tz="US/Eastern")
        assert data["display_name"] == "Alice"
        assert data["default_timezone"] == "US/Eastern"
        # Stored lower-cased so lookups are case-insensitive
        assert data["email"] == "alice@example.com"
        assert "user_id" in data

    def test_get_user(self, client):
        user = create_test_user(client)
        resp = client.get(f"/api/users/{user['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["display_name"] == "Test User"

    def test_get_user_not_found(self, client):
        resp = client.get("/api/users/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "user_not_found"

    def test_update_user(self, client):
        user = create_test_user(client)
        resp = client.patch(f"/api/users/{user['user_id']}", json={
            "display_name": "Updated Name",
            "default_timezone": "Europe/London",
        })
        assert resp.status_code == 200
        assert resp.json()["display_name"] == "Updated Name"
        assert resp.json()["default_timezone"] == "Europe/London"

    def test_update_user_unknown_timezone(self, client):
        user = create_test_user(client)
        resp = client.patch(f"/api/users/{user['user_id']}", json={"default_timezone": "Mars/Olympus"})
        assert resp.status_code == 422

    def test_list_users(self, client):
        create_test_user(client, name="Alice")
        create_test_user(client, name="Bob")
        resp = client.get("/api/users/")
        assert resp.status_code == 200
        users = resp.json()
        assert len(users) >= 2
        names = [u["display_name"] for u in users]
        assert "Alice" in names
        assert "Bob" in names

    def test_duplicate_email_rejected(self, client):
        create_test_user(client, name="Alice", email="alice@example.com")
        resp = client.post("/api/users/", json={
            "display_name": "Other Alice",
            "email": "ALICE@example.com",
        })
        assert resp.status_code == 409

    def test_invalid_email_rejected(self, client):
        resp = client.post("/api/users/", json={"display_name": "Nobody", "email": "not-an-email"})
        assert resp.status_code == 422


class TestSecondaryEmails:
    """Verified secondary addresses count for domain-restricted projects."""

    def test_add_verified_email(self, client):
        user = create_test_user(client, name="Dana", email="dana@gmail.com")
        resp = client.post(f"/api/users/{user['user_id']}/emails", json={"email": "dana@school.edu"})
        assert resp.status_code == 201
        assert resp.json()["email"] == "dana@school.edu"
        assert resp.json()["verified_at"] is not None

        emails = client.get(f"/api/users/{user['user_id']}").json()["secondary_emails"]
        assert [e["email"] for e in emails] == ["dana@school.edu"]

    def test_add_unverified_email(self, client):
        user = create_test_user(client, name="Eli")
        resp = client.post(f"/api/users/{user['user_id']}/emails", json={
            "email": "eli@school.edu",
            "verified": False,
        })
        assert resp.status_code == 201
        assert resp.json()["verified_at"] is None

    def test_email_already_used_as_primary(self, client):
        create_test_user(client, name="Fay", email="fay@example.com")
        other = create_test_user(client, name="Gus")
        resp = client.post(f"/api/users/{other['user_id']}/emails", json={"email": "fay@example.com"})
        assert resp.status_code == 409
