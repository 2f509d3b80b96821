"""Tests for the project endpoints: creation, status, availability, pause, cancel and delete."""
from volunteer_slots.config import settings
from volunteer_slots.models.anonymous_signup import AnonymousSignup
from volunteer_slots.models.project import Project
from volunteer_slots.models.signup import Signup
from volunteer_slots.models.slot_counter import SlotCounter
from tests.conftest import (
    create_test_organization,
    create_test_project,
    create_test_user,
    future_day,
    multi_area_schedule,
    multi_day_schedule,
    one_time_schedule,
)


def _signup(client, project_id, user_id, schedule_id="oneTime"):
    return client.post("/api/signups/", json={
        "project_id": project_id,
        "schedule_id": schedule_id,
        "user_id": user_id,
    })


class TestProjectCreate:

    def test_create_one_time_project(self, client):
        owner = create_test_user(client, name="Owner")
        project = create_test_project(client, owner["user_id"], title="Park Planting")
        assert project["title"] == "Park Planting"
        assert project["event_type"] == "oneTime"
        assert project["status"] == "upcoming"
        assert project["project_timezone"] == "UTC"
        assert project["pause_signups"] is False

    def test_create_multi_day_project(self, client):
        owner = create_test_user(client, name="Owner")
        project = create_test_project(client, owner["user_id"], schedule=multi_day_schedule(first_day=future_day()))
        slots = client.get(f"/api/projects/{project['project_id']}/slots").json()
        assert [s["schedule_id"] for s in slots] == [
            f"{future_day().isoformat()}-0",
            f"{future_day().isoformat()}-1",
            f"{future_day(31).isoformat()}-0",
            f"{future_day(31).isoformat()}-1",
        ]

    def test_create_multi_area_project(self, client):
        owner = create_test_user(client, name="Owner")
        project = create_test_project(
            client, owner["user_id"],
            schedule=multi_area_schedule(day=future_day()), project_timezone="America/Chicago",
        )
        assert project["project_timezone"] == "America/Chicago"
        assert project["schedule"]["sameDayMultiArea"]["roles"][0]["name"] == "Registration"

    def test_invalid_schedule(self, client):
        owner = create_test_user(client, name="Owner")
        resp = client.post("/api/projects/", json={
            "title": "Broken",
            "creator_id": owner["user_id"],
            "event_type": "oneTime",
            "schedule": one_time_schedule(day=future_day(), start="15:00", end="09:00"),
        })
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "invalid_schedule"

    def test_schedule_event_type_mismatch(self, client):
        owner = create_test_user(client, name="Owner")
        resp = client.post("/api/projects/", json={
            "title": "Mismatch",
            "creator_id": owner["user_id"],
            "event_type": "multiDay",
            "schedule": one_time_schedule(day=future_day()),
        })
        assert resp.status_code == 422

    def test_unknown_timezone(self, client):
        owner = create_test_user(client, name="Owner")
        resp = client.post("/api/projects/", json={
            "title": "Nowhere",
            "creator_id": owner["user_id"],
            "event_type": "oneTime",
            "schedule": one_time_schedule(day=future_day()),
            "project_timezone": "Atlantis/Capital",
        })
        assert resp.status_code == 422

    def test_unknown_creator(self, client):
        resp = client.post("/api/projects/", json={
            "title": "Orphan",
            "creator_id": "00000000-0000-0000-0000-000000000000",
            "event_type": "oneTime",
            "schedule": one_time_schedule(day=future_day()),
        })
        assert resp.status_code == 404

    def test_get_project_not_found(self, client):
        resp = client.get("/api/projects/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "project_not_found"


class TestProjectStatusAndSlots:

    def test_status_endpoint(self, client):
        owner = create_test_user(client, name="Owner")
        project = create_test_project(client, owner["user_id"])
        data = client.get(f"/api/projects/{project['project_id']}/status").json()
        assert data["status"] == "upcoming"
        assert data["stored_status"] == "upcoming"
        assert data["accepting_signups"] is True
        assert data["can_cancel"] is True

    def test_slot_availability_counts(self, client):
        owner = create_test_user(client, name="Owner")
        volunteer = create_test_user(client, name="Vera")
        project = create_test_project(client, owner["user_id"])
        assert _signup(client, project["project_id"], volunteer["user_id"]).status_code == 201
        client.post("/api/signups/", json={
            "project_id": project["project_id"],
            "schedule_id": "oneTime",
            "anonymous": {"name": "Walk In", "email": "walk.in@example.org"},
        })

        [slot] = client.get(f"/api/projects/{project['project_id']}/slots").json()
        assert slot["capacity"] == 3
        # Approved only; the pending anonymous signup still holds a unit
        assert slot["current_count"] == 1
        assert slot["remaining"] == 1
        assert slot["start_time"] == "09:00"
        assert slot["elapsed"] is False


class TestPauseSignups:

    def test_manager_pauses_and_resumes(self, client):
        owner = create_test_user(client, name="Owner")
        volunteer = create_test_user(client, name="Vera")
        project = create_test_project(client, owner["user_id"])
        pid = project["project_id"]

        resp = client.post(f"/api/projects/{pid}/pause", json={"actor_user_id": owner["user_id"], "paused": True})
        assert resp.status_code == 200
        assert resp.json()["pause_signups"] is True

        resp = _signup(client, pid, volunteer["user_id"])
        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "signups_paused"

        client.post(f"/api/projects/{pid}/pause", json={"actor_user_id": owner["user_id"], "paused": False})
        assert _signup(client, pid, volunteer["user_id"]).status_code == 201

    def test_non_manager_cannot_pause(self, client):
        owner = create_test_user(client, name="Owner")
        other = create_test_user(client, name="Other")
        project = create_test_project(client, owner["user_id"])
        resp = client.post(f"/api/projects/{project['project_id']}/pause", json={
            "actor_user_id": other["user_id"], "paused": True,
        })
        assert resp.status_code == 403

    def test_org_admin_can_pause(self, client):
        owner = create_test_user(client, name="Owner")
        admin = create_test_user(client, name="Admin")
        org = create_test_organization(client, creator_id=admin["user_id"])
        project = create_test_project(client, owner["user_id"], organization_id=org["organization_id"])
        resp = client.post(f"/api/projects/{project['project_id']}/pause", json={
            "actor_user_id": admin["user_id"], "paused": True,
        })
        assert resp.status_code == 200


class TestCancelProject:

    def test_cancel_keeps_signups_and_broadcasts(self, client, notifier, calendar):
        owner = create_test_user(client, name="Owner")
        project = create_test_project(client, owner["user_id"])
        pid = project["project_id"]
        signup_ids = []
        for name in ("Ann", "Ben", "Cal"):
            volunteer = create_test_user(client, name=name)
            signup_ids.append(_signup(client, pid, volunteer["user_id"]).json()["signup"]["signup_id"])

        resp = client.post(f"/api/projects/{pid}/cancel", json={
            "actor_user_id": owner["user_id"], "reason": "Storm warning",
        })

        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"
        assert resp.json()["cancellation_reason"] == "Storm warning"
        assert client.get(f"/api/projects/{pid}/status").json()["status"] == "cancelled"
        statuses = [s["status"] for s in client.get("/api/signups/", params={"project_id": pid}).json()]
        assert statuses == ["approved"] * 3
        assert notifier.of_kind("cancellation") == [
            ("cancellation", ["ann@example.com", "ben@example.com", "cal@example.com"], "Storm warning"),
        ]
        assert sorted(calendar.removed) == sorted(signup_ids)

    def test_reason_required(self, client):
        owner = create_test_user(client, name="Owner")
        project = create_test_project(client, owner["user_id"])
        resp = client.post(f"/api/projects/{project['project_id']}/cancel", json={
            "actor_user_id": owner["user_id"], "reason": "   ",
        })
        assert resp.status_code == 422

    def test_already_cancelled(self, client):
        owner = create_test_user(client, name="Owner")
        project = create_test_project(client, owner["user_id"])
        body = {"actor_user_id": owner["user_id"], "reason": "Rain"}
        client.post(f"/api/projects/{project['project_id']}/cancel", json=body)
        resp = client.post(f"/api/projects/{project['project_id']}/cancel", json=body)
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "project_already_cancelled"

    def test_inside_guard_window(self, client, monkeypatch):
        monkeypatch.setattr(settings, "CANCELLATION_GUARD_HOURS", 24 * 365)
        owner = create_test_user(client, name="Owner")
        project = create_test_project(client, owner["user_id"])
        resp = client.post(f"/api/projects/{project['project_id']}/cancel", json={
            "actor_user_id": owner["user_id"], "reason": "Too late",
        })
        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "cancellation_window_closed"

    def test_non_manager_cannot_cancel(self, client):
        owner = create_test_user(client, name="Owner")
        other = create_test_user(client, name="Other")
        project = create_test_project(client, owner["user_id"])
        resp = client.post(f"/api/projects/{project['project_id']}/cancel", json={
            "actor_user_id": other["user_id"], "reason": "Mine now",
        })
        assert resp.status_code == 403


class TestDeleteProject:

    def test_delete_cascades_signups_and_counters(self, client, db, calendar):
        owner = create_test_user(client, name="Owner")
        volunteer = create_test_user(client, name="Vera")
        project = create_test_project(client, owner["user_id"], schedule=multi_day_schedule(first_day=future_day()))
        pid = project["project_id"]
        first_slot = f"{future_day().isoformat()}-0"
        approved = _signup(client, pid, volunteer["user_id"], schedule_id=first_slot).json()["signup"]
        resp = client.post("/api/signups/", json={
            "project_id": pid,
            "schedule_id": first_slot,
            "anonymous": {"name": "Walk In", "email": "walk.in@example.org"},
        })
        assert resp.status_code == 201

        resp = client.delete(f"/api/projects/{pid}", params={"actor_user_id": owner["user_id"]})

        assert resp.status_code == 204
        assert client.get(f"/api/projects/{pid}").status_code == 404
        assert db.query(Project).filter(Project.project_id == pid).count() == 0
        assert db.query(Signup).filter(Signup.project_id == pid).count() == 0
        assert db.query(AnonymousSignup).filter(AnonymousSignup.project_id == pid).count() == 0
        assert db.query(SlotCounter).filter(SlotCounter.project_id == pid).count() == 0
        assert calendar.removed == [approved["signup_id"]]

    def test_org_admin_can_delete(self, client):
        owner = create_test_user(client, name="Owner")
        admin = create_test_user(client, name="Admin")
        org = create_test_organization(client, creator_id=admin["user_id"])
        project = create_test_project(client, owner["user_id"], organization_id=org["organization_id"])
        resp = client.delete(f"/api/projects/{project['project_id']}", params={"actor_user_id": admin["user_id"]})
        assert resp.status_code == 204

    def test_org_staff_cannot_delete(self, client):
        owner = create_test_user(client, name="Owner")
        admin = create_test_user(client, name="Admin")
        staff = create_test_user(client, name="Staff")
        org = create_test_organization(client, creator_id=admin["user_id"])
        client.post(f"/api/organizations/{org['organization_id']}/members", json={
            "user_id": staff["user_id"], "role": "staff",
        })
        project = create_test_project(client, owner["user_id"], organization_id=org["organization_id"])

        resp = client.delete(f"/api/projects/{project['project_id']}", params={"actor_user_id": staff["user_id"]})

        assert resp.status_code == 403
        assert client.get(f"/api/projects/{project['project_id']}").status_code == 200

    def test_delete_unknown_project(self, client):
        owner = create_test_user(client, name="Owner")
        resp = client.delete(
            "/api/projects/00000000-0000-0000-0000-000000000000",
            params={"actor_user_id": owner["user_id"]},
        )
        assert resp.status_code == 404


class TestReconcileEndpoint:

    def test_reconcile_runs_cycle(self, client):
        owner = create_test_user(client, name="Owner")
        create_test_project(client, owner["user_id"])
        resp = client.post("/api/projects/reconcile")
        assert resp.status_code == 200
        assert resp.json() == {"checked": 1, "updated": {}, "expired_anonymous_signups": 0}


class TestHealth:

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}
