"""Pytest fixtures: file-backed SQLite database (WAL) for fast, isolated tests."""
import os
from datetime import date, datetime, timedelta, timezone

# The background reconciler would write to the dev database; tests drive it by hand
os.environ.setdefault("RECONCILE_INTERVAL_SECONDS", "0")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from volunteer_slots.database import Base, get_db
from volunteer_slots.main import app
from volunteer_slots.schemas.project import ProjectCreate
from volunteer_slots.services import project_service
from volunteer_slots.services.calendar_sync import set_calendar_sync
from volunteer_slots.services.notifications import set_notifier

# Import all models so they register with Base.metadata
from volunteer_slots.models.user import User, UserEmail                              # noqa: F401
from volunteer_slots.models.organization import Organization, OrganizationMember     # noqa: F401
from volunteer_slots.models.project import Project                                   # noqa: F401
from volunteer_slots.models.signup import Signup                                     # noqa: F401
from volunteer_slots.models.anonymous_signup import AnonymousSignup                  # noqa: F401
from volunteer_slots.models.slot_counter import SlotCounter                          # noqa: F401

SQLITE_URL = "sqlite:///./test.db"

# Fixed clock for service-level tests; schedules below sit after it
NOW = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)
EVENT_DAY = date(2030, 6, 10)


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False, "timeout": 30})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory bound to the test engine (one session per thread)."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class RecordingNotifier:
    """Collects every notification instead of sending it."""

    def __init__(self):
        self.sent = []

    def send_confirmation_email(self, email, name, project_title, confirmation_url):
        self.sent.append(("confirmation", email, confirmation_url))

    def send_approval_email(self, email, name, project_title, schedule_id):
        self.sent.append(("approval", email, schedule_id))

    def send_rejection_notification(self, email, name, project_title, project_id):
        self.sent.append(("rejection", email, project_id))

    def send_cancellation_broadcast(self, recipients, project_title, reason):
        self.sent.append(("cancellation", sorted(email for email, _ in recipients), reason))

    def of_kind(self, kind):
        return [item for item in self.sent if item[0] == kind]


class RecordingCalendar:
    def __init__(self):
        self.pushed = []
        self.removed = []

    def push_signup(self, signup_id, project_title, starts_at, ends_at, timezone):
        self.pushed.append((signup_id, starts_at, ends_at))

    def remove_signup(self, signup_id):
        self.removed.append(signup_id)


@pytest.fixture
def notifier():
    recorder = RecordingNotifier()
    set_notifier(recorder)
    yield recorder
    set_notifier(None)


@pytest.fixture
def calendar():
    recorder = RecordingCalendar()
    set_calendar_sync(recorder)
    yield recorder
    set_calendar_sync(None)


# ---------------------------------------------------------------------------
# Schedule documents
# ---------------------------------------------------------------------------
def one_time_schedule(day: date = EVENT_DAY, start: str = "09:00", end: str = "12:00", volunteers: int = 3) -> dict:
    return {"oneTime": {"date": day.isoformat(), "startTime": start, "endTime": end, "volunteers": volunteers}}


def multi_day_schedule(first_day: date = EVENT_DAY, days: int = 2, volunteers: int = 2) -> dict:
    return {"multiDay": [
        {
            "date": (first_day + timedelta(days=offset)).isoformat(),
            "slots": [
                {"startTime": "09:00", "endTime": "12:00", "volunteers": volunteers},
                {"startTime": "13:00", "endTime": "17:00", "volunteers": volunteers},
            ],
        }
        for offset in range(days)
    ]}


def multi_area_schedule(day: date = EVENT_DAY, volunteers: int = 2) -> dict:
    return {"sameDayMultiArea": {
        "date": day.isoformat(),
        "overallStart": "08:00",
        "overallEnd": "18:00",
        "roles": [
            {"name": "Registration", "startTime": "08:00", "endTime": "12:00", "volunteers": volunteers},
            {"name": "Cleanup", "startTime": "14:00", "endTime": "18:00", "volunteers": volunteers},
        ],
    }}


def future_day(days: int = 30) -> date:
    """A date far enough ahead that real-clock HTTP tests see an upcoming project."""
    return (datetime.now(timezone.utc) + timedelta(days=days)).date()


# ---------------------------------------------------------------------------
# Helpers: API-level factories, return the JSON response dict
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, name: str = "Test User", email: str = None, tz: str = "America/New_York") -> dict:
    """Helper — POST /api/users and return response JSON."""
    email = email or f"{name.lower().replace(' ', '.')}@example.com"
    resp = client.post("/api/users/", json={
        "display_name": name,
        "email": email,
        "default_timezone": tz,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_organization(client: TestClient, creator_id: str, name: str = "Test Org", domains: list = None) -> dict:
    """Helper — POST /api/organizations and return response JSON."""
    resp = client.post("/api/organizations/", json={
        "name": name,
        "created_by": creator_id,
        "allowed_email_domains": domains,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_project(client: TestClient, creator_id: str, schedule: dict = None, **extra) -> dict:
    """Helper — POST /api/projects with a oneTime schedule 30 days out by default."""
    schedule = schedule or one_time_schedule(day=future_day())
    payload = {
        "title": extra.pop("title", "Beach Cleanup"),
        "creator_id": creator_id,
        "event_type": next(iter(schedule)),
        "schedule": schedule,
    }
    payload.update(extra)
    resp = client.post("/api/projects/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Helpers: service-level factories on a Session
# ---------------------------------------------------------------------------
def make_user(db, name: str = "Volunteer", email: str = None) -> User:
    user = User(display_name=name, email=email or f"{name.lower().replace(' ', '.')}@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_project(db, creator: User, schedule: dict = None, now: datetime = NOW, **extra) -> Project:
    schedule = schedule or one_time_schedule()
    payload = ProjectCreate(
        title=extra.pop("title", "Food Bank Shift"),
        creator_id=creator.user_id,
        event_type=next(iter(schedule)),
        schedule=schedule,
        **extra,
    )
    return project_service.create_project(db, payload, now=now)
