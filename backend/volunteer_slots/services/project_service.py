"""Project lifecycle operations: creation, pausing, cancellation, deletion and availability.

Creation validates the schedule against the event type and seeds one counter row
per slot so admissions never race on creating it. Cancellation is refused inside
the guard window before the first slot starts; signups of a cancelled project are
left approved as a record of who had committed.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from volunteer_slots.config import settings
from volunteer_slots.errors import (
    CancellationReasonRequired,
    CancellationWindowClosed,
    InvalidSchedule,
    OrganizationNotFound,
    ProjectAlreadyCancelled,
    ProjectNotFound,
    UserNotFound,
)
from volunteer_slots.models.organization import Organization
from volunteer_slots.models.project import EventType, Project, ProjectStatus
from volunteer_slots.models.signup import Signup, SignupStatus
from volunteer_slots.models.user import User
from volunteer_slots.schemas.project import ProjectCreate
from volunteer_slots.services import capacity_ledger
from volunteer_slots.services.authorization import require_project_manager, require_project_owner
from volunteer_slots.services.calendar_sync import CalendarSync, get_calendar_sync, sync_safely
from volunteer_slots.services.notifications import Notifier, deliver, get_notifier
from volunteer_slots.services.schedule_service import (
    enumerate_slots,
    get_timezone,
    is_slot_time_elapsed,
    parse_schedule,
    schedule_document,
)
from volunteer_slots.services.status_clock import (
    accepts_signups,
    can_cancel,
    derive_project_status,
    derive_status,
    project_bounds,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_project(db: Session, project_id: str) -> Project:
    project = db.query(Project).filter(Project.project_id == str(project_id)).first()
    if not project:
        raise ProjectNotFound()
    return project


def create_project(db: Session, payload: ProjectCreate, now: Optional[datetime] = None) -> Project:
    """Create a project and seed its slot counters in one transaction."""
    now = now or _utcnow()

    if not db.query(User.user_id).filter(User.user_id == payload.creator_id).first():
        raise UserNotFound("Creator user not found")
    if payload.organization_id and not (
        db.query(Organization.organization_id)
        .filter(Organization.organization_id == payload.organization_id)
        .first()
    ):
        raise OrganizationNotFound()

    try:
        event_type = EventType(payload.event_type)
    except ValueError:
        raise InvalidSchedule(f"Unknown event type: {payload.event_type}")

    tz_name = payload.project_timezone or settings.DEFAULT_TIMEZONE
    get_timezone(tz_name)
    schedule = parse_schedule(event_type, payload.schedule)
    status = derive_status(schedule, event_type, now, None, now, tz_name)

    project = Project(
        title=payload.title,
        location=payload.location,
        creator_id=payload.creator_id,
        organization_id=payload.organization_id,
        event_type=event_type,
        # Store the normalized document so slot ids never depend on input formatting
        schedule=schedule_document(schedule),
        project_timezone=tz_name,
        status=status,
        pause_signups=payload.pause_signups,
        require_login=payload.require_login,
        restrict_to_org_domains=payload.restrict_to_org_domains,
        allowed_email_domains=payload.allowed_email_domains,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(project)
        db.flush()
        capacity_ledger.seed_slots(db, project.project_id, enumerate_slots(schedule))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(project)
    logger.info(
        "Created %s project '%s' (%s) by user %s, status %s",
        event_type.value, project.title, project.project_id, project.creator_id, status.value,
    )
    return project


def set_pause_signups(db: Session, project_id: str, actor_user_id: Optional[str], paused: bool) -> Project:
    project = get_project(db, project_id)
    require_project_manager(db, actor_user_id, project)
    project.pause_signups = paused
    db.commit()
    db.refresh(project)
    logger.info("Signups for project %s %s by %s", project_id, "paused" if paused else "resumed", actor_user_id)
    return project


def cancel_project(
    db: Session,
    project_id: str,
    actor_user_id: Optional[str],
    reason: str,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
    calendar: Optional[CalendarSync] = None,
) -> Project:
    """Cancel a project that starts more than the guard window from now."""
    now = now or _utcnow()
    notifier = notifier or get_notifier()
    calendar = calendar or get_calendar_sync()

    project = get_project(db, project_id)
    require_project_manager(db, actor_user_id, project)

    reason = (reason or "").strip()
    if not reason:
        raise CancellationReasonRequired()
    if project.cancelled_at is not None or project.status == ProjectStatus.cancelled:
        raise ProjectAlreadyCancelled()

    schedule = parse_schedule(project.event_type, project.schedule)
    guard_hours = settings.CANCELLATION_GUARD_HOURS
    if not can_cancel(schedule, now, project.project_timezone, guard_hours):
        raise CancellationWindowClosed(
            f"Project can only be cancelled more than {guard_hours} hours before start time"
        )

    project.status = ProjectStatus.cancelled
    project.cancelled_at = now
    project.cancellation_reason = reason
    db.commit()
    db.refresh(project)
    logger.info("Project %s cancelled by %s: %s", project_id, actor_user_id, reason)

    approved = (
        db.query(Signup)
        .filter(Signup.project_id == project.project_id, Signup.status == SignupStatus.approved)
        .all()
    )
    recipients = []
    for signup in approved:
        if signup.user_id:
            user = db.query(User).filter(User.user_id == signup.user_id).first()
            if user:
                recipients.append((user.email, user.display_name))
        elif signup.anonymous_signup:
            recipients.append((signup.anonymous_signup.email, signup.anonymous_signup.name))
    if recipients:
        deliver(
            f"cancellation broadcast for project {project_id}",
            lambda: notifier.send_cancellation_broadcast(recipients, project.title, reason),
        )
    for signup in approved:
        sync_safely(f"remove signup {signup.signup_id}", calendar.remove_signup, signup.signup_id)
    return project


def delete_project(
    db: Session,
    project_id: str,
    actor_user_id: Optional[str],
    calendar: Optional[CalendarSync] = None,
) -> None:
    """Delete a project with its signups, anonymous signups and slot counters."""
    calendar = calendar or get_calendar_sync()

    project = get_project(db, project_id)
    require_project_owner(db, actor_user_id, project)

    calendar_ids = [
        signup.signup_id
        for signup in project.signups
        if signup.status in (SignupStatus.approved, SignupStatus.attended)
    ]
    removed = len(project.signups)
    try:
        db.delete(project)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Project %s deleted by %s (%d signups removed)", project_id, actor_user_id, removed)

    for signup_id in calendar_ids:
        sync_safely(f"remove signup {signup_id}", calendar.remove_signup, signup_id)


def get_project_status(db: Session, project_id: str, now: Optional[datetime] = None) -> dict:
    """Freshly derived status next to the cached column."""
    now = now or _utcnow()
    project = get_project(db, project_id)
    schedule = parse_schedule(project.event_type, project.schedule)
    status = derive_project_status(project, now)
    starts_at, ends_at = project_bounds(schedule, project.project_timezone)
    return {
        "project_id": project.project_id,
        "status": status.value,
        "stored_status": project.status.value,
        "accepting_signups": accepts_signups(status) and not project.pause_signups,
        "can_cancel": status != ProjectStatus.cancelled and can_cancel(schedule, now, project.project_timezone),
        "starts_at": starts_at,
        "ends_at": ends_at,
    }


def slot_availability(db: Session, project_id: str, now: Optional[datetime] = None) -> list[dict]:
    """Per-slot capacity and counts for display. Never used to admit."""
    now = now or _utcnow()
    project = get_project(db, project_id)
    schedule = parse_schedule(project.event_type, project.schedule)
    availability = []
    for slot in enumerate_slots(schedule):
        availability.append({
            "schedule_id": slot.schedule_id,
            "date": slot.date,
            "start_time": slot.start_time.strftime("%H:%M"),
            "end_time": slot.end_time.strftime("%H:%M"),
            "capacity": slot.capacity,
            "current_count": capacity_ledger.current_count(db, project.project_id, slot.schedule_id),
            "remaining": capacity_ledger.remaining(db, project.project_id, slot.schedule_id, slot.capacity),
            "elapsed": is_slot_time_elapsed(slot, now, project.project_timezone),
        })
    return availability
