"""Status clock: a project's lifecycle status as a pure function of time.

upcoming -> in_progress -> completed is driven by the wall clock alone;
cancelled is set externally and overrides everything. The status column on
the project is only a cache of this function's output, so admission decisions
call derive_status fresh.
"""
from datetime import datetime, timedelta
from typing import Optional

from volunteer_slots.config import settings
from volunteer_slots.errors import InvalidSchedule
from volunteer_slots.models.project import EventType, Project, ProjectStatus
from volunteer_slots.schemas.schedule import Schedule
from volunteer_slots.services.schedule_service import (
    ensure_utc,
    enumerate_slots,
    event_type_of,
    parse_schedule,
    slot_bounds,
)

OPEN_STATUSES = (ProjectStatus.upcoming, ProjectStatus.in_progress)


def project_bounds(schedule: Schedule, tz_name: str = "UTC") -> tuple[datetime, datetime]:
    """Earliest slot start and latest slot end."""
    bounds = [slot_bounds(slot, tz_name) for slot in enumerate_slots(schedule)]
    return min(start for start, _ in bounds), max(end for _, end in bounds)


def derive_status(
    schedule: Schedule,
    event_type: EventType | str,
    created_at: Optional[datetime],
    cancelled_at: Optional[datetime],
    now: datetime,
    tz_name: str = "UTC",
) -> ProjectStatus:
    """Compute the lifecycle status; no side effects.

    ``created_at`` does not move any boundary: a project is upcoming from the
    moment it exists until its first slot starts.
    """
    if cancelled_at is not None:
        return ProjectStatus.cancelled

    if event_type_of(schedule) != EventType(event_type):
        raise InvalidSchedule(f"Schedule does not match event type {EventType(event_type).value}")

    start, end = project_bounds(schedule, tz_name)
    now = ensure_utc(now)
    if now < start:
        return ProjectStatus.upcoming
    if now <= end:
        return ProjectStatus.in_progress
    return ProjectStatus.completed


def derive_project_status(project: Project, now: datetime) -> ProjectStatus:
    """derive_status for a stored project row."""
    if project.cancelled_at is not None:
        return ProjectStatus.cancelled
    schedule = parse_schedule(project.event_type, project.schedule)
    return derive_status(
        schedule,
        project.event_type,
        project.created_at,
        project.cancelled_at,
        now,
        project.project_timezone,
    )


def time_until_start(schedule: Schedule, now: datetime, tz_name: str = "UTC") -> timedelta:
    """Time left before the first slot starts; negative once it has started."""
    start, _ = project_bounds(schedule, tz_name)
    return start - ensure_utc(now)


def can_cancel(schedule: Schedule, now: datetime, tz_name: str = "UTC", guard_hours: Optional[int] = None) -> bool:
    """Cancellation is allowed only while the start is more than the guard window away."""
    if guard_hours is None:
        guard_hours = settings.CANCELLATION_GUARD_HOURS
    return time_until_start(schedule, now, tz_name) > timedelta(hours=guard_hours)


def accepts_signups(status: ProjectStatus) -> bool:
    return status in OPEN_STATUSES
