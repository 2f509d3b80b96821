"""Calendar sync collaborator: best-effort push/remove keyed by signup id."""
import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class CalendarSync(Protocol):
    def push_signup(self, signup_id: str, project_title: str, starts_at, ends_at, timezone: str) -> None: ...

    def remove_signup(self, signup_id: str) -> None: ...


class LoggingCalendarSync:
    """Default: no calendar provider connected."""

    def push_signup(self, signup_id, project_title, starts_at, ends_at, timezone):
        logger.debug("Calendar push for signup %s (%s, %s - %s %s)", signup_id, project_title, starts_at, ends_at, timezone)

    def remove_signup(self, signup_id):
        logger.debug("Calendar remove for signup %s", signup_id)


_calendar: CalendarSync = LoggingCalendarSync()


def get_calendar_sync() -> CalendarSync:
    return _calendar


def set_calendar_sync(calendar: Optional[CalendarSync]) -> None:
    global _calendar
    _calendar = calendar or LoggingCalendarSync()


def sync_safely(description: str, call, *args) -> None:
    """Calendar failures are logged and never surface as signup errors."""
    try:
        call(*args)
    except Exception:
        logger.exception("Calendar sync failed: %s", description)
