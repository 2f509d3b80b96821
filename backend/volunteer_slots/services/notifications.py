"""Notification / e-mail collaborator.

Delivery is outside this service: the core only needs somewhere to hand the
message. Every call is fire-and-forget and happens after the signup transition
has committed; ``deliver`` swallows and logs collaborator failures so they can
never undo a committed transition.
"""
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send_confirmation_email(self, email: str, name: str, project_title: str, confirmation_url: str) -> None: ...

    def send_approval_email(self, email: str, name: str, project_title: str, schedule_id: str) -> None: ...

    def send_rejection_notification(self, email: str, name: str, project_title: str, project_id: str) -> None: ...

    def send_cancellation_broadcast(self, recipients: list[tuple[str, str]], project_title: str, reason: str) -> None: ...


class LoggingNotifier:
    """Default notifier: records what would be sent."""

    def send_confirmation_email(self, email, name, project_title, confirmation_url):
        logger.info("Confirmation e-mail to %s for '%s': %s", email, project_title, confirmation_url)

    def send_approval_email(self, email, name, project_title, schedule_id):
        logger.info("Signup confirmed e-mail to %s for '%s' (slot %s)", email, project_title, schedule_id)

    def send_rejection_notification(self, email, name, project_title, project_id):
        logger.info("Rejection notice to %s for '%s' (%s)", email, project_title, project_id)

    def send_cancellation_broadcast(self, recipients, project_title, reason):
        logger.info("Cancellation of '%s' broadcast to %d participants: %s", project_title, len(recipients), reason)


_notifier: Notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    return _notifier


def set_notifier(notifier: Optional[Notifier]) -> None:
    """Install a notifier (None restores the logging default)."""
    global _notifier
    _notifier = notifier or LoggingNotifier()


def deliver(description: str, send: Callable[[], None]) -> bool:
    """Run a collaborator call; failures are logged, never raised."""
    try:
        send()
        return True
    except Exception:
        logger.exception("Notification failed: %s", description)
        return False
