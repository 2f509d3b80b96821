"""Status reconciler: writes the derived lifecycle status back to the projects table.

The write is a compare-and-set on the status the reconciler read, and it never
touches a cancelled project, so a cancellation racing a reconciliation always
wins. Re-running it is harmless.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from volunteer_slots.config import settings
from volunteer_slots.errors import SignupError
from volunteer_slots.models.project import Project, ProjectStatus
from volunteer_slots.services import anonymous_service
from volunteer_slots.services.status_clock import derive_project_status

logger = logging.getLogger(__name__)

# Final states; nothing moves a project out of them
TERMINAL_STATUSES = (ProjectStatus.completed, ProjectStatus.cancelled)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def reconcile_project(db: Session, project: Project, now: datetime) -> Optional[ProjectStatus]:
    """Persist the derived status; returns it if the row changed, else None."""
    stored = project.status
    derived = derive_project_status(project, now)
    if derived == stored or derived == ProjectStatus.cancelled:
        return None

    result = db.execute(
        update(Project)
        .where(
            Project.project_id == project.project_id,
            Project.status == stored,
            Project.cancelled_at.is_(None),
        )
        .values(status=derived, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount != 1:
        logger.info("Project %s changed while reconciling; left as is", project.project_id)
        return None

    logger.info("Project %s status %s -> %s", project.project_id, stored.value, derived.value)
    return derived


def reconcile_all(db: Session, now: Optional[datetime] = None) -> dict[str, ProjectStatus]:
    """Reconcile every project that can still change; returns {project_id: new status}."""
    now = now or _utcnow()
    projects = (
        db.query(Project)
        .filter(Project.status.notin_(TERMINAL_STATUSES), Project.cancelled_at.is_(None))
        .all()
    )
    updated = {}
    for project in projects:
        try:
            new_status = reconcile_project(db, project, now)
        except SignupError as exc:
            # One bad schedule must not stop the sweep
            logger.error("Cannot reconcile project %s: %s", project.project_id, exc.detail)
            db.rollback()
            continue
        if new_status is not None:
            updated[project.project_id] = new_status
    return updated


def run_cycle(db: Session, now: Optional[datetime] = None) -> tuple[dict[str, ProjectStatus], int, int]:
    """One reconciler tick: (updated statuses, projects checked, anonymous signups expired)."""
    now = now or _utcnow()
    checked = (
        db.query(Project.project_id)
        .filter(Project.status.notin_(TERMINAL_STATUSES), Project.cancelled_at.is_(None))
        .count()
    )
    updated = reconcile_all(db, now)
    expired = anonymous_service.expire_unconfirmed(db, now)
    return updated, checked, expired


class StatusReconciler:
    """Background thread that runs ``run_cycle`` every ``interval`` seconds."""

    def __init__(self, session_factory: Callable[[], Session], interval: Optional[float] = None):
        self.session_factory = session_factory
        self.interval = settings.RECONCILE_INTERVAL_SECONDS if interval is None else interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="status-reconciler", daemon=True)
        self._thread.start()
        logger.info("Status reconciler started (every %ss)", self.interval)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("Status reconciler stopped")

    def tick(self) -> None:
        db = self.session_factory()
        try:
            updated, checked, expired = run_cycle(db)
            if updated or expired:
                logger.info(
                    "Reconciled %d of %d projects, expired %d anonymous signups",
                    len(updated), checked, expired,
                )
        finally:
            db.close()

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Status reconciler cycle failed")
            self._stop_event.wait(timeout=self.interval)
