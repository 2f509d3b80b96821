"""Capacity ledger: atomic per-slot admission.

Admission is a single conditional UPDATE on the slot's counter row:

    UPDATE slot_counters SET reserved = reserved + 1
    WHERE project_id = :p AND schedule_id = :s AND reserved < :capacity

The database serializes concurrent updates of the same row (row lock in
PostgreSQL, write lock in SQLite), so for the last free unit exactly one
transaction sees an affected row. Nothing here commits: the caller inserts its
signup rows in the same transaction and commits or rolls back as a whole.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import func, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from volunteer_slots.errors import CapacityExceeded
from volunteer_slots.models.signup import Signup, SignupStatus
from volunteer_slots.models.slot_counter import SlotCounter
from volunteer_slots.schemas.schedule import Slot

logger = logging.getLogger(__name__)

# Statuses shown as "taken" in availability displays
COMMITTED_STATUSES = (SignupStatus.approved, SignupStatus.attended)


@dataclass(frozen=True)
class Reservation:
    project_id: str
    schedule_id: str


def _ensure_counter(db: Session, project_id: str, schedule_id: str) -> None:
    """Create the counter row if it does not exist yet, without racing other writers."""
    values = {"project_id": project_id, "schedule_id": schedule_id, "reserved": 0}
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(SlotCounter).values(**values).on_conflict_do_nothing(
            index_elements=["project_id", "schedule_id"]
        )
    elif dialect == "sqlite":
        stmt = sqlite_insert(SlotCounter).values(**values).on_conflict_do_nothing(
            index_elements=["project_id", "schedule_id"]
        )
    else:
        exists = db.get(SlotCounter, (project_id, schedule_id))
        if exists is None:
            db.add(SlotCounter(**values))
            db.flush()
        return
    db.execute(stmt)


def seed_slots(db: Session, project_id: str, slots: list[Slot]) -> None:
    """Create counter rows for every slot of a new or edited schedule."""
    for slot in slots:
        _ensure_counter(db, project_id, slot.schedule_id)


def admit(db: Session, project_id: str, schedule_id: str, capacity: int) -> Reservation:
    """Take one unit of the slot or raise CapacityExceeded.

    Check and increment happen in one statement; there is no separate read.
    """
    _ensure_counter(db, project_id, schedule_id)
    result = db.execute(
        update(SlotCounter)
        .where(
            SlotCounter.project_id == project_id,
            SlotCounter.schedule_id == schedule_id,
            SlotCounter.reserved < capacity,
        )
        .values(reserved=SlotCounter.reserved + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.info("Admission refused for slot %s of project %s (capacity %d)", schedule_id, project_id, capacity)
        raise CapacityExceeded()

    logger.info("Admitted one signup to slot %s of project %s", schedule_id, project_id)
    return Reservation(project_id=project_id, schedule_id=schedule_id)


def release(db: Session, reservation: Reservation) -> None:
    """Give back one unit; never drives the counter below zero."""
    result = db.execute(
        update(SlotCounter)
        .where(
            SlotCounter.project_id == reservation.project_id,
            SlotCounter.schedule_id == reservation.schedule_id,
            SlotCounter.reserved > 0,
        )
        .values(reserved=SlotCounter.reserved - 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(
            "Release on empty counter for slot %s of project %s",
            reservation.schedule_id, reservation.project_id,
        )
    else:
        logger.info("Released one unit of slot %s of project %s", reservation.schedule_id, reservation.project_id)


def current_count(db: Session, project_id: str, schedule_id: str) -> int:
    """Approved + attended signups for display. Never gates an admission."""
    return (
        db.query(func.count(Signup.signup_id))
        .filter(
            Signup.project_id == project_id,
            Signup.schedule_id == schedule_id,
            Signup.status.in_(COMMITTED_STATUSES),
        )
        .scalar()
    ) or 0


def reserved_count(db: Session, project_id: str, schedule_id: str) -> int:
    """Units held in the counter, including pending anonymous holds."""
    reserved = (
        db.query(SlotCounter.reserved)
        .filter(SlotCounter.project_id == project_id, SlotCounter.schedule_id == schedule_id)
        .scalar()
    )
    return reserved or 0


def remaining(db: Session, project_id: str, schedule_id: str, capacity: int) -> int:
    """Free units right now, for display only."""
    return max(capacity - reserved_count(db, project_id, schedule_id), 0)
