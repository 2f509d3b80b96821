"""Signup state machine.

    pending ──confirm──> approved ──attend──> attended ──check out──> attended (check_out_time set)
       │                    │
       ├──reject──> rejected (ban; only unreject lifts it, re-checking capacity)
       └──cancel──> (row deleted, capacity freed, no ban)

Rules enforced here:
- Authenticated signups start approved; anonymous ones start pending and hold
  capacity from the start, so a slot is never promised twice.
- Admission and row inserts share one transaction; a refused admission leaves
  no rows behind.
- Every transition is a conditional UPDATE/DELETE on the expected prior status,
  so two concurrent managers cannot both apply a transition.
- Notifications and calendar sync run after commit and never undo it.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from volunteer_slots.errors import (
    AlreadyConfirmed,
    AlreadyRejectedBanned,
    ConfirmationExpired,
    DomainRestricted,
    DuplicateActiveSignup,
    IntegrityViolation,
    InvalidConfirmationToken,
    InvalidTransition,
    LoginRequired,
    NotAuthorized,
    ProjectNotAcceptingSignups,
    ProjectNotFound,
    SignupNotFound,
    SignupsPaused,
    SlotNotFound,
    SlotTimeElapsed,
    UserNotFound,
)
from volunteer_slots.models.anonymous_signup import AnonymousSignup
from volunteer_slots.models.project import Project
from volunteer_slots.models.signup import HOLDING_STATUSES, Signup, SignupStatus
from volunteer_slots.models.user import User, UserEmail
from volunteer_slots.schemas.schedule import Slot
from volunteer_slots.services import anonymous_service, capacity_ledger
from volunteer_slots.services.authorization import is_project_manager, require_project_manager
from volunteer_slots.services.calendar_sync import CalendarSync, get_calendar_sync, sync_safely
from volunteer_slots.services.notifications import Notifier, deliver, get_notifier
from volunteer_slots.services.schedule_service import (
    ensure_utc,
    is_slot_time_elapsed,
    parse_schedule,
    resolve_slot,
    slot_bounds,
)
from volunteer_slots.services.status_clock import accepts_signups, derive_project_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Who is signing up: a registered user, or an anonymous e-mail address."""

    user_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def user(cls, user_id: str) -> "Identity":
        return cls(user_id=str(user_id))

    @classmethod
    def anonymous(cls, email: str, name: str, phone: Optional[str] = None) -> "Identity":
        return cls(email=anonymous_service.normalize_email(email), name=name, phone=phone)

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @property
    def key(self) -> str:
        if self.user_id:
            return f"user:{self.user_id}"
        return f"email:{anonymous_service.normalize_email(self.email)}"


@dataclass
class SignupResult:
    signup: Signup
    anonymous_signup: Optional[AnonymousSignup] = None
    # Plaintext token; only ever handed to the confirmation e-mail
    confirmation_token: Optional[str] = None

    @property
    def needs_confirmation(self) -> bool:
        return self.anonymous_signup is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _get_project(db: Session, project_id: str) -> Project:
    project = db.query(Project).filter(Project.project_id == str(project_id)).first()
    if not project:
        raise ProjectNotFound()
    return project


def _get_signup(db: Session, signup_id: str) -> Signup:
    signup = db.query(Signup).filter(Signup.signup_id == str(signup_id)).first()
    if not signup:
        raise SignupNotFound()
    return signup


def _slot_for_signup(project: Project, signup: Signup) -> Slot:
    """A stored signup must always resolve to a slot of its project."""
    try:
        return resolve_slot(parse_schedule(project.event_type, project.schedule), signup.schedule_id)
    except SlotNotFound:
        logger.error(
            "Signup %s references slot %r that project %s does not have",
            signup.signup_id, signup.schedule_id, project.project_id,
        )
        raise IntegrityViolation(f"Signup {signup.signup_id} references an unknown slot")


def _allowed_domains(project: Project) -> list[str]:
    domains = project.allowed_email_domains
    if not domains and project.organization is not None:
        domains = project.organization.allowed_email_domains
    return [d.strip().lower().lstrip("@") for d in (domains or []) if d and d.strip()]


def _identity_emails(db: Session, identity: Identity) -> list[str]:
    if identity.is_anonymous:
        return [identity.email] if identity.email else []
    user = db.query(User).filter(User.user_id == identity.user_id).first()
    if not user:
        return []
    verified = (
        db.query(UserEmail.email)
        .filter(UserEmail.user_id == user.user_id, UserEmail.verified_at.isnot(None))
        .all()
    )
    return [user.email] + [row.email for row in verified]


def _check_domain_restriction(db: Session, project: Project, identity: Identity) -> None:
    if not project.restrict_to_org_domains:
        return
    allowed = _allowed_domains(project)
    if not allowed:
        return
    for email in _identity_emails(db, identity):
        domain = email.rpartition("@")[2].lower()
        if domain in allowed:
            return
    raise DomainRestricted(
        "This project is restricted to users with the following email domains: "
        f"{', '.join(allowed)}. Please use a verified email with one of these domains.",
        allowed_domains=allowed,
    )


def _check_existing(db: Session, project_id: str, schedule_id: str, identity: Identity) -> None:
    existing = (
        db.query(Signup)
        .filter(
            Signup.project_id == project_id,
            Signup.schedule_id == schedule_id,
            Signup.identity_key == identity.key,
        )
        .first()
    )
    if existing is None:
        return
    if existing.status == SignupStatus.rejected:
        if identity.is_anonymous:
            raise AlreadyRejectedBanned(
                "This email has been rejected by the project coordinator. Contact them for more details."
            )
        raise AlreadyRejectedBanned()
    if existing.status == SignupStatus.pending:
        raise DuplicateActiveSignup(
            "An unconfirmed signup with this email already exists for this slot. Please check your email."
        )
    raise DuplicateActiveSignup()


def _transition(db: Session, signup: Signup, expected: SignupStatus, new_status: SignupStatus, **values) -> bool:
    """Move one signup from ``expected`` to ``new_status``; False if it had changed."""
    result = db.execute(
        update(Signup)
        .where(Signup.signup_id == signup.signup_id, Signup.status == expected)
        .values(status=new_status, updated_at=_utcnow(), **values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _contact(db: Session, signup: Signup) -> tuple[Optional[str], str]:
    """(email, display name) of whoever holds the signup."""
    if signup.user_id:
        user = db.query(User).filter(User.user_id == signup.user_id).first()
        if user:
            return user.email, user.display_name or "Volunteer"
        return None, "Volunteer"
    anon = signup.anonymous_signup
    if anon:
        return anon.email, anon.name or "Volunteer"
    return None, "Volunteer"


def _push_calendar(calendar: CalendarSync, project: Project, slot: Slot, signup_id: str) -> None:
    starts_at, ends_at = slot_bounds(slot, project.project_timezone)
    sync_safely(
        f"push signup {signup_id}",
        calendar.push_signup, signup_id, project.title, starts_at, ends_at, project.project_timezone,
    )


def create_signup(
    db: Session,
    identity: Identity,
    project_id: str,
    schedule_id: str,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
    calendar: Optional[CalendarSync] = None,
) -> SignupResult:
    """Sign ``identity`` up for one slot of a project."""
    now = now or _utcnow()
    notifier = notifier or get_notifier()
    calendar = calendar or get_calendar_sync()

    project = _get_project(db, project_id)
    slot = resolve_slot(parse_schedule(project.event_type, project.schedule), schedule_id)

    if project.pause_signups:
        raise SignupsPaused()

    # The stored status may lag; only a fresh derivation gates admission
    status = derive_project_status(project, now)
    if not accepts_signups(status):
        raise ProjectNotAcceptingSignups(f"This project is {status.value.replace('_', ' ')}", project_status=status.value)

    if is_slot_time_elapsed(slot, now, project.project_timezone):
        raise SlotTimeElapsed()

    if identity.is_anonymous:
        if project.require_login:
            raise LoginRequired()
        if not identity.email or not identity.name:
            raise LoginRequired("Anonymous signups need a name and an email address")
    elif not db.query(User.user_id).filter(User.user_id == identity.user_id).first():
        raise UserNotFound()

    _check_domain_restriction(db, project, identity)
    if identity.is_anonymous:
        anonymous_service.ensure_email_not_registered(db, identity.email)
    _check_existing(db, project.project_id, slot.schedule_id, identity)

    token = None
    anonymous_signup = None
    try:
        capacity_ledger.admit(db, project.project_id, slot.schedule_id, slot.capacity)
        signup = Signup(
            project_id=project.project_id,
            schedule_id=slot.schedule_id,
            user_id=identity.user_id,
            identity_key=identity.key,
            status=SignupStatus.pending if identity.is_anonymous else SignupStatus.approved,
            created_at=now,
            updated_at=now,
        )
        db.add(signup)
        db.flush()
        if identity.is_anonymous:
            token, digest = anonymous_service.issue_token()
            anonymous_signup = AnonymousSignup(
                project_id=project.project_id,
                signup_id=signup.signup_id,
                email=identity.email,
                name=identity.name,
                phone_number=identity.phone,
                token_hash=digest,
                created_at=now,
            )
            db.add(anonymous_signup)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Concurrent duplicate signup for %s on slot %s of project %s", identity.key, slot.schedule_id, project_id)
        raise DuplicateActiveSignup()
    except Exception:
        db.rollback()
        raise

    db.refresh(signup)
    logger.info(
        "Created %s signup %s for %s on slot %s of project %s",
        signup.status.value, signup.signup_id, identity.key, slot.schedule_id, project.project_id,
    )

    if anonymous_signup is not None:
        db.refresh(anonymous_signup)
        url = anonymous_service.confirmation_url(anonymous_signup.anonymous_signup_id, token)
        deliver(
            f"confirmation e-mail for signup {signup.signup_id}",
            lambda: notifier.send_confirmation_email(identity.email, identity.name, project.title, url),
        )
    else:
        email, name = _contact(db, signup)
        if email:
            deliver(
                f"approval e-mail for signup {signup.signup_id}",
                lambda: notifier.send_approval_email(email, name, project.title, slot.schedule_id),
            )
        _push_calendar(calendar, project, slot, signup.signup_id)

    return SignupResult(signup=signup, anonymous_signup=anonymous_signup, confirmation_token=token)


def confirm_anonymous(
    db: Session,
    token: str,
    anonymous_signup_id: Optional[str] = None,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
    calendar: Optional[CalendarSync] = None,
) -> Signup:
    """Redeem a confirmation token: pending -> approved, exactly once."""
    now = now or _utcnow()
    notifier = notifier or get_notifier()
    calendar = calendar or get_calendar_sync()

    anonymous_signup = anonymous_service.find_by_token(db, token, anonymous_signup_id)
    if anonymous_signup is None:
        raise InvalidConfirmationToken()
    if anonymous_signup.confirmed_at is not None:
        raise AlreadyConfirmed()
    if anonymous_service.is_expired(anonymous_signup, now):
        raise ConfirmationExpired()

    signup = anonymous_signup.signup
    if signup is None:
        logger.error("Anonymous signup %s has no linked signup", anonymous_signup.anonymous_signup_id)
        raise IntegrityViolation("Anonymous signup is not linked to a signup")
    if signup.status == SignupStatus.rejected:
        raise AlreadyRejectedBanned(
            "This email has been rejected by the project coordinator. Contact them for more details."
        )
    if signup.status != SignupStatus.pending:
        raise InvalidTransition(f"Signup is already {signup.status.value}")

    signup_id = signup.signup_id
    try:
        marked = db.execute(
            update(AnonymousSignup)
            .where(
                AnonymousSignup.anonymous_signup_id == anonymous_signup.anonymous_signup_id,
                AnonymousSignup.confirmed_at.is_(None),
            )
            .values(confirmed_at=now)
            .execution_options(synchronize_session=False)
        ).rowcount
        if marked != 1:
            db.rollback()
            raise AlreadyConfirmed()
        if not _transition(db, signup, SignupStatus.pending, SignupStatus.approved):
            db.rollback()
            raise InvalidTransition("Signup changed while it was being confirmed")
        db.commit()
    except (AlreadyConfirmed, InvalidTransition):
        raise
    except Exception:
        db.rollback()
        raise

    signup = _get_signup(db, signup_id)
    project = signup.project
    slot = _slot_for_signup(project, signup)
    logger.info("Anonymous signup %s confirmed; signup %s approved", anonymous_signup.anonymous_signup_id, signup_id)

    email, name = _contact(db, signup)
    if email:
        deliver(
            f"approval e-mail for signup {signup_id}",
            lambda: notifier.send_approval_email(email, name, project.title, slot.schedule_id),
        )
    _push_calendar(calendar, project, slot, signup_id)
    return signup


def reject(
    db: Session,
    signup_id: str,
    actor_user_id: Optional[str],
    notifier: Optional[Notifier] = None,
    calendar: Optional[CalendarSync] = None,
) -> Signup:
    """Reject a pending or approved signup; the identity is barred from this slot."""
    notifier = notifier or get_notifier()
    calendar = calendar or get_calendar_sync()

    signup = _get_signup(db, signup_id)
    project = signup.project
    require_project_manager(db, actor_user_id, project)

    previous = signup.status
    if previous == SignupStatus.rejected:
        raise InvalidTransition("Signup is already rejected")
    if previous == SignupStatus.attended:
        raise InvalidTransition("Attendance has been recorded; the signup can no longer be rejected")

    reservation = capacity_ledger.Reservation(project.project_id, signup.schedule_id)
    try:
        if not _transition(db, signup, previous, SignupStatus.rejected):
            db.rollback()
            raise InvalidTransition("Signup changed while it was being rejected")
        if previous in HOLDING_STATUSES:
            capacity_ledger.release(db, reservation)
        db.commit()
    except InvalidTransition:
        raise
    except Exception:
        db.rollback()
        raise

    signup = _get_signup(db, signup_id)
    logger.info("Signup %s rejected by %s (was %s)", signup_id, actor_user_id, previous.value)

    email, name = _contact(db, signup)
    if email:
        deliver(
            f"rejection notice for signup {signup_id}",
            lambda: notifier.send_rejection_notification(email, name, project.title, project.project_id),
        )
    sync_safely(f"remove signup {signup_id}", calendar.remove_signup, signup_id)
    return signup


def unreject(
    db: Session,
    signup_id: str,
    actor_user_id: Optional[str],
    notifier: Optional[Notifier] = None,
    calendar: Optional[CalendarSync] = None,
) -> Signup:
    """Manager override: rejected -> approved, only if the slot still has room."""
    notifier = notifier or get_notifier()
    calendar = calendar or get_calendar_sync()

    signup = _get_signup(db, signup_id)
    project = signup.project
    require_project_manager(db, actor_user_id, project)

    if signup.status != SignupStatus.rejected:
        raise InvalidTransition(f"Only rejected signups can be unrejected (signup is {signup.status.value})")

    slot = _slot_for_signup(project, signup)
    try:
        capacity_ledger.admit(db, project.project_id, slot.schedule_id, slot.capacity)
        if not _transition(db, signup, SignupStatus.rejected, SignupStatus.approved):
            db.rollback()
            raise InvalidTransition("Signup changed while it was being unrejected")
        db.commit()
    except InvalidTransition:
        raise
    except Exception:
        db.rollback()
        raise

    signup = _get_signup(db, signup_id)
    logger.info("Signup %s unrejected by %s", signup_id, actor_user_id)

    email, name = _contact(db, signup)
    if email:
        deliver(
            f"approval e-mail for signup {signup_id}",
            lambda: notifier.send_approval_email(email, name, project.title, slot.schedule_id),
        )
    _push_calendar(calendar, project, slot, signup_id)
    return signup


def cancel_signup(
    db: Session,
    signup_id: str,
    actor_user_id: Optional[str] = None,
    anonymous_token: Optional[str] = None,
    now: Optional[datetime] = None,
    calendar: Optional[CalendarSync] = None,
) -> None:
    """Withdraw a signup: the record is deleted and its unit freed. No ban."""
    now = now or _utcnow()
    calendar = calendar or get_calendar_sync()

    signup = _get_signup(db, signup_id)
    project = signup.project

    is_owner = bool(actor_user_id) and signup.user_id == str(actor_user_id)
    holds_token = (
        signup.anonymous_signup is not None
        and anonymous_service.verify_token(signup.anonymous_signup, anonymous_token)
    )
    if not (is_owner or holds_token or is_project_manager(db, actor_user_id, project)):
        raise NotAuthorized("You don't have permission to cancel this signup")

    previous = signup.status
    if previous not in (SignupStatus.pending, SignupStatus.approved):
        raise InvalidTransition(f"A {previous.value} signup cannot be cancelled")

    slot = _slot_for_signup(project, signup)
    if is_slot_time_elapsed(slot, now, project.project_timezone):
        raise SlotTimeElapsed("This time slot has already ended")

    reservation = capacity_ledger.Reservation(project.project_id, signup.schedule_id)
    try:
        db.execute(
            delete(AnonymousSignup)
            .where(AnonymousSignup.signup_id == signup.signup_id)
            .execution_options(synchronize_session=False)
        )
        removed = db.execute(
            delete(Signup)
            .where(Signup.signup_id == signup.signup_id, Signup.status == previous)
            .execution_options(synchronize_session=False)
        ).rowcount
        if removed != 1:
            db.rollback()
            raise InvalidTransition("Signup changed while it was being cancelled")
        capacity_ledger.release(db, reservation)
        db.commit()
    except InvalidTransition:
        raise
    except Exception:
        db.rollback()
        raise

    logger.info("Signup %s cancelled (was %s) on slot %s of project %s", signup_id, previous.value, slot.schedule_id, project.project_id)
    sync_safely(f"remove signup {signup_id}", calendar.remove_signup, signup_id)


def _check_in(db: Session, signup: Signup, slot: Slot, project: Project, now: datetime) -> bool:
    """approved -> attended, stamping check-in and the scheduled check-out.

    Returns False when the signup was already attended, which leaves the
    recorded times untouched.
    """
    if signup.status == SignupStatus.attended:
        return False
    if signup.status != SignupStatus.approved:
        raise InvalidTransition(f"Only approved signups can be checked in (signup is {signup.status.value})")

    _, scheduled_end = slot_bounds(slot, project.project_timezone)
    try:
        if not _transition(
            db, signup, SignupStatus.approved, SignupStatus.attended,
            check_in_time=ensure_utc(now), check_out_time=ensure_utc(scheduled_end),
        ):
            db.rollback()
            raise InvalidTransition("Signup changed while it was being checked in")
        db.commit()
    except InvalidTransition:
        raise
    except Exception:
        db.rollback()
        raise
    return True


def mark_attended(db: Session, signup_id: str, actor_user_id: Optional[str], now: Optional[datetime] = None) -> Signup:
    """approved -> attended; checking in an attended signup again is a no-op."""
    now = now or _utcnow()

    signup = _get_signup(db, signup_id)
    project = signup.project
    require_project_manager(db, actor_user_id, project)

    if _check_in(db, signup, _slot_for_signup(project, signup), project, now):
        logger.info("Signup %s checked in by %s", signup_id, actor_user_id)
    else:
        logger.info("Signup %s was already checked in", signup_id)
    return _get_signup(db, signup_id)


def check_out(
    db: Session,
    signup_id: str,
    actor_user_id: Optional[str],
    at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Signup:
    """Record when an attended volunteer left (default: now).

    A time before the check-in is moved up to the check-in time.
    """
    now = now or _utcnow()

    signup = _get_signup(db, signup_id)
    is_owner = bool(actor_user_id) and signup.user_id == str(actor_user_id)
    if not (is_owner or is_project_manager(db, actor_user_id, signup.project)):
        raise NotAuthorized("You don't have permission to check out this volunteer")
    if signup.status != SignupStatus.attended or signup.check_in_time is None:
        raise InvalidTransition("Cannot check out before check-in")

    check_in_time = ensure_utc(signup.check_in_time)
    check_out_time = max(ensure_utc(at or now), check_in_time)
    try:
        updated = db.execute(
            update(Signup)
            .where(Signup.signup_id == signup.signup_id, Signup.status == SignupStatus.attended)
            .values(check_out_time=check_out_time, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        ).rowcount
        if updated != 1:
            db.rollback()
            raise InvalidTransition("Signup changed while it was being checked out")
        db.commit()
    except InvalidTransition:
        raise
    except Exception:
        db.rollback()
        raise

    logger.info("Signup %s checked out at %s by %s", signup_id, check_out_time.isoformat(), actor_user_id)
    return _get_signup(db, signup_id)


def lookup_email_status(db: Session, project_id: str, schedule_id: str, email: str) -> dict:
    """Tell a volunteer at the door whether ``email`` has a signup for this slot."""
    project = _get_project(db, project_id)
    resolve_slot(parse_schedule(project.event_type, project.schedule), schedule_id)
    email = anonymous_service.normalize_email(email)

    user_id = anonymous_service.find_registered_user_id(db, email)
    if user_id:
        signup = (
            db.query(Signup)
            .filter(
                Signup.project_id == project.project_id,
                Signup.schedule_id == schedule_id,
                Signup.user_id == user_id,
            )
            .first()
        )
        if signup is None:
            return {
                "found": True,
                "is_registered": True,
                "message": "You have an account but are not signed up for this session. "
                           "Please log in and sign up first.",
            }
        return {
            "found": True,
            "is_registered": True,
            "signup_id": signup.signup_id,
            "status": signup.status.value,
            "message": f"Account found. Signup status for this session: {signup.status.value}. "
                       "Please log in to check in.",
        }

    signups = (
        db.query(Signup)
        .filter(Signup.project_id == project.project_id, Signup.identity_key == f"email:{email}")
        .all()
    )
    signup = next((s for s in signups if s.schedule_id == schedule_id), None)
    if signup is not None:
        anonymous = signup.anonymous_signup
        if signup.status == SignupStatus.approved:
            message = "Anonymous signup found and approved for this session."
        else:
            message = f"Anonymous signup found for this session. Status: {signup.status.value}."
        return {
            "found": True,
            "is_registered": False,
            "signup_id": signup.signup_id,
            "anonymous_signup_id": anonymous.anonymous_signup_id if anonymous else None,
            "status": signup.status.value,
            "message": message,
        }
    if signups:
        return {
            "found": True,
            "is_registered": False,
            "message": "You have an anonymous signup for this project, but for a different session.",
        }
    return {"found": False, "is_registered": False, "message": "No signup found for this email and session."}


def check_in_anonymous(
    db: Session,
    project_id: str,
    schedule_id: str,
    email: str,
    now: Optional[datetime] = None,
) -> Signup:
    """Self check-in by e-mail for an anonymous volunteer; repeat check-ins are no-ops."""
    now = now or _utcnow()

    project = _get_project(db, project_id)
    slot = resolve_slot(parse_schedule(project.event_type, project.schedule), schedule_id)
    email = anonymous_service.normalize_email(email)

    signup = (
        db.query(Signup)
        .filter(
            Signup.project_id == project.project_id,
            Signup.schedule_id == slot.schedule_id,
            Signup.identity_key == f"email:{email}",
        )
        .first()
    )
    if signup is None:
        raise SignupNotFound("No signup found for this email and session")
    if signup.status == SignupStatus.rejected:
        raise AlreadyRejectedBanned(
            "This email has been rejected by the project coordinator. Contact them for more details."
        )
    if signup.status == SignupStatus.pending:
        raise InvalidTransition("Please confirm your signup from the e-mail we sent before checking in")

    signup_id = signup.signup_id
    if _check_in(db, signup, slot, project, now):
        logger.info("Anonymous signup %s checked in by e-mail", signup_id)
    return _get_signup(db, signup_id)


def list_signups(
    db: Session,
    project_id: str,
    schedule_id: Optional[str] = None,
    statuses: Optional[list[SignupStatus]] = None,
) -> list[Signup]:
    _get_project(db, project_id)
    query = db.query(Signup).filter(Signup.project_id == str(project_id))
    if schedule_id:
        query = query.filter(Signup.schedule_id == schedule_id)
    if statuses:
        query = query.filter(Signup.status.in_(statuses))
    return query.order_by(Signup.created_at).all()
