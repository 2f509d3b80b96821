"""Anonymous confirmation flow.

Tokens are random, single-use and bound to exactly one AnonymousSignup row.
Only the SHA-256 digest is stored; the plaintext travels once, inside the
confirmation URL e-mailed to the volunteer. Verification always re-reads the
row and compares digests server-side.
"""
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, func
from sqlalchemy.orm import Session

from volunteer_slots.config import settings
from volunteer_slots.errors import RegisteredEmailConflict
from volunteer_slots.models.anonymous_signup import AnonymousSignup
from volunteer_slots.models.signup import Signup, SignupStatus
from volunteer_slots.models.user import User, UserEmail
from volunteer_slots.services import capacity_ledger
from volunteer_slots.services.schedule_service import ensure_utc

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def issue_token() -> tuple[str, str]:
    """Return (plaintext token, digest to store)."""
    token = secrets.token_urlsafe(TOKEN_BYTES)
    return token, hash_token(token)


def verify_token(anonymous_signup: AnonymousSignup, token: Optional[str]) -> bool:
    if not token:
        return False
    return hmac.compare_digest(anonymous_signup.token_hash, hash_token(token))


def confirmation_url(anonymous_signup_id: str, token: str) -> str:
    return f"{settings.SITE_URL.rstrip('/')}/anonymous/{anonymous_signup_id}/confirm?token={token}"


def confirmation_ttl() -> Optional[timedelta]:
    hours = settings.ANONYMOUS_CONFIRMATION_TTL_HOURS
    return timedelta(hours=hours) if hours > 0 else None


def is_expired(anonymous_signup: AnonymousSignup, now: datetime) -> bool:
    ttl = confirmation_ttl()
    if ttl is None or anonymous_signup.confirmed_at is not None:
        return False
    return ensure_utc(now) > ensure_utc(anonymous_signup.created_at) + ttl


def find_registered_user_id(db: Session, email: str) -> Optional[str]:
    """Owner of ``email`` as a primary or verified secondary address, if any."""
    email = normalize_email(email)
    primary = db.query(User.user_id).filter(func.lower(User.email) == email).first()
    if primary:
        return primary.user_id
    secondary = (
        db.query(UserEmail.user_id)
        .filter(func.lower(UserEmail.email) == email, UserEmail.verified_at.isnot(None))
        .first()
    )
    return secondary.user_id if secondary else None


def ensure_email_not_registered(db: Session, email: str) -> None:
    """An address that belongs to an account must log in instead.

    Checked once, when the anonymous signup is created; registering later is
    allowed and does not touch existing anonymous signups.
    """
    email = normalize_email(email)
    if find_registered_user_id(db, email):
        logger.info("Anonymous signup refused: %s belongs to a registered account", email)
        raise RegisteredEmailConflict()


def find_by_token(db: Session, token: str, anonymous_signup_id: Optional[str] = None) -> Optional[AnonymousSignup]:
    query = db.query(AnonymousSignup).filter(AnonymousSignup.token_hash == hash_token(token or ""))
    if anonymous_signup_id:
        query = query.filter(AnonymousSignup.anonymous_signup_id == str(anonymous_signup_id))
    return query.first()


def expire_unconfirmed(db: Session, now: datetime) -> int:
    """Delete pending anonymous signups past the confirmation TTL and free their slots.

    Each expiry commits on its own; a row confirmed or rejected in the meantime
    is left alone.
    """
    ttl = confirmation_ttl()
    if ttl is None:
        return 0

    cutoff = ensure_utc(now) - ttl
    candidates = (
        db.query(AnonymousSignup.anonymous_signup_id, Signup.signup_id, Signup.project_id, Signup.schedule_id)
        .join(Signup, AnonymousSignup.signup_id == Signup.signup_id)
        .filter(
            AnonymousSignup.confirmed_at.is_(None),
            AnonymousSignup.created_at < cutoff,
            Signup.status == SignupStatus.pending,
        )
        .all()
    )

    expired = 0
    for anonymous_signup_id, signup_id, project_id, schedule_id in candidates:
        try:
            removed = db.execute(
                delete(AnonymousSignup)
                .where(
                    AnonymousSignup.anonymous_signup_id == anonymous_signup_id,
                    AnonymousSignup.confirmed_at.is_(None),
                )
                .execution_options(synchronize_session=False)
            ).rowcount
            if removed != 1:
                db.rollback()
                continue
            removed = db.execute(
                delete(Signup)
                .where(Signup.signup_id == signup_id, Signup.status == SignupStatus.pending)
                .execution_options(synchronize_session=False)
            ).rowcount
            if removed != 1:
                db.rollback()
                continue
            capacity_ledger.release(db, capacity_ledger.Reservation(project_id, schedule_id))
            db.commit()
        except Exception:
            db.rollback()
            raise
        expired += 1
        logger.info("Expired unconfirmed anonymous signup %s (slot %s of project %s)", signup_id, schedule_id, project_id)

    return expired
