"""Signup and scheduling error taxonomy.

Every error is an ``HTTPException`` so services can raise it directly and the
routers need no translation layer. ``detail`` always carries a machine-readable
``code`` next to the user-facing ``message`` so clients can tell "slot just
filled" apart from "you were rejected" or "you already signed up".

Categories:
- validation: malformed input or unknown ids, never retried
- admission: the slot or project refused the signup right now
- state conflict: terminal, needs a human to resolve
- integrity: a broken invariant in stored data, logged at ERROR
"""
from typing import Optional

from fastapi import HTTPException, status


class SignupError(HTTPException):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "signup_error"
    category: str = "validation"
    default_message: str = "The request could not be completed."

    def __init__(self, message: Optional[str] = None, **extra):
        self.message = message or self.default_message
        detail = {"code": self.code, "message": self.message}
        detail.update(extra)
        super().__init__(status_code=self.status_code, detail=detail)


# --- validation ---------------------------------------------------------------
class ProjectNotFound(SignupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "project_not_found"
    default_message = "Project not found"


class SignupNotFound(SignupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "signup_not_found"
    default_message = "Signup not found"


class SlotNotFound(SignupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "slot_not_found"
    default_message = "Invalid schedule slot"


class InvalidSchedule(SignupError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "invalid_schedule"
    default_message = "The schedule does not match the project's event type"


class UserNotFound(SignupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "user_not_found"
    default_message = "User not found"


class OrganizationNotFound(SignupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "organization_not_found"
    default_message = "Organization not found"


class CancellationReasonRequired(SignupError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "cancellation_reason_required"
    default_message = "A cancellation reason is required"


class InvalidConfirmationToken(SignupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "invalid_confirmation_token"
    default_message = "The confirmation link is invalid or has expired. Please sign up again."


# --- admission ----------------------------------------------------------------
class CapacityExceeded(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "capacity_exceeded"
    category = "admission"
    default_message = "This slot is full"


class ProjectNotAcceptingSignups(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "project_not_accepting_signups"
    category = "admission"
    default_message = "This project is no longer accepting signups"


class SignupsPaused(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "signups_paused"
    category = "admission"
    default_message = "Signups for this project are temporarily paused by the organizer"


class SlotTimeElapsed(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "slot_time_elapsed"
    category = "admission"
    default_message = "This time slot has already passed"


class LoginRequired(SignupError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "login_required"
    category = "admission"
    default_message = "You must be logged in to sign up for this project"


class DomainRestricted(SignupError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "domain_restricted"
    category = "admission"
    default_message = "This project is restricted to specific email domains"


class RegisteredEmailConflict(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "registered_email_conflict"
    category = "admission"
    default_message = (
        "This email is associated with an existing account. "
        "Please log in to sign up for this project."
    )


# --- state conflict -----------------------------------------------------------
class AlreadyRejectedBanned(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_rejected"
    category = "state_conflict"
    default_message = "You have been rejected for this slot and cannot sign up again."


class DuplicateActiveSignup(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_signup"
    category = "state_conflict"
    default_message = "You have already signed up for this slot"


class AlreadyConfirmed(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_confirmed"
    category = "state_conflict"
    default_message = "This signup has already been confirmed."


class ConfirmationExpired(SignupError):
    status_code = status.HTTP_410_GONE
    code = "confirmation_expired"
    category = "state_conflict"
    default_message = "This confirmation link has expired. Please sign up again."


class InvalidTransition(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"
    category = "state_conflict"
    default_message = "This signup cannot be changed from its current state"


class ProjectAlreadyCancelled(SignupError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "project_already_cancelled"
    category = "state_conflict"
    default_message = "Project is already cancelled"


class CancellationWindowClosed(SignupError):
    status_code = status.HTTP_409_CONFLICT
    code = "cancellation_window_closed"
    category = "state_conflict"
    default_message = "Project can only be cancelled more than 24 hours before start time"


# --- authorization ------------------------------------------------------------
class NotAuthorized(SignupError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "not_authorized"
    category = "authorization"
    default_message = "You don't have permission to manage this project"


# --- integrity ----------------------------------------------------------------
class IntegrityViolation(SignupError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "integrity_violation"
    category = "integrity"
    default_message = "Stored signup data is inconsistent"
