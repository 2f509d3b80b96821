"""Signup API routes; every transition goes through signup_service."""
import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from volunteer_slots.database import get_db
from volunteer_slots.models.signup import SignupStatus
from volunteer_slots.schemas.signup import CancelSignupRequest, SignupCreate, SignupCreated, SignupOut
from volunteer_slots.services import signup_service
from volunteer_slots.services.signup_service import Identity

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=SignupCreated, status_code=status.HTTP_201_CREATED)
def create_signup(payload: SignupCreate, db: Session = Depends(get_db)):
    """Sign up for one slot, as a user or anonymously (confirmation e-mail follows)."""
    if payload.user_id:
        identity = Identity.user(payload.user_id)
    else:
        identity = Identity.anonymous(
            email=payload.anonymous.email,
            name=payload.anonymous.name,
            phone=payload.anonymous.phone_number,
        )
    result = signup_service.create_signup(db, identity, payload.project_id, payload.schedule_id)
    if result.needs_confirmation:
        message = "Please check your email to confirm your signup."
    else:
        message = "You're signed up."
    return SignupCreated(
        signup=SignupOut.model_validate(result.signup),
        needs_confirmation=result.needs_confirmation,
        message=message,
    )


@router.get("/", response_model=list[SignupOut])
def list_signups(
    project_id: str = Query(...),
    schedule_id: Optional[str] = Query(None),
    signup_status: Optional[list[SignupStatus]] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    """List signups of a project, optionally for one slot or some statuses."""
    return signup_service.list_signups(db, project_id, schedule_id, signup_status)


@router.post("/{signup_id}/reject", response_model=SignupOut)
def reject_signup(
    signup_id: str,
    actor_user_id: str = Query(..., description="ID of the manager rejecting the signup"),
    db: Session = Depends(get_db),
):
    """Reject a signup; the volunteer cannot sign up for this slot again."""
    return signup_service.reject(db, signup_id, actor_user_id)


@router.post("/{signup_id}/unreject", response_model=SignupOut)
def unreject_signup(
    signup_id: str,
    actor_user_id: str = Query(..., description="ID of the manager lifting the rejection"),
    db: Session = Depends(get_db),
):
    """Lift a rejection if the slot still has room."""
    return signup_service.unreject(db, signup_id, actor_user_id)


@router.post("/{signup_id}/attend", response_model=SignupOut)
def mark_attended(
    signup_id: str,
    actor_user_id: str = Query(..., description="ID of the manager checking the volunteer in"),
    db: Session = Depends(get_db),
):
    """Record attendance for an approved signup."""
    return signup_service.mark_attended(db, signup_id, actor_user_id)


@router.post("/{signup_id}/check-out", response_model=SignupOut)
def check_out(
    signup_id: str,
    actor_user_id: str = Query(..., description="ID of the volunteer or a project manager"),
    at: Optional[datetime] = Query(None, description="Check-out time; defaults to now"),
    db: Session = Depends(get_db),
):
    """Record when an attended volunteer left."""
    return signup_service.check_out(db, signup_id, actor_user_id, at=at)


@router.post("/{signup_id}/cancel", status_code=status.HTTP_204_NO_CONTENT)
def cancel_signup(signup_id: str, payload: CancelSignupRequest, db: Session = Depends(get_db)):
    """Withdraw a signup (owner, anonymous token holder or project manager)."""
    signup_service.cancel_signup(
        db,
        signup_id,
        actor_user_id=payload.actor_user_id,
        anonymous_token=payload.anonymous_token,
    )
