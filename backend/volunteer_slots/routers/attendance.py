"""Door check-in routes for volunteers arriving at a project."""
import logging
from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr
from sqlalchemy.orm import Session

from volunteer_slots.database import get_db
from volunteer_slots.schemas.signup import AnonymousCheckIn, EmailLookupOut, SignupOut
from volunteer_slots.services import signup_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{project_id}/lookup", response_model=EmailLookupOut)
def lookup_email(
    project_id: str,
    schedule_id: str = Query(...),
    email: EmailStr = Query(...),
    db: Session = Depends(get_db),
):
    """Whether an e-mail address has a signup for one slot."""
    return signup_service.lookup_email_status(db, project_id, schedule_id, email)


@router.post("/{project_id}/check-in", response_model=SignupOut)
def check_in_anonymous(project_id: str, payload: AnonymousCheckIn, db: Session = Depends(get_db)):
    """Anonymous self check-in by e-mail; checking in twice returns the first record."""
    return signup_service.check_in_anonymous(db, project_id, payload.schedule_id, payload.email)
