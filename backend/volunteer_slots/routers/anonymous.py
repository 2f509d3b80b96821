"""Anonymous signup confirmation route (the link sent by e-mail)."""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from volunteer_slots.database import get_db
from volunteer_slots.schemas.signup import SignupOut
from volunteer_slots.services import signup_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{anonymous_signup_id}/confirm", response_model=SignupOut)
def confirm(
    anonymous_signup_id: str,
    token: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    """Redeem the single-use confirmation token."""
    return signup_service.confirm_anonymous(db, token, anonymous_signup_id)
