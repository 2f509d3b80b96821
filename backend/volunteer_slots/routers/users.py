"""User API routes."""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from volunteer_slots.database import get_db
from volunteer_slots.errors import UserNotFound
from volunteer_slots.models.user import User, UserEmail
from volunteer_slots.schemas.user import UserCreate, UserEmailAdd, UserEmailOut, UserOut, UserUpdate
from volunteer_slots.services.schedule_service import get_timezone

logger = logging.getLogger(__name__)
router = APIRouter()


def _email_taken(db: Session, email: str) -> bool:
    return bool(
        db.query(User.user_id).filter(func.lower(User.email) == email).first()
        or db.query(UserEmail.email_id).filter(func.lower(UserEmail.email) == email).first()
    )


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create a new user account."""
    email = payload.email.lower()
    if _email_taken(db, email):
        raise HTTPException(status_code=409, detail="A user with this email already exists")
    get_timezone(payload.default_timezone)

    user = User(display_name=payload.display_name, email=email, default_timezone=payload.default_timezone)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.display_name)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users."""
    return db.query(User).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise UserNotFound()
    return user


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    """Update user preferences (partial update)."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise UserNotFound()
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("default_timezone"):
        get_timezone(changes["default_timezone"])
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Updated user %s", user_id)
    return user


@router.post("/{user_id}/emails", response_model=UserEmailOut, status_code=status.HTTP_201_CREATED)
def add_email(user_id: str, payload: UserEmailAdd, db: Session = Depends(get_db)):
    """Attach a secondary address; only verified ones count for domain-restricted projects."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise UserNotFound()
    email = payload.email.lower()
    if _email_taken(db, email):
        raise HTTPException(status_code=409, detail="This email is already in use")

    user_email = UserEmail(
        user_id=user.user_id,
        email=email,
        verified_at=datetime.now(timezone.utc) if payload.verified else None,
    )
    db.add(user_email)
    db.commit()
    db.refresh(user_email)
    logger.info("Added %s email %s to user %s", "verified" if payload.verified else "unverified", email, user_id)
    return user_email
