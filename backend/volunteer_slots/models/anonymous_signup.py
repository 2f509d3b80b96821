"""AnonymousSignup ORM model: contact details and confirmation token for a signup made without an account."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from volunteer_slots.database import Base
from volunteer_slots.models.project import _utcnow


class AnonymousSignup(Base):
    __tablename__ = "anonymous_signups"

    anonymous_signup_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(36), ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False)
    signup_id = Column(
        String(36),
        ForeignKey("project_signups.signup_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    email = Column(String(320), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    phone_number = Column(String(30), nullable=True)
    token_hash = Column(String(64), nullable=False, unique=True)  # sha256 hex of the single-use token
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    signup = relationship("Signup", back_populates="anonymous_signup")
