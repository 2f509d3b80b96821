"""Signup ORM model: one identity's claim on one slot."""
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SAEnum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from volunteer_slots.database import Base
from volunteer_slots.models.project import _utcnow


class SignupStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    attended = "attended"


# Statuses that occupy a unit in the slot counter
HOLDING_STATUSES = (SignupStatus.pending, SignupStatus.approved, SignupStatus.attended)


class Signup(Base):
    __tablename__ = "project_signups"
    # One record per identity and slot; rejected rows stay behind as the ban
    __table_args__ = (
        UniqueConstraint("project_id", "schedule_id", "identity_key", name="uq_signup_identity_slot"),
    )

    signup_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(36), ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True)
    schedule_id = Column(String(255), nullable=False)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    identity_key = Column(String(320), nullable=False)  # "user:<id>" or "email:<address>"
    status = Column(SAEnum(SignupStatus), nullable=False)
    check_in_time = Column(DateTime(timezone=True), nullable=True)
    check_out_time = Column(DateTime(timezone=True), nullable=True)  # defaults to the slot end on check-in
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    project = relationship("Project", back_populates="signups")
    anonymous_signup = relationship(
        "AnonymousSignup",
        back_populates="signup",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None
