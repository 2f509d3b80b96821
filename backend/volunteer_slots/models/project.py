"""Project ORM model: a volunteer opportunity with one schedule topology."""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum as SAEnum, ForeignKey, JSON, String
from sqlalchemy.orm import relationship

from volunteer_slots.database import Base


class EventType(str, enum.Enum):
    one_time = "oneTime"
    multi_day = "multiDay"
    same_day_multi_area = "sameDayMultiArea"


class ProjectStatus(str, enum.Enum):
    upcoming = "upcoming"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Project(Base):
    __tablename__ = "projects"

    project_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    location = Column(String(500), nullable=True)
    creator_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    organization_id = Column(String(36), ForeignKey("organizations.organization_id"), nullable=True)
    event_type = Column(SAEnum(EventType), nullable=False)
    schedule = Column(JSON, nullable=False)  # {"oneTime": {...}} | {"multiDay": [...]} | {"sameDayMultiArea": {...}}
    project_timezone = Column(String(50), nullable=False, default="UTC")  # IANA tz
    # Cache of the last derived status; admission never trusts it
    status = Column(SAEnum(ProjectStatus), nullable=False, default=ProjectStatus.upcoming)
    pause_signups = Column(Boolean, nullable=False, default=False)
    require_login = Column(Boolean, nullable=False, default=False)
    restrict_to_org_domains = Column(Boolean, nullable=False, default=False)
    allowed_email_domains = Column(JSON, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    organization = relationship("Organization")
    signups = relationship("Signup", back_populates="project", cascade="all, delete-orphan")
    slot_counters = relationship("SlotCounter", cascade="all, delete-orphan")
