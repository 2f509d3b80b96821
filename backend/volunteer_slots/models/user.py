"""User and UserEmail ORM models."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from volunteer_slots.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    display_name = Column(String(100), nullable=False)
    email = Column(String(320), nullable=False, unique=True)  # stored lower-cased
    default_timezone = Column(String(50), nullable=False, default="UTC")  # IANA tz
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    secondary_emails = relationship("UserEmail", back_populates="user", cascade="all, delete-orphan")


class UserEmail(Base):
    """Secondary address; only verified ones count for domain restrictions."""

    __tablename__ = "user_emails"

    email_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    email = Column(String(320), nullable=False, unique=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="secondary_emails")
