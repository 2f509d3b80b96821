"""Organization and OrganizationMember ORM models."""
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SAEnum, ForeignKey, JSON, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from volunteer_slots.database import Base


class OrganizationRole(str, enum.Enum):
    admin = "admin"
    staff = "staff"
    member = "member"


# Roles allowed to manage any project of the organization
MANAGER_ROLES = (OrganizationRole.admin, OrganizationRole.staff)


class Organization(Base):
    __tablename__ = "organizations"

    organization_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(150), nullable=False)
    created_by = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    allowed_email_domains = Column(JSON, nullable=True, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship("OrganizationMember", back_populates="organization", cascade="all, delete-orphan")


class OrganizationMember(Base):
    __tablename__ = "organization_members"

    organization_id = Column(String(36), ForeignKey("organizations.organization_id"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), primary_key=True)
    role = Column(SAEnum(OrganizationRole), nullable=False, default=OrganizationRole.member)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    organization = relationship("Organization", back_populates="members")
