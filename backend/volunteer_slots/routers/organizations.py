"""Organization management API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from volunteer_slots.database import get_db
from volunteer_slots.errors import OrganizationNotFound, UserNotFound
from volunteer_slots.models.organization import Organization, OrganizationMember, OrganizationRole
from volunteer_slots.models.user import User
from volunteer_slots.schemas.organization import (
    OrganizationCreate,
    OrganizationMemberAdd,
    OrganizationMemberOut,
    OrganizationOut,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _normalize_domains(domains):
    return [d.strip().lower().lstrip("@") for d in (domains or []) if d and d.strip()]


@router.post("/", response_model=OrganizationOut, status_code=status.HTTP_201_CREATED)
def create_organization(payload: OrganizationCreate, db: Session = Depends(get_db)):
    """Create a new organization. Creator is automatically added as admin."""
    creator = db.query(User).filter(User.user_id == payload.created_by).first()
    if not creator:
        raise UserNotFound("Creator user not found")

    organization = Organization(
        name=payload.name,
        created_by=payload.created_by,
        allowed_email_domains=_normalize_domains(payload.allowed_email_domains),
    )
    db.add(organization)
    db.flush()

    # Creator is auto-added as admin
    db.add(OrganizationMember(
        organization_id=organization.organization_id,
        user_id=payload.created_by,
        role=OrganizationRole.admin,
    ))
    db.commit()
    db.refresh(organization)
    logger.info("Created organization '%s' (%s) by user %s", organization.name, organization.organization_id, payload.created_by)
    return organization


@router.get("/{organization_id}", response_model=OrganizationOut)
def get_organization(organization_id: str, db: Session = Depends(get_db)):
    """Fetch a single organization with members."""
    organization = db.query(Organization).filter(Organization.organization_id == organization_id).first()
    if not organization:
        raise OrganizationNotFound()
    return organization


@router.post("/{organization_id}/members", response_model=OrganizationMemberOut, status_code=status.HTTP_201_CREATED)
def add_member(organization_id: str, payload: OrganizationMemberAdd, db: Session = Depends(get_db)):
    """Add a member to an organization; admin and staff can manage its projects."""
    organization = db.query(Organization).filter(Organization.organization_id == organization_id).first()
    if not organization:
        raise OrganizationNotFound()

    user = db.query(User).filter(User.user_id == payload.user_id).first()
    if not user:
        raise UserNotFound()

    try:
        role = OrganizationRole(payload.role)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown role: {payload.role}")

    existing = (
        db.query(OrganizationMember)
        .filter(OrganizationMember.organization_id == organization_id, OrganizationMember.user_id == payload.user_id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail="User is already a member of this organization")

    member = OrganizationMember(organization_id=organization_id, user_id=payload.user_id, role=role)
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("Added user %s to organization %s as %s", payload.user_id, organization_id, role.value)
    return member


@router.delete("/{organization_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(organization_id: str, user_id: str, db: Session = Depends(get_db)):
    """Remove a member from an organization."""
    member = (
        db.query(OrganizationMember)
        .filter(OrganizationMember.organization_id == organization_id, OrganizationMember.user_id == user_id)
        .first()
    )
    if not member:
        raise HTTPException(status_code=404, detail="Membership not found")
    db.delete(member)
    db.commit()
    logger.info("Removed user %s from organization %s", user_id, organization_id)
