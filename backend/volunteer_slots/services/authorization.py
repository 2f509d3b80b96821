"""Authorization decisions for project management actions.

A project manager is the project's creator, or an admin/staff member of the
project's organization. Deleting a project is narrower: only its creator or
an organization admin may do it.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from volunteer_slots.errors import NotAuthorized
from volunteer_slots.models.organization import MANAGER_ROLES, OrganizationMember, OrganizationRole
from volunteer_slots.models.project import Project

logger = logging.getLogger(__name__)


def is_project_manager(db: Session, user_id: Optional[str], project: Project) -> bool:
    if not user_id:
        return False
    if project.creator_id == str(user_id):
        return True
    if not project.organization_id:
        return False
    member = (
        db.query(OrganizationMember)
        .filter(
            OrganizationMember.organization_id == project.organization_id,
            OrganizationMember.user_id == str(user_id),
        )
        .first()
    )
    return member is not None and member.role in MANAGER_ROLES


def require_project_manager(db: Session, user_id: Optional[str], project: Project) -> None:
    if not is_project_manager(db, user_id, project):
        logger.info("User %s denied management of project %s", user_id, project.project_id)
        raise NotAuthorized()


def require_project_owner(db: Session, user_id: Optional[str], project: Project) -> None:
    """Deletion is narrower than management: the creator or an organization admin."""
    if user_id and project.creator_id == str(user_id):
        return
    if user_id and project.organization_id:
        member = (
            db.query(OrganizationMember)
            .filter(
                OrganizationMember.organization_id == project.organization_id,
                OrganizationMember.user_id == str(user_id),
            )
            .first()
        )
        if member is not None and member.role == OrganizationRole.admin:
            return
    logger.info("User %s denied deletion of project %s", user_id, project.project_id)
    raise NotAuthorized("You don't have permission to delete this project")
