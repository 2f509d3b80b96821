"""Project API routes; logic lives in project_service and status_reconciler."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from volunteer_slots.database import get_db
from volunteer_slots.schemas.project import (
    CancelProjectRequest,
    PauseSignupsRequest,
    ProjectCreate,
    ProjectOut,
    ProjectStatusOut,
    ReconcileResult,
    SlotAvailabilityOut,
)
from volunteer_slots.services import project_service, status_reconciler

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(payload: ProjectCreate, db: Session = Depends(get_db)):
    """Create a project; the schedule is validated against its event type."""
    return project_service.create_project(db, payload)


@router.post("/reconcile", response_model=ReconcileResult)
def reconcile(db: Session = Depends(get_db)):
    """Run one reconciler cycle now (statuses and anonymous expiry)."""
    updated, checked, expired = status_reconciler.run_cycle(db)
    return ReconcileResult(
        checked=checked,
        updated={project_id: new_status.value for project_id, new_status in updated.items()},
        expired_anonymous_signups=expired,
    )


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: str, db: Session = Depends(get_db)):
    """Fetch a single project by ID."""
    return project_service.get_project(db, project_id)


@router.get("/{project_id}/status", response_model=ProjectStatusOut)
def get_project_status(project_id: str, db: Session = Depends(get_db)):
    """Current lifecycle status, derived fresh from the schedule."""
    return project_service.get_project_status(db, project_id)


@router.get("/{project_id}/slots", response_model=list[SlotAvailabilityOut])
def list_slots(project_id: str, db: Session = Depends(get_db)):
    """Every slot with capacity, current count and remaining places."""
    return project_service.slot_availability(db, project_id)


@router.post("/{project_id}/pause", response_model=ProjectOut)
def pause_signups(project_id: str, payload: PauseSignupsRequest, db: Session = Depends(get_db)):
    """Pause or resume signups (project managers only)."""
    return project_service.set_pause_signups(db, project_id, payload.actor_user_id, payload.paused)


@router.post("/{project_id}/cancel", response_model=ProjectOut)
def cancel_project(project_id: str, payload: CancelProjectRequest, db: Session = Depends(get_db)):
    """Cancel a project more than the guard window before it starts."""
    return project_service.cancel_project(db, project_id, payload.actor_user_id, payload.reason)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: str,
    actor_user_id: str = Query(..., description="ID of the project creator or organization admin"),
    db: Session = Depends(get_db),
):
    """Delete a project together with its signups and slot counters."""
    project_service.delete_project(db, project_id, actor_user_id)
