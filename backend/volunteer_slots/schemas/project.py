"""Pydantic schemas for Projects."""
from __future__ import annotations
from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    location: Optional[str] = None
    creator_id: str
    organization_id: Optional[str] = None
    event_type: str
    # Same shape as the stored document: {"oneTime": {...}} etc.
    schedule: dict[str, Any]
    project_timezone: Optional[str] = None
    pause_signups: bool = False
    require_login: bool = False
    restrict_to_org_domains: bool = False
    allowed_email_domains: Optional[list[str]] = None


class ProjectOut(BaseModel):
    project_id: str
    title: str
    location: Optional[str] = None
    creator_id: str
    organization_id: Optional[str] = None
    event_type: str
    schedule: dict[str, Any]
    project_timezone: str
    status: str
    pause_signups: bool
    require_login: bool
    restrict_to_org_domains: bool
    allowed_email_domains: Optional[list[str]] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PauseSignupsRequest(BaseModel):
    actor_user_id: str
    paused: bool


class CancelProjectRequest(BaseModel):
    actor_user_id: str
    reason: str


class ProjectStatusOut(BaseModel):
    project_id: str
    status: str
    stored_status: str
    accepting_signups: bool
    can_cancel: bool
    starts_at: datetime
    ends_at: datetime


class SlotAvailabilityOut(BaseModel):
    schedule_id: str
    date: date
    start_time: str
    end_time: str
    capacity: int
    current_count: int
    remaining: int
    elapsed: bool


class ReconcileResult(BaseModel):
    checked: int
    updated: dict[str, str]
    expired_anonymous_signups: int
