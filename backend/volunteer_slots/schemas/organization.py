"""Pydantic schemas for Organizations."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class OrganizationCreate(BaseModel):
    name: str
    created_by: str
    allowed_email_domains: Optional[list[str]] = None


class OrganizationOut(BaseModel):
    organization_id: str
    name: str
    created_by: str
    allowed_email_domains: Optional[list[str]] = None
    created_at: datetime
    members: list[OrganizationMemberOut] = []

    model_config = {"from_attributes": True}


class OrganizationMemberAdd(BaseModel):
    user_id: str
    role: str = "member"


class OrganizationMemberOut(BaseModel):
    user_id: str
    role: str
    joined_at: datetime

    model_config = {"from_attributes": True}


# Rebuild OrganizationOut now that OrganizationMemberOut is defined
OrganizationOut.model_rebuild()
