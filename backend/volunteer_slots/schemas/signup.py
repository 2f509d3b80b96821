"""Pydantic schemas for Signups and anonymous signups."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, model_validator


class AnonymousVolunteer(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = None


class SignupCreate(BaseModel):
    """Either ``user_id`` (logged in) or ``anonymous`` details, never both."""

    project_id: str
    schedule_id: str
    user_id: Optional[str] = None
    anonymous: Optional[AnonymousVolunteer] = None

    @model_validator(mode="after")
    def check_one_identity(self):
        if bool(self.user_id) == bool(self.anonymous):
            raise ValueError("Provide exactly one of user_id or anonymous")
        return self


class AnonymousSignupOut(BaseModel):
    anonymous_signup_id: str
    email: str
    name: str
    phone_number: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SignupOut(BaseModel):
    signup_id: str
    project_id: str
    schedule_id: str
    user_id: Optional[str] = None
    status: str
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    created_at: datetime
    anonymous_signup: Optional[AnonymousSignupOut] = None

    model_config = {"from_attributes": True}


class SignupCreated(BaseModel):
    signup: SignupOut
    needs_confirmation: bool
    message: str


class CancelSignupRequest(BaseModel):
    actor_user_id: Optional[str] = None
    anonymous_token: Optional[str] = None


class EmailLookupOut(BaseModel):
    """Where an e-mail address stands for one slot, before checking in."""

    found: bool
    is_registered: bool
    signup_id: Optional[str] = None
    anonymous_signup_id: Optional[str] = None
    status: Optional[str] = None
    message: str


class AnonymousCheckIn(BaseModel):
    schedule_id: str
    email: EmailStr
