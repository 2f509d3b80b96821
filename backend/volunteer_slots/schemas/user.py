"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    display_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    default_timezone: str = "UTC"


class UserUpdate(BaseModel):
    display_name: Optional[str] = None
    default_timezone: Optional[str] = None


class UserEmailAdd(BaseModel):
    email: EmailStr
    verified: bool = True


class UserEmailOut(BaseModel):
    email_id: str
    email: str
    verified_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserOut(BaseModel):
    user_id: str
    display_name: str
    email: str
    default_timezone: str
    created_at: datetime
    secondary_emails: list[UserEmailOut] = []

    model_config = {"from_attributes": True}
