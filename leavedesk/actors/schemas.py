"""Actor Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from leavedesk.common.constants import ActorRole


class ActorBrief(BaseModel):
    """Minimal actor info embedded in leave and calendar responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    email: str
    department: Optional[str] = None


class ActorOut(BaseModel):
    """Full actor representation (never includes credentials)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str
    role: ActorRole
    department: Optional[str] = None
    section: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class ActorCreate(BaseModel):
    """Payload for registering an actor. Credentials live with the identity provider."""

    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=200)
    role: ActorRole = ActorRole.requester
    department: Optional[str] = Field(None, max_length=100)
    section: Optional[str] = Field(None, max_length=50)

    @field_validator("full_name")
    @classmethod
    def full_name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full_name must not be blank.")
        return v

    @field_validator("department", "section")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v or None


class SectionUpdate(BaseModel):
    """Payload for an advisor changing their own section."""

    section: str = Field(..., max_length=50)
