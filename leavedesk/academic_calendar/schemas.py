"""Academic calendar Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from leavedesk.actors.schemas import ActorBrief


class CalendarEventCreate(BaseModel):
    """Payload for adding an event. Both dates are inclusive."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    start_date: date
    end_date: date
    event_type: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="exam | expert-session | important-event block leave; other types are informational",
    )

    @field_validator("title", "event_type")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank.")
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> "CalendarEventCreate":
        # Single-day events are allowed: start_date == end_date.
        if self.start_date > self.end_date:
            raise ValueError("end_date must be on or after start_date.")
        return self


class CalendarEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    event_type: str
    is_restricted: bool = False
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    creator: Optional[ActorBrief] = None
