"""Academic calendar router — list, create, delete events."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.academic_calendar.schemas import CalendarEventCreate, CalendarEventOut
from leavedesk.academic_calendar.service import CalendarService
from leavedesk.actors.models import Actor
from leavedesk.auth.dependencies import get_current_actor, require_role
from leavedesk.common.constants import ActorRole
from leavedesk.database import get_db

router = APIRouter(prefix="", tags=["calendar"])

_reviewer = require_role(ActorRole.first_line_reviewer, ActorRole.final_reviewer)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[CalendarEventOut])
async def list_events(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    restricted_only: bool = Query(False),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """All events, earliest first. Open to every authenticated user."""
    return await CalendarService.list_events(
        db, from_date=from_date, to_date=to_date, restricted_only=restricted_only,
    )


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=CalendarEventOut, status_code=201)
async def create_event(
    body: CalendarEventCreate,
    actor: Actor = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    return await CalendarService.create_event(db, actor, body)


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: uuid.UUID,
    actor: Actor = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    await CalendarService.delete_event(db, actor, event_id)
    return Response(status_code=204)
