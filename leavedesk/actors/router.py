"""Users router — scoped listing and advisor section updates."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.actors.models import Actor
from leavedesk.actors.schemas import ActorOut, SectionUpdate
from leavedesk.actors.service import ActorService
from leavedesk.auth.dependencies import get_current_actor
from leavedesk.common.constants import ActorRole
from leavedesk.database import get_db

router = APIRouter(prefix="", tags=["users"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[ActorOut])
async def list_users(
    role: Optional[ActorRole] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """List users visible to the caller. Requesters receive 403."""
    return await ActorService.list_actors(db, actor, role=role)


# ── PATCH /me/section ───────────────────────────────────────────────

@router.patch("/me/section", response_model=ActorOut)
async def update_my_section(
    body: SectionUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Advisors only: move to another section."""
    return await ActorService.update_own_section(db, actor, body.section)
