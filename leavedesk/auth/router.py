"""Auth router — current actor profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from leavedesk.actors.models import Actor
from leavedesk.actors.schemas import ActorOut
from leavedesk.auth.dependencies import get_current_actor

router = APIRouter(prefix="", tags=["auth"])


# ── GET /me ─────────────────────────────────────────────────────────

@router.get("/me", response_model=ActorOut)
async def me(actor: Actor = Depends(get_current_actor)):
    """Return the authenticated actor's profile."""
    return actor
