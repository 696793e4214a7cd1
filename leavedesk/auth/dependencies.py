"""Auth dependencies — bearer validation and role enforcement."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.actors.models import Actor
from leavedesk.auth.service import TokenError, decode_access_token
from leavedesk.common.constants import ActorRole
from leavedesk.common.exceptions import ForbiddenException
from leavedesk.database import get_db


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_actor(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Actor:
    """Validate the bearer token and return the active Actor it names."""
    token = _extract_bearer(request)

    try:
        actor_id = decode_access_token(token)
    except TokenError as exc:
        raise HTTPException(status_code=401, detail=str(exc))

    result = await db.execute(
        select(Actor).where(Actor.id == actor_id, Actor.is_active.is_(True)),
    )
    actor = result.scalars().first()
    if actor is None:
        raise HTTPException(status_code=401, detail="User account is inactive or not found.")

    return actor


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: ActorRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership."""

    async def _check(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed_roles:
            raise ForbiddenException(
                detail=f"Role '{actor.role.value}' is not permitted. Required: {[r.value for r in allowed_roles]}.",
            )
        return actor

    return _check
