"""Actor service — registration, scoped user listing, advisor section changes."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.actors.models import Actor
from leavedesk.actors.schemas import ActorCreate
from leavedesk.common.audit import AuditAction, AuditEntity, create_audit_entry
from leavedesk.common.constants import ActorRole
from leavedesk.common.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leavedesk.leave.visibility import actor_scope

logger = logging.getLogger(__name__)


class ActorService:
    """Async actor operations."""

    @staticmethod
    async def create_actor(db: AsyncSession, data: ActorCreate) -> Actor:
        """Register an actor. Role and department are fixed from here on."""
        email = data.email.lower()
        existing = await db.execute(select(Actor.id).where(Actor.email == email))
        if existing.scalar() is not None:
            raise ConflictException("email", email)

        now = datetime.now(timezone.utc)
        actor = Actor(
            id=uuid.uuid4(),
            email=email,
            full_name=data.full_name,
            role=data.role,
            department=data.department,
            section=data.section,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        db.add(actor)
        await db.flush()

        logger.info("Registered %s %s", actor.role.value, actor.email)
        return actor

    @staticmethod
    async def get_actor(db: AsyncSession, actor_id: uuid.UUID) -> Actor:
        result = await db.execute(select(Actor).where(Actor.id == actor_id))
        actor = result.scalars().first()
        if actor is None:
            raise NotFoundException("Actor", str(actor_id))
        return actor

    @staticmethod
    async def list_actors(
        db: AsyncSession,
        actor: Actor,
        *,
        role: Optional[ActorRole] = None,
    ) -> list[Actor]:
        """Users visible to *actor*, sorted by name.

        Advisors see their own department and section; HODs their department.
        Requesters cannot list users.
        """
        scope = actor_scope(actor, role)
        query = scope.apply(
            select(Actor).where(Actor.is_active.is_(True))
        ).order_by(Actor.full_name)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def update_own_section(
        db: AsyncSession,
        actor: Actor,
        section: Optional[str],
    ) -> Actor:
        """Change an advisor's section. Takes effect on the next user listing."""
        if actor.role != ActorRole.first_line_reviewer:
            raise ForbiddenException("Only first-line reviewers can update their section.")

        new_section = (section or "").strip()
        if not new_section:
            raise ValidationException({"section": ["Section is required."]})

        old_section = actor.section
        actor.section = new_section
        actor.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action=AuditAction.update_section,
            entity_type=AuditEntity.actor,
            entity_id=actor.id,
            actor_id=actor.id,
            old_values={"section": old_section},
            new_values={"section": new_section},
        )

        logger.info(
            "Advisor %s moved from section %r to %r",
            actor.email, old_section, new_section,
        )
        return actor
