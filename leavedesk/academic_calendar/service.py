"""Academic calendar service — create, list, delete events; conflict lookups."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.academic_calendar.models import CalendarEvent
from leavedesk.academic_calendar.schemas import CalendarEventCreate, CalendarEventOut
from leavedesk.actors.models import Actor
from leavedesk.common.audit import AuditAction, AuditEntity, create_audit_entry
from leavedesk.common.constants import RESTRICTED_EVENT_TYPES, REVIEWER_ROLES
from leavedesk.common.exceptions import ForbiddenException, NotFoundException

logger = logging.getLogger(__name__)


class CalendarService:
    """Async calendar operations."""

    @staticmethod
    def _build_event_response(event: CalendarEvent) -> CalendarEventOut:
        """Creator must already be loaded; lazy loads fail under asyncio."""
        return CalendarEventOut.model_validate(event)

    @staticmethod
    async def _load_event(db: AsyncSession, event_id: uuid.UUID) -> CalendarEvent:
        result = await db.execute(
            select(CalendarEvent)
            .where(CalendarEvent.id == event_id)
            .options(selectinload(CalendarEvent.creator))
            .execution_options(populate_existing=True)
        )
        event = result.scalars().first()
        if event is None:
            raise NotFoundException("CalendarEvent", str(event_id))
        return event

    # ─────────────────────────────────────────────────────────────────
    # Write
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_event(
        db: AsyncSession,
        actor: Actor,
        data: CalendarEventCreate,
    ) -> CalendarEventOut:
        """Add an event. Reviewers only; events are immutable afterwards."""
        if actor.role not in REVIEWER_ROLES:
            raise ForbiddenException("Only advisors and HODs can create calendar events.")

        now = datetime.now(timezone.utc)
        event = CalendarEvent(
            id=uuid.uuid4(),
            title=data.title,
            description=data.description,
            start_date=data.start_date,
            end_date=data.end_date,
            event_type=data.event_type,
            created_by=actor.id,
            created_at=now,
            updated_at=now,
        )
        db.add(event)
        await db.flush()

        await create_audit_entry(
            db,
            action=AuditAction.create,
            entity_type=AuditEntity.calendar_event,
            entity_id=event.id,
            actor_id=actor.id,
            new_values={
                "title": event.title,
                "event_type": event.event_type,
                "start_date": event.start_date.isoformat(),
                "end_date": event.end_date.isoformat(),
            },
        )

        logger.info(
            "Calendar event %r (%s) %s..%s added by %s",
            event.title, event.event_type, event.start_date, event.end_date, actor.email,
        )
        event = await CalendarService._load_event(db, event.id)
        return CalendarService._build_event_response(event)

    @staticmethod
    async def delete_event(
        db: AsyncSession,
        actor: Actor,
        event_id: uuid.UUID,
    ) -> None:
        if actor.role not in REVIEWER_ROLES:
            raise ForbiddenException("Only advisors and HODs can delete calendar events.")

        event = await CalendarService._load_event(db, event_id)
        snapshot = {
            "title": event.title,
            "event_type": event.event_type,
            "start_date": event.start_date.isoformat(),
            "end_date": event.end_date.isoformat(),
        }
        await db.delete(event)
        await db.flush()

        await create_audit_entry(
            db,
            action=AuditAction.delete,
            entity_type=AuditEntity.calendar_event,
            entity_id=event_id,
            actor_id=actor.id,
            old_values=snapshot,
        )
        logger.info("Calendar event %r deleted by %s", snapshot["title"], actor.email)

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_events(
        db: AsyncSession,
        *,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        restricted_only: bool = False,
    ) -> list[CalendarEventOut]:
        """Events ordered by start date, optionally limited to a date window.

        The window keeps every event that overlaps it, not only those that
        start inside it.
        """
        query = (
            select(CalendarEvent)
            .options(selectinload(CalendarEvent.creator))
            .order_by(CalendarEvent.start_date, CalendarEvent.title)
        )
        if from_date is not None:
            query = query.where(CalendarEvent.end_date >= from_date)
        if to_date is not None:
            query = query.where(CalendarEvent.start_date <= to_date)
        if restricted_only:
            query = query.where(CalendarEvent.event_type.in_(sorted(RESTRICTED_EVENT_TYPES)))

        result = await db.execute(query)
        return [CalendarService._build_event_response(e) for e in result.scalars().all()]

    @staticmethod
    async def find_restricted_candidates(
        db: AsyncSession,
        start: date,
        end: date,
    ) -> Sequence[CalendarEvent]:
        """Restricted events that may overlap ``[start, end]``.

        The SQL filter narrows the read; the conflict detector makes the
        final call on the returned rows.
        """
        result = await db.execute(
            select(CalendarEvent)
            .where(
                CalendarEvent.event_type.in_(sorted(RESTRICTED_EVENT_TYPES)),
                CalendarEvent.start_date <= end,
                CalendarEvent.end_date >= start,
            )
            .order_by(CalendarEvent.start_date, CalendarEvent.title)
        )
        return result.scalars().all()
