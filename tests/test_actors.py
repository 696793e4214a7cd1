"""Actor tests: registration, scoped user listing, advisor section changes."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from leavedesk.actors.schemas import ActorCreate
from leavedesk.actors.service import ActorService
from leavedesk.common.audit import AuditTrail
from leavedesk.common.constants import ActorRole
from leavedesk.common.exceptions import (
    ConflictException,
    ForbiddenException,
    ValidationException,
)
from tests.conftest import auth_headers, seed_actor

BASE = "/api/v1/users"


async def _seed_roster(db):
    """CSE/A and CSE/B students, an ECE student, and a second CSE advisor."""
    return {
        "a1": await seed_actor(db, full_name="Anu A", section="A"),
        "a2": await seed_actor(db, full_name="Bala A", section="A"),
        "b1": await seed_actor(db, full_name="Chitra B", section="B"),
        "ece": await seed_actor(db, full_name="Dev ECE", department="ECE", section="A"),
        "adv_b": await seed_actor(
            db, role=ActorRole.first_line_reviewer, full_name="Esha Advisor", section="B",
        ),
        "gone": await seed_actor(db, full_name="Old A", section="A", is_active=False),
    }


class TestActorCreate:

    async def test_create_actor_normalises_email(self, db):
        actor = await ActorService.create_actor(
            db,
            ActorCreate(
                email="Priya@College.edu", full_name=" Priya ", department=" CSE ",
                section="",
            ),
        )
        assert actor.email == "priya@college.edu"
        assert actor.full_name == "Priya"
        assert actor.department == "CSE"
        assert actor.section is None
        assert actor.role == ActorRole.requester

    async def test_duplicate_email_conflicts(self, db):
        data = ActorCreate(email="dup@college.edu", full_name="One")
        await ActorService.create_actor(db, data)
        with pytest.raises(ConflictException):
            await ActorService.create_actor(
                db, ActorCreate(email="DUP@college.edu", full_name="Two"),
            )

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            ActorCreate(email="x@college.edu", full_name="   ")


class TestListActors:

    async def test_advisor_sees_own_section_students(self, db, advisor):
        await _seed_roster(db)
        rows = await ActorService.list_actors(db, advisor)
        assert [r.full_name for r in rows] == ["Anu A", "Bala A"]

    async def test_advisor_role_filter(self, db, advisor):
        await _seed_roster(db)
        rows = await ActorService.list_actors(
            db, advisor, role=ActorRole.first_line_reviewer,
        )
        assert [r.full_name for r in rows] == ["Meera Advisor"]

    async def test_hod_sees_department(self, db, hod):
        await _seed_roster(db)
        rows = await ActorService.list_actors(db, hod)
        names = [r.full_name for r in rows]
        assert "Dev ECE" not in names
        assert "Old A" not in names
        assert names == ["Anu A", "Bala A", "Chitra B", "Esha Advisor", "Ravi HOD"]

    async def test_hod_role_filter(self, db, hod):
        await _seed_roster(db)
        rows = await ActorService.list_actors(db, hod, role=ActorRole.requester)
        assert [r.full_name for r in rows] == ["Anu A", "Bala A", "Chitra B"]

    async def test_requester_forbidden(self, db, student):
        with pytest.raises(ForbiddenException):
            await ActorService.list_actors(db, student)


class TestUpdateSection:

    async def test_section_change_rescopes_listing(self, db, advisor):
        await _seed_roster(db)

        updated = await ActorService.update_own_section(db, advisor, "B")
        assert updated.section == "B"

        rows = await ActorService.list_actors(db, advisor)
        assert [r.full_name for r in rows] == ["Chitra B"]

        audit = (
            await db.execute(
                select(AuditTrail).where(AuditTrail.entity_id == advisor.id)
            )
        ).scalars().one()
        assert audit.action == "update_section"
        assert audit.old_values == {"section": "A"}
        assert audit.new_values == {"section": "B"}

    async def test_blank_section_rejected(self, db, advisor):
        with pytest.raises(ValidationException) as exc_info:
            await ActorService.update_own_section(db, advisor, "  ")
        assert "section" in exc_info.value.errors

    async def test_only_advisors(self, db, student, hod):
        for actor in (student, hod):
            with pytest.raises(ForbiddenException):
                await ActorService.update_own_section(db, actor, "C")


class TestUsersAPI:

    async def test_list_users(self, client, db, advisor):
        await _seed_roster(db)
        await db.commit()

        resp = await client.get(BASE, headers=auth_headers(advisor))
        assert resp.status_code == 200
        assert [u["full_name"] for u in resp.json()] == ["Anu A", "Bala A"]

    async def test_list_users_by_role(self, client, db, hod):
        await _seed_roster(db)
        await db.commit()

        resp = await client.get(
            BASE, params={"role": "first_line_reviewer"}, headers=auth_headers(hod),
        )
        assert [u["full_name"] for u in resp.json()] == ["Esha Advisor"]

    async def test_list_users_requester_is_403(self, client, db, student):
        await db.commit()
        resp = await client.get(BASE, headers=auth_headers(student))
        assert resp.status_code == 403

    async def test_patch_section(self, client, db, advisor):
        await _seed_roster(db)
        await db.commit()

        resp = await client.patch(
            f"{BASE}/me/section", json={"section": "B"}, headers=auth_headers(advisor),
        )
        assert resp.status_code == 200
        assert resp.json()["section"] == "B"

        resp = await client.get(BASE, headers=auth_headers(advisor))
        assert [u["full_name"] for u in resp.json()] == ["Chitra B"]

    async def test_patch_section_blank_is_422(self, client, db, advisor):
        await db.commit()
        resp = await client.patch(
            f"{BASE}/me/section", json={"section": ""}, headers=auth_headers(advisor),
        )
        assert resp.status_code == 422

    async def test_patch_section_by_student_is_403(self, client, db, student):
        await db.commit()
        resp = await client.patch(
            f"{BASE}/me/section", json={"section": "B"}, headers=auth_headers(student),
        )
        assert resp.status_code == 403
