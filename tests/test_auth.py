"""Auth tests: token issue/verify, bearer dependency, /auth/me."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from leavedesk.auth.service import TokenError, create_access_token, decode_access_token
from leavedesk.config import settings
from tests.conftest import auth_headers, seed_actor

ME = "/api/v1/auth/me"


class TestTokens:

    def test_round_trip_subject(self):
        actor_id = uuid.uuid4()
        assert decode_access_token(create_access_token(actor_id)) == actor_id

    def test_expired(self):
        token = create_access_token(uuid.uuid4(), expires_in=timedelta(seconds=-5))
        with pytest.raises(TokenError, match="expired"):
            decode_access_token(token)

    def test_wrong_signature(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "access"}, "other-secret",
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(TokenError, match="Invalid token"):
            decode_access_token(token)

    def test_wrong_type(self):
        token = jwt.encode(
            {
                "sub": str(uuid.uuid4()),
                "type": "refresh",
                "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
            },
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(TokenError, match="type"):
            decode_access_token(token)

    def test_bad_subject(self):
        token = jwt.encode(
            {"sub": "not-a-uuid", "type": "access"},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(TokenError, match="subject"):
            decode_access_token(token)


class TestMeEndpoint:

    async def test_me(self, client, db, advisor):
        await db.commit()
        resp = await client.get(ME, headers=auth_headers(advisor))

        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == str(advisor.id)
        assert data["role"] == "first_line_reviewer"
        assert data["section"] == "A"

    async def test_missing_header(self, client):
        resp = await client.get(ME)
        assert resp.status_code == 401

    async def test_non_bearer_header(self, client):
        resp = await client.get(ME, headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401

    async def test_expired_token(self, client, db, student):
        await db.commit()
        resp = await client.get(ME, headers=auth_headers(student, expired=True))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token has expired."

    async def test_unknown_actor(self, client):
        token = create_access_token(uuid.uuid4())
        resp = await client.get(ME, headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    async def test_inactive_actor(self, client, db):
        actor = await seed_actor(db, is_active=False)
        await db.commit()
        resp = await client.get(ME, headers=auth_headers(actor))
        assert resp.status_code == 401


class TestHealth:

    async def test_health_needs_no_auth(self, client):
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
