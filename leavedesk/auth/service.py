"""Auth service — access-token issue and verification.

Credential storage and sign-in live with the institution's identity
provider; this service only mints and checks the bearer tokens that carry
an actor id.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from leavedesk.config import settings


class TokenError(Exception):
    """Bearer token is missing, malformed, expired or of the wrong type."""


def create_access_token(
    actor_id: uuid.UUID,
    *,
    expires_in: timedelta | None = None,
) -> str:
    """Return a signed access token whose subject is *actor_id*."""
    now = datetime.now(timezone.utc)
    exp = now + (expires_in or timedelta(hours=settings.JWT_EXPIRY_HOURS))
    payload: dict[str, Any] = {
        "sub": str(actor_id),
        "type": "access",
        "iat": now,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> uuid.UUID:
    """Validate *token* and return the actor id it was issued for."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError as exc:
        raise TokenError("Token has expired.") from exc
    except JWTError as exc:
        raise TokenError("Invalid token.") from exc

    if payload.get("type") != "access":
        raise TokenError("Invalid token type.")

    try:
        return uuid.UUID(payload["sub"])
    except (KeyError, ValueError) as exc:
        raise TokenError("Invalid token subject.") from exc
