"""Rate limiting using slowapi.

The limiter is shared by routers and wired into the app in main.py.
Leave submissions are counted per actor; requests without a valid bearer
token fall back to the client address.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from leavedesk.auth.service import TokenError, decode_access_token

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["60/minute"],
)


def actor_or_address(request: Request) -> str:
    """Limit key: the bearer token's actor id, else the client address."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return get_remote_address(request)
    try:
        return f"actor:{decode_access_token(auth_header[7:])}"
    except TokenError:
        return get_remote_address(request)
