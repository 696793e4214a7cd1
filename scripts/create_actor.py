#!/usr/bin/env python3
"""Register a LeaveDesk actor and print a bearer token for it.

Sign-in is handled by the institution's identity provider; this script is
for bootstrapping reviewers and for local development.

Usage:
    python scripts/create_actor.py --email hod@college.edu --name "Dr. Rao" \\
        --role final_reviewer --department CSE
    python scripts/create_actor.py --email advisor@college.edu --name "Ms. Iyer" \\
        --role first_line_reviewer --department CSE --section A
    python scripts/create_actor.py --email s1@college.edu --name "Arun" --department CSE --section A

Exit codes:
    0 = actor created
    1 = validation or duplicate error
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# ── Path setup ────────────────────────────────────────────────────────
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

load_dotenv(PROJECT_ROOT / ".env")

from pydantic import ValidationError

from leavedesk.actors.schemas import ActorCreate
from leavedesk.actors.service import ActorService
from leavedesk.auth.service import create_access_token
from leavedesk.common.constants import ActorRole
from leavedesk.common.exceptions import AppException
from leavedesk.common.log_config import configure_logging
from leavedesk.database import engine, session_scope
import leavedesk.academic_calendar.models  # noqa: F401
import leavedesk.leave.models  # noqa: F401

logger = logging.getLogger("leavedesk.scripts.create_actor")


async def _create(data: ActorCreate) -> str:
    try:
        async with session_scope() as session:
            actor = await ActorService.create_actor(session, data)
    finally:
        await engine.dispose()
    return create_access_token(actor.id)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a LeaveDesk actor")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True, help="Full name")
    parser.add_argument(
        "--role",
        choices=[r.value for r in ActorRole],
        default=ActorRole.requester.value,
    )
    parser.add_argument("--department")
    parser.add_argument("--section")
    args = parser.parse_args()

    configure_logging("info")

    try:
        data = ActorCreate(
            email=args.email,
            full_name=args.name,
            role=ActorRole(args.role),
            department=args.department,
            section=args.section,
        )
    except ValidationError as exc:
        logger.error("Invalid actor: %s", exc)
        return 1

    try:
        token = asyncio.run(_create(data))
    except AppException as exc:
        logger.error("%s: %s", exc.title, exc.detail)
        return 1

    print(token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
