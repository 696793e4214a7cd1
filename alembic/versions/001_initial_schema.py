"""001 – Initial schema: actors, calendar events, leave requests, audit trail.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000+05:30
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_DDL: list[tuple[str, str]] = [
    (
        "actor_role",
        "CREATE TYPE actor_role AS ENUM "
        "('requester', 'first_line_reviewer', 'final_reviewer')",
    ),
    (
        "leave_category",
        "CREATE TYPE leave_category AS ENUM "
        "('medical', 'casual', 'emergency', 'other')",
    ),
    (
        "leave_status",
        "CREATE TYPE leave_status AS ENUM "
        "('pending_first', 'first_approved', 'first_rejected', "
        "'final_approved', 'final_rejected')",
    ),
]


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for _, ddl in ENUM_DDL:
        op.execute(ddl)

    # ── 1. actors ─────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE actors (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            email       VARCHAR(255) NOT NULL UNIQUE,
            full_name   VARCHAR(200) NOT NULL,
            role        actor_role NOT NULL DEFAULT 'requester',
            department  VARCHAR(100),
            section     VARCHAR(50),
            is_active   BOOLEAN DEFAULT TRUE,
            created_at  TIMESTAMPTZ DEFAULT NOW(),
            updated_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX idx_actors_scope ON actors(department, section, role)"
    )

    # ── 2. calendar_events ────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE calendar_events (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            title        VARCHAR(200) NOT NULL,
            description  TEXT,
            start_date   DATE NOT NULL,
            end_date     DATE NOT NULL,
            event_type   VARCHAR(50) NOT NULL,
            created_by   UUID REFERENCES actors(id),
            created_at   TIMESTAMPTZ DEFAULT NOW(),
            updated_at   TIMESTAMPTZ DEFAULT NOW(),
            CHECK (start_date <= end_date)
        )
    """)
    op.execute("CREATE INDEX idx_cal_event_start ON calendar_events(start_date)")
    op.execute("CREATE INDEX idx_cal_event_end ON calendar_events(end_date)")
    op.execute("CREATE INDEX idx_cal_event_type ON calendar_events(event_type)")

    # ── 3. leave_requests ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id                 UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            requester_id       UUID NOT NULL REFERENCES actors(id),
            category           leave_category NOT NULL,
            start_date         DATE NOT NULL,
            end_date           DATE NOT NULL,
            reason             TEXT NOT NULL,
            status             leave_status NOT NULL DEFAULT 'pending_first',
            first_comment      TEXT,
            first_reviewed_at  TIMESTAMPTZ,
            first_reviewed_by  UUID REFERENCES actors(id),
            final_comment      TEXT,
            final_reviewed_at  TIMESTAMPTZ,
            final_reviewed_by  UUID REFERENCES actors(id),
            created_at         TIMESTAMPTZ DEFAULT NOW(),
            updated_at         TIMESTAMPTZ DEFAULT NOW(),
            CHECK (start_date <= end_date)
        )
    """)
    op.execute(
        "CREATE INDEX idx_leave_req_requester ON leave_requests(requester_id)"
    )
    op.execute("CREATE INDEX idx_leave_req_status ON leave_requests(status)")
    op.execute(
        "CREATE INDEX idx_leave_req_created ON leave_requests(created_at DESC)"
    )

    # ── 4. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id     UUID REFERENCES actors(id),
            action       VARCHAR(50) NOT NULL,
            entity_type  VARCHAR(50) NOT NULL,
            entity_id    UUID NOT NULL,
            old_values   JSONB,
            new_values   JSONB,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_actor_id ON audit_trail(actor_id)")
    op.execute(
        "CREATE INDEX ix_audit_trail_entity ON audit_trail(entity_type, entity_id)"
    )
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail(created_at)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS audit_trail CASCADE")
    op.execute("DROP TABLE IF EXISTS leave_requests CASCADE")
    op.execute("DROP TABLE IF EXISTS calendar_events CASCADE")
    op.execute("DROP TABLE IF EXISTS actors CASCADE")

    op.execute("DROP TYPE IF EXISTS leave_status")
    op.execute("DROP TYPE IF EXISTS leave_category")
    op.execute("DROP TYPE IF EXISTS actor_role")

    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
