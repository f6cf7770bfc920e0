"""Initial schema: teams, bookmarks, digests, digest_blocks with RLS policies.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

# Rows are visible when no team context is set (system_conn) or when the
# row belongs to the team in app.team_id (team_conn).
_TEAM_MATCH = """
    NULLIF(current_setting('app.team_id', true), '') IS NULL
    OR team_id = current_setting('app.team_id', true)::uuid
"""


def upgrade():
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # Teams are owned by the membership service; this table mirrors the fields we read
    op.execute("""
        CREATE TABLE teams (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            slug TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            created_at TIMESTAMPTZ DEFAULT now()
        );
    """)

    op.execute("""
        CREATE TABLE bookmarks (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            team_id UUID NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
            url TEXT NOT NULL,
            title TEXT,
            description TEXT,
            image TEXT,
            views INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    op.execute("CREATE INDEX idx_bookmarks_team_created ON bookmarks(team_id, created_at DESC);")

    op.execute("""
        CREATE TABLE digests (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            team_id UUID NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
            title TEXT NOT NULL,
            slug TEXT NOT NULL,
            description TEXT,
            published_at TIMESTAMPTZ,
            is_template BOOLEAN NOT NULL DEFAULT false,
            views INTEGER NOT NULL DEFAULT 0,
            version INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            UNIQUE (team_id, slug)
        );
    """)

    op.execute("CREATE INDEX idx_digests_team_created ON digests(team_id, is_template, created_at DESC);")
    op.execute("CREATE INDEX idx_digests_published ON digests(published_at) WHERE published_at IS NOT NULL;")

    # Order uniqueness is checked at commit so a shift can pass through overlapping states
    op.execute("""
        CREATE TABLE digest_blocks (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            digest_id UUID NOT NULL REFERENCES digests(id) ON DELETE CASCADE,
            type TEXT NOT NULL CHECK (type IN ('BOOKMARK', 'TEXT')),
            "order" INTEGER NOT NULL CHECK ("order" >= 0),
            bookmark_id UUID REFERENCES bookmarks(id),
            title TEXT,
            description TEXT,
            text TEXT,
            style TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT digest_blocks_bookmark_type CHECK (
                (type = 'BOOKMARK') = (bookmark_id IS NOT NULL)
            ),
            CONSTRAINT digest_blocks_digest_order_key UNIQUE (digest_id, "order")
                DEFERRABLE INITIALLY DEFERRED
        );
    """)

    op.execute("CREATE INDEX idx_digest_blocks_bookmark ON digest_blocks(bookmark_id);")

    # RLS
    for table in ("bookmarks", "digests"):
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY;")
        op.execute(f"CREATE POLICY {table}_all_team ON {table} FOR ALL USING ({_TEAM_MATCH});")

    # Blocks belong to teams via their digest
    op.execute("ALTER TABLE digest_blocks ENABLE ROW LEVEL SECURITY;")
    op.execute("ALTER TABLE digest_blocks FORCE ROW LEVEL SECURITY;")
    op.execute("""
        CREATE POLICY digest_blocks_all_team
        ON digest_blocks
        FOR ALL
        USING (
            NULLIF(current_setting('app.team_id', true), '') IS NULL
            OR digest_id IN (
                SELECT id FROM digests WHERE team_id = current_setting('app.team_id', true)::uuid
            )
        );
    """)


def downgrade():
    op.execute("DROP TABLE IF EXISTS digest_blocks CASCADE")
    op.execute("DROP TABLE IF EXISTS digests CASCADE")
    op.execute("DROP TABLE IF EXISTS bookmarks CASCADE")
    op.execute("DROP TABLE IF EXISTS teams CASCADE")
