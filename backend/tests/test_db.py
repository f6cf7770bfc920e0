"""
Tests for database connection pool, team scoping and schema constraints.

NOTE: These tests require a running PostgreSQL database with the DATABASE_URL environment variable set.
Run `alembic upgrade head` before running these tests.
"""

from __future__ import annotations

from uuid import UUID, uuid4

import asyncpg
import pytest

from backend import db

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def test_pool_initialization(initialize_pool):
    """Test that the database pool is initialized correctly."""
    assert db.pool is not None
    assert db.pool.get_size() > 0


async def test_system_conn_clears_team_context(initialize_pool):
    async with db.system_conn() as conn:
        assert await conn.fetchval("SELECT 1") == 1
        assert await conn.fetchval("SELECT current_setting('app.team_id', true)") == ""


async def test_team_conn_sets_rls_context(test_team):
    """Test that team_conn sets the RLS context correctly."""
    async with db.team_conn(test_team.id) as conn:
        team_id_from_setting = await conn.fetchval("SELECT current_setting('app.team_id', true)")
        assert team_id_from_setting == str(test_team.id)


async def test_uuid_codec(test_team):
    async with db.team_conn(test_team.id) as conn:
        value = await conn.fetchval("SELECT id FROM teams WHERE id = $1", test_team.id)
    assert isinstance(value, UUID)


async def _insert_text_block(conn, digest_id, order, bookmark_id=None, block_type="TEXT"):
    await conn.execute(
        'INSERT INTO digest_blocks (id, digest_id, type, "order", bookmark_id) VALUES ($1, $2, $3, $4, $5)',
        uuid4(),
        digest_id,
        block_type,
        order,
        bookmark_id,
    )


async def test_order_swap_within_transaction(test_team, test_digest):
    """The unique (digest_id, order) constraint is checked at commit, so swaps are allowed."""
    async with db.team_conn(test_team.id) as conn:
        await _insert_text_block(conn, test_digest.id, 0)
        await _insert_text_block(conn, test_digest.id, 1)

    async with db.team_conn(test_team.id) as conn:
        await conn.execute(
            'UPDATE digest_blocks SET "order" = 1 - "order" WHERE digest_id = $1',
            test_digest.id,
        )
        orders = await conn.fetch('SELECT "order" FROM digest_blocks WHERE digest_id = $1', test_digest.id)
    assert sorted(r["order"] for r in orders) == [0, 1]


async def test_duplicate_order_rejected_at_commit(test_team, test_digest):
    with pytest.raises(asyncpg.UniqueViolationError):
        async with db.team_conn(test_team.id) as conn:
            await _insert_text_block(conn, test_digest.id, 0)
            await _insert_text_block(conn, test_digest.id, 0)


async def test_text_block_cannot_reference_bookmark(test_team, test_digest, test_bookmarks):
    with pytest.raises(asyncpg.CheckViolationError):
        async with db.team_conn(test_team.id) as conn:
            await _insert_text_block(conn, test_digest.id, 0, bookmark_id=test_bookmarks[0].id)


async def test_bookmark_block_needs_bookmark(test_team, test_digest):
    with pytest.raises(asyncpg.CheckViolationError):
        async with db.team_conn(test_team.id) as conn:
            await _insert_text_block(conn, test_digest.id, 0, block_type="BOOKMARK")
