"""
Database connection pool and RLS-scoped connection managers.

All database access goes through team_conn() or system_conn().
Never use pool.acquire() directly outside this module.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from uuid import UUID

import asyncpg

from backend import config

logger = logging.getLogger(__name__)

pool: asyncpg.Pool | None = None


async def init_pool() -> None:
    """
    Initialize the connection pool.
    Called once at application startup.
    """
    global pool
    pool = await asyncpg.create_pool(
        dsn=config.settings.DATABASE_URL,
        min_size=config.settings.POOL_MIN_SIZE,
        max_size=config.settings.POOL_MAX_SIZE,
        command_timeout=config.settings.COMMAND_TIMEOUT_SECONDS,
        init=_init_connection,
    )
    logger.info("db: pool ready (min=%d max=%d)", config.settings.POOL_MIN_SIZE, config.settings.POOL_MAX_SIZE)


async def close_pool() -> None:
    """
    Close the connection pool.
    Called at application shutdown.
    """
    global pool
    if pool is not None:
        await pool.close()
        pool = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    """
    Initialize each new connection.
    Sets up type codecs for UUID and JSON handling.
    """
    await conn.set_type_codec(
        "uuid",
        encoder=str,
        decoder=lambda x: UUID(x),
        schema="pg_catalog",
    )
    # JSONB codec - decode to Python dict/list
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


@asynccontextmanager
async def team_conn(team_id: str | UUID):
    """
    Acquire a database connection scoped to a specific team via RLS.

    Every query through this connection can only see/modify rows
    belonging to this team. Enforced by Postgres RLS policies.

    The whole block runs in one transaction, so a block mutation that
    locks its digest row holds the lock until the block exits.

    Usage:
        async with team_conn(team_id) as conn:
            row = await conn.fetchrow("SELECT * FROM digests WHERE id = $1", digest_id)

    Args:
        team_id: UUID of the team to scope the connection to

    Yields:
        asyncpg.Connection with RLS context set
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as conn:
        async with conn.transaction():
            # Set RLS context. All policies reference current_setting('app.team_id')
            await conn.execute(
                "SELECT set_config('app.team_id', $1, true)",
                str(team_id),
            )
            yield conn


@asynccontextmanager
async def system_conn():
    """
    Acquire a database connection without team scoping.

    For system operations only:
    - Migrations (alembic)
    - Public digest pages (lookup by team slug, published rows only)
    - View counters
    - Test fixtures

    WARNING: Should be rare. If you're using this in a route handler
    that returns team data, you're probably doing it wrong.

    Yields:
        asyncpg.Connection without RLS scoping
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as conn:
        async with conn.transaction():
            # RLS policies bypass when app.team_id is empty. LOCAL (true) keeps it per-transaction.
            await conn.execute("SELECT set_config('app.team_id', '', true)")
            yield conn
