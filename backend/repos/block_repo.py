"""
Repository for digest block operations.

Every mutation runs in one transaction that locks the digest row first,
computes an order plan with engine.kernel.ordering, writes only the rows
whose order changed, and bumps the digest version. The unique
(digest_id, "order") constraint is deferred to commit, so intermediate
states inside the transaction may overlap.
"""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

import asyncpg

from backend.db import team_conn
from backend.errors import ConflictError, ValidationError
from backend.models.block import Block, BlockBookmark, CreateBlockRequest, UpdateBlockRequest
from engine.kernel.ordering import is_dense, plan_compact, plan_insert, plan_move, plan_remove
from engine.kernel.types import OrderingError, OrderPlan

logger = logging.getLogger(__name__)

BLOCK_ID_TAKEN_MESSAGE = "Block id is already used."

BLOCK_SELECT = """
    SELECT b.id, b.digest_id, b.type, b."order", b.bookmark_id,
           b.title, b.description, b.text, b.style,
           bm.url AS bookmark_url, bm.title AS bookmark_title,
           bm.description AS bookmark_description, bm.image AS bookmark_image
    FROM digest_blocks b
    LEFT JOIN bookmarks bm ON bm.id = b.bookmark_id
"""


def row_to_block(row: asyncpg.Record) -> Block:
    """Convert a BLOCK_SELECT row to a Block model."""
    bookmark = None
    if row["bookmark_id"] is not None and row["bookmark_url"] is not None:
        bookmark = BlockBookmark(
            id=row["bookmark_id"],
            url=row["bookmark_url"],
            title=row["bookmark_title"],
            description=row["bookmark_description"],
            image=row["bookmark_image"],
        )
    return Block(
        id=row["id"],
        digest_id=row["digest_id"],
        type=row["type"],
        order=row["order"],
        bookmark_id=row["bookmark_id"],
        title=row["title"],
        description=row["description"],
        text=row["text"],
        style=row["style"],
        bookmark=bookmark,
    )


async def fetch_blocks(conn: asyncpg.Connection, digest_id: UUID, bookmarks_only: bool = False) -> list[Block]:
    """All blocks of a digest, ordered. Listings pass bookmarks_only to skip text blocks."""
    rows = await conn.fetch(
        f"""
        {BLOCK_SELECT}
        WHERE b.digest_id = $1 AND (NOT $2 OR b.type = 'BOOKMARK')
        ORDER BY b."order"
        """,
        digest_id,
        bookmarks_only,
    )
    return [row_to_block(row) for row in rows]


class BlockRepo:
    """All block-related database operations."""

    async def insert(self, team_id: UUID, digest_id: UUID, req: CreateBlockRequest) -> tuple[Block, int, bool]:
        """
        Insert a block at req.position, shifting later blocks down by one.

        Args:
            team_id: Team UUID
            digest_id: Digest UUID
            req: CreateBlockRequest

        Returns:
            (block, digest version, created). `created` is False when
            req.block_id already existed in this digest (a resent request).

        Raises:
            ConflictError: digest missing or version mismatch
            ValidationError: position out of range, bookmark not in the team's pool
        """
        async with team_conn(team_id) as conn:
            version = await _lock_digest(conn, team_id, digest_id)

            if req.block_id is not None:
                existing = await conn.fetchrow(f"{BLOCK_SELECT} WHERE b.id = $1", req.block_id)
                if existing is not None:
                    if existing["digest_id"] != digest_id:
                        raise ConflictError(BLOCK_ID_TAKEN_MESSAGE, "BLOCK_ID_TAKEN")
                    logger.info("blocks: insert retry for block=%s digest=%s", req.block_id, digest_id)
                    return row_to_block(existing), version, False

            _check_version(version, req.expected_version)

            if req.bookmark_id is not None:
                found = await conn.fetchval(
                    "SELECT 1 FROM bookmarks WHERE id = $1 AND team_id = $2",
                    req.bookmark_id,
                    team_id,
                )
                if not found:
                    raise ValidationError("Bookmark not found in this team.", "BOOKMARK_NOT_FOUND")

            ids = await _ordered_ids(conn, digest_id)
            block_id = req.block_id or uuid4()
            plan = _plan(plan_insert, ids, block_id, req.position)
            new_order = plan.order_of(block_id)

            # Shift first, then insert the new row into the freed slot
            await _apply(conn, [u for u in plan.updates if u.block_id != block_id])
            try:
                await conn.execute(
                    """
                    INSERT INTO digest_blocks
                        (id, digest_id, type, "order", bookmark_id, title, description, text, style)
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                    """,
                    block_id,
                    digest_id,
                    req.type.value,
                    new_order,
                    req.bookmark_id,
                    req.title,
                    req.description,
                    req.text,
                    req.style,
                )
            except asyncpg.UniqueViolationError as e:
                # The order constraint is deferred, so only the primary key fails here:
                # the id belongs to a row this team cannot see.
                raise ConflictError(BLOCK_ID_TAKEN_MESSAGE, "BLOCK_ID_TAKEN") from e
            version = await _bump_version(conn, digest_id)
            row = await conn.fetchrow(f"{BLOCK_SELECT} WHERE b.id = $1", block_id)

        logger.info("blocks: inserted %s at %d in digest=%s (v%d)", block_id, new_order, digest_id, version)
        return row_to_block(row), version, True

    async def update(self, team_id: UUID, digest_id: UUID, block_id: UUID, req: UpdateBlockRequest) -> int:
        """
        Move a block and/or edit its content.

        Moving a block onto its current position changes nothing and does
        not bump the version.

        Returns:
            Digest version after the update

        Raises:
            ConflictError: digest or block missing, version mismatch
            ValidationError: position out of range
        """
        async with team_conn(team_id) as conn:
            version = await _lock_digest(conn, team_id, digest_id)
            _check_version(version, req.expected_version)

            ids = await _ordered_ids(conn, digest_id)
            if block_id not in ids:
                raise ConflictError("Block not found in this digest.", "BLOCK_NOT_FOUND")

            changed = False
            if req.position is not None:
                plan = _plan(plan_move, ids, block_id, req.position)
                await _apply(conn, plan.updates)
                changed = plan.changed

            content = req.content_updates()
            if content:
                set_clause = ", ".join(f"{k} = ${i + 2}" for i, k in enumerate(content))
                # set_clause only contains fixed column names from content_updates()
                await conn.execute(
                    f"UPDATE digest_blocks SET {set_clause} WHERE id = $1",  # nosec B608
                    block_id,
                    *content.values(),
                )
                changed = True

            if changed:
                version = await _bump_version(conn, digest_id)

        logger.info("blocks: updated %s in digest=%s position=%s (v%d)", block_id, digest_id, req.position, version)
        return version

    async def remove(self, team_id: UUID, digest_id: UUID, block_id: UUID, expected_version: int | None = None) -> int:
        """
        Remove a block and close the gap it leaves.

        Returns:
            Digest version after the removal

        Raises:
            ConflictError: digest or block missing, version mismatch
        """
        async with team_conn(team_id) as conn:
            version = await _lock_digest(conn, team_id, digest_id)
            _check_version(version, expected_version)

            ids = await _ordered_ids(conn, digest_id)
            plan = _plan(plan_remove, ids, block_id)

            await conn.execute("DELETE FROM digest_blocks WHERE id = $1", block_id)
            await _apply(conn, plan.updates)
            version = await _bump_version(conn, digest_id)

        logger.info("blocks: removed %s from digest=%s (v%d)", block_id, digest_id, version)
        return version


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _lock_digest(conn: asyncpg.Connection, team_id: UUID, digest_id: UUID) -> int:
    """Lock the digest row for the rest of the transaction and return its version."""
    version = await conn.fetchval(
        "SELECT version FROM digests WHERE id = $1 AND team_id = $2 FOR UPDATE",
        digest_id,
        team_id,
    )
    if version is None:
        raise ConflictError("Digest not found. It may have been deleted.", "DIGEST_NOT_FOUND")
    return version


def _check_version(current: int, expected: int | None) -> None:
    if expected is not None and expected != current:
        raise ConflictError(
            "Digest was modified by someone else. Refresh and try again.",
            "VERSION_MISMATCH",
        )


async def _ordered_ids(conn: asyncpg.Connection, digest_id: UUID) -> list[UUID]:
    """Block ids in order. Repairs gapped or duplicated orders in place."""
    rows = await conn.fetch(
        'SELECT id, "order" FROM digest_blocks WHERE digest_id = $1 ORDER BY "order", id',
        digest_id,
    )
    ids = [row["id"] for row in rows]
    orders = [row["order"] for row in rows]
    if not is_dense(orders):
        logger.warning("blocks: digest=%s had non-dense orders %s, compacting", digest_id, orders)
        await _apply(conn, plan_compact(ids, orders).updates)
    return ids


def _plan(fn, *args) -> OrderPlan:
    try:
        return fn(*args)
    except OrderingError as e:
        if e.code == "POSITION_OUT_OF_RANGE":
            raise ValidationError(e.message, e.code) from e
        raise ConflictError(e.message, e.code) from e


async def _apply(conn: asyncpg.Connection, updates) -> None:
    if not updates:
        return
    await conn.executemany(
        'UPDATE digest_blocks SET "order" = $2 WHERE id = $1',
        [(u.block_id, u.order) for u in updates],
    )


async def _bump_version(conn: asyncpg.Connection, digest_id: UUID) -> int:
    return await conn.fetchval(
        "UPDATE digests SET version = version + 1, updated_at = now() WHERE id = $1 RETURNING version",
        digest_id,
    )
