"""Repository for the team bookmark pool."""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

import asyncpg

from backend.db import system_conn, team_conn
from backend.models.bookmark import Bookmark, CreateBookmarkRequest

logger = logging.getLogger(__name__)

_BOOKMARK_SELECT = """
    SELECT bm.id, bm.team_id, bm.url, bm.title, bm.description, bm.image, bm.views, bm.created_at,
           COALESCE(
               (SELECT array_agg(DISTINCT b.digest_id) FROM digest_blocks b WHERE b.bookmark_id = bm.id),
               '{}'
           ) AS digest_ids
    FROM bookmarks bm
"""


def _row_to_bookmark(row: asyncpg.Record) -> Bookmark:
    """Convert a database row to a Bookmark model."""
    return Bookmark(
        id=row["id"],
        team_id=row["team_id"],
        url=row["url"],
        title=row["title"],
        description=row["description"],
        image=row["image"],
        views=row["views"],
        created_at=row["created_at"],
        digest_ids=list(row["digest_ids"]),
    )


class BookmarkRepo:
    """All bookmark-related database operations."""

    async def create(self, team_id: UUID, req: CreateBookmarkRequest) -> Bookmark:
        bookmark_id = uuid4()
        async with team_conn(team_id) as conn:
            await conn.execute(
                """
                INSERT INTO bookmarks (id, team_id, url, title, description, image)
                VALUES ($1, $2, $3, $4, $5, $6)
                """,
                bookmark_id,
                team_id,
                req.url,
                req.title,
                req.description,
                req.image,
            )
            row = await conn.fetchrow(f"{_BOOKMARK_SELECT} WHERE bm.id = $1", bookmark_id)

        logger.info("bookmarks: saved %s for team=%s", bookmark_id, team_id)
        return _row_to_bookmark(row)

    async def get(self, team_id: UUID, bookmark_id: UUID) -> Bookmark | None:
        async with team_conn(team_id) as conn:
            row = await conn.fetchrow(
                f"{_BOOKMARK_SELECT} WHERE bm.id = $1 AND bm.team_id = $2",
                bookmark_id,
                team_id,
            )
            return _row_to_bookmark(row) if row else None

    async def list_for_team(
        self,
        team_id: UUID,
        page: int = 1,
        per_page: int = 10,
        search: str | None = None,
        only_not_in_digest: bool = False,
    ) -> tuple[list[Bookmark], int]:
        """
        One page of the team's bookmark pool, newest first.

        Args:
            team_id: Team UUID
            page: 1-based page number
            per_page: Page size
            search: Case-insensitive match on title, description or url
            only_not_in_digest: Hide bookmarks already used by any digest block

        Returns:
            (bookmarks, total count matching the filters)
        """
        conditions = ["bm.team_id = $1"]
        args: list = [team_id]

        if search:
            args.append(f"%{search}%")
            n = len(args)
            conditions.append(f"(bm.title ILIKE ${n} OR bm.description ILIKE ${n} OR bm.url ILIKE ${n})")
        if only_not_in_digest:
            conditions.append("NOT EXISTS (SELECT 1 FROM digest_blocks b WHERE b.bookmark_id = bm.id)")

        where = " AND ".join(conditions)

        async with team_conn(team_id) as conn:
            # where only contains the fixed fragments above; values are bound
            count = await conn.fetchval(f"SELECT count(*) FROM bookmarks bm WHERE {where}", *args)  # nosec B608
            rows = await conn.fetch(
                f"""
                {_BOOKMARK_SELECT}
                WHERE {where}
                ORDER BY bm.created_at DESC
                LIMIT ${len(args) + 1} OFFSET ${len(args) + 2}
                """,  # nosec B608
                *args,
                per_page,
                (page - 1) * per_page,
            )
            return [_row_to_bookmark(row) for row in rows], count

    async def increment_views(self, bookmark_id: UUID) -> bool:
        async with system_conn() as conn:
            result = await conn.execute("UPDATE bookmarks SET views = views + 1 WHERE id = $1", bookmark_id)
            return result == "UPDATE 1"
