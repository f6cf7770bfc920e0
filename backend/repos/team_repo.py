"""Repository for team lookups. Teams themselves are managed elsewhere."""

from __future__ import annotations

from uuid import UUID

import asyncpg

from backend.db import system_conn
from backend.models.digest import Team


def _row_to_team(row: asyncpg.Record) -> Team:
    return Team(id=row["id"], slug=row["slug"], name=row["name"])


class TeamRepo:
    """Read-only team queries."""

    async def get(self, team_id: UUID) -> Team | None:
        async with system_conn() as conn:
            row = await conn.fetchrow("SELECT id, slug, name FROM teams WHERE id = $1", team_id)
            return _row_to_team(row) if row else None

    async def get_by_slug(self, slug: str) -> Team | None:
        async with system_conn() as conn:
            row = await conn.fetchrow("SELECT id, slug, name FROM teams WHERE slug = $1", slug)
            return _row_to_team(row) if row else None

    async def list_recently_published(self, limit: int = 5) -> list[Team]:
        """Teams that published most recently, one entry per team, latest first."""
        async with system_conn() as conn:
            rows = await conn.fetch(
                """
                SELECT t.id, t.slug, t.name
                FROM teams t
                JOIN digests d ON d.team_id = t.id
                WHERE d.published_at IS NOT NULL AND d.published_at <= now()
                GROUP BY t.id, t.slug, t.name
                ORDER BY max(d.published_at) DESC
                LIMIT $1
                """,
                limit,
            )
            return [_row_to_team(row) for row in rows]
