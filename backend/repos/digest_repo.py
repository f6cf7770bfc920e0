"""Repository for digest operations."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID, uuid4

import asyncpg

from backend.db import system_conn, team_conn
from backend.models.digest import (
    CreateDigestRequest,
    Digest,
    PublicDigestSummary,
    Team,
    UpdateDigestRequest,
    format_template_title,
    slugify,
    template_title,
)
from backend.repos.block_repo import fetch_blocks

logger = logging.getLogger(__name__)

_DIGEST_COLUMNS = """
    id, team_id, title, slug, description, published_at, is_template,
    views, version, created_at, updated_at
"""

# Published and not scheduled for later
_PUBLISHED = "d.published_at IS NOT NULL AND d.published_at <= now()"


def _row_to_digest(row: asyncpg.Record, blocks=None) -> Digest:
    """Convert a database row to a Digest model."""
    return Digest(
        id=row["id"],
        team_id=row["team_id"],
        title=row["title"],
        slug=row["slug"],
        description=row["description"],
        published_at=row["published_at"],
        is_template=row["is_template"],
        views=row["views"],
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        blocks=blocks or [],
    )


def _row_to_summary(row: asyncpg.Record, team: Team, blocks) -> PublicDigestSummary:
    return PublicDigestSummary(
        id=row["id"],
        title=row["title"],
        slug=row["slug"],
        description=row["description"],
        published_at=row["published_at"],
        team=team,
        blocks=blocks,
    )


def _new_slug(title: str, digest_id: UUID) -> str:
    # Short id suffix keeps slugs unique within a team without a retry loop
    return f"{slugify(title)}-{digest_id.hex[:6]}"


class DigestRepo:
    """All digest-related database operations."""

    async def create(self, team_id: UUID, req: CreateDigestRequest, team_slug: str) -> Digest:
        """
        Create a new digest (or template) for a team.

        Template titles are stored with the team prefix so they never
        collide with regular digest titles on the public pages.

        Args:
            team_id: Team UUID
            req: CreateDigestRequest
            team_slug: Slug of the owning team

        Returns:
            Newly created Digest with no blocks
        """
        digest_id = uuid4()
        title = template_title(req.title, team_slug) if req.is_template else req.title
        now = datetime.now(UTC)

        async with team_conn(team_id) as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO digests (id, team_id, title, slug, description, is_template, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $7)
                RETURNING {_DIGEST_COLUMNS}
                """,
                digest_id,
                team_id,
                title,
                _new_slug(req.title, digest_id),
                req.description,
                req.is_template,
                now,
            )

        logger.info("digests: created %s for team=%s (template=%s)", digest_id, team_id, req.is_template)
        return _row_to_digest(row)

    async def get(self, team_id: UUID, digest_id: UUID) -> Digest | None:
        """
        Get a digest with its blocks in order.

        Returns:
            Digest if found and owned by the team, None otherwise
        """
        async with team_conn(team_id) as conn:
            row = await conn.fetchrow(
                f"SELECT {_DIGEST_COLUMNS} FROM digests WHERE id = $1 AND team_id = $2",
                digest_id,
                team_id,
            )
            if not row:
                return None
            return _row_to_digest(row, await fetch_blocks(conn, digest_id))

    async def list_for_team(
        self,
        team_id: UUID,
        page: int = 1,
        per_page: int = 30,
        is_template: bool = False,
    ) -> tuple[list[Digest], int]:
        """
        One page of a team's digests, newest first.

        Returns:
            (digests with blocks, total count matching is_template)
        """
        async with team_conn(team_id) as conn:
            count = await conn.fetchval(
                "SELECT count(*) FROM digests WHERE team_id = $1 AND is_template = $2",
                team_id,
                is_template,
            )
            rows = await conn.fetch(
                f"""
                SELECT {_DIGEST_COLUMNS} FROM digests
                WHERE team_id = $1 AND is_template = $2
                ORDER BY created_at DESC
                LIMIT $3 OFFSET $4
                """,
                team_id,
                is_template,
                per_page,
                (page - 1) * per_page,
            )
            digests = [_row_to_digest(row, await fetch_blocks(conn, row["id"])) for row in rows]
            return digests, count

    async def update(
        self,
        team_id: UUID,
        digest_id: UUID,
        req: UpdateDigestRequest,
        team_slug: str,
    ) -> Digest | None:
        """
        Update digest metadata. Block changes go through BlockRepo.

        Returns:
            Updated Digest if found and owned by the team, None otherwise
        """
        async with team_conn(team_id) as conn:
            current = await conn.fetchrow(
                "SELECT is_template FROM digests WHERE id = $1 AND team_id = $2",
                digest_id,
                team_id,
            )
            if not current:
                return None

            updates: dict = {}
            if req.title is not None:
                title = format_template_title(req.title, team_slug)
                updates["title"] = template_title(title, team_slug) if current["is_template"] else req.title
            if req.description is not None:
                updates["description"] = req.description
            if "published_at" in req.model_fields_set:
                updates["published_at"] = req.published_at

            if updates:
                set_clause = ", ".join(f"{k} = ${i + 3}" for i, k in enumerate(updates))
                # set_clause only contains the fixed column names above
                await conn.execute(
                    f"""
                    UPDATE digests
                    SET {set_clause}, updated_at = now()
                    WHERE id = $1 AND team_id = $2
                    """,  # nosec B608
                    digest_id,
                    team_id,
                    *updates.values(),
                )

            row = await conn.fetchrow(f"SELECT {_DIGEST_COLUMNS} FROM digests WHERE id = $1", digest_id)
            digest = _row_to_digest(row, await fetch_blocks(conn, digest_id))

        if updates:
            logger.info("digests: updated %s fields=%s", digest_id, sorted(updates))
        return digest

    async def delete(self, team_id: UUID, digest_id: UUID) -> bool:
        """
        Delete a digest. Its blocks go with it (ON DELETE CASCADE).

        Returns:
            True if deleted, False if not found or not owned by the team
        """
        async with team_conn(team_id) as conn:
            result = await conn.execute(
                "DELETE FROM digests WHERE id = $1 AND team_id = $2",
                digest_id,
                team_id,
            )
        deleted = result == "DELETE 1"
        if deleted:
            logger.info("digests: deleted %s", digest_id)
        return deleted

    async def create_from_template(self, team_id: UUID, template_id: UUID, team_slug: str) -> Digest | None:
        """
        Start a new digest from a template.

        The new digest gets the template's display title, description and a
        copy of every block in the same order. Later edits to the template do
        not affect it.

        Returns:
            New Digest, or None if the template does not exist for this team
        """
        digest_id = uuid4()

        async with team_conn(team_id) as conn:
            template = await conn.fetchrow(
                f"SELECT {_DIGEST_COLUMNS} FROM digests WHERE id = $1 AND team_id = $2 AND is_template",
                template_id,
                team_id,
            )
            if not template:
                return None

            title = format_template_title(template["title"], team_slug)
            await conn.execute(
                """
                INSERT INTO digests (id, team_id, title, slug, description, is_template)
                VALUES ($1, $2, $3, $4, $5, false)
                """,
                digest_id,
                team_id,
                title,
                _new_slug(title, digest_id),
                template["description"],
            )
            await conn.execute(
                """
                INSERT INTO digest_blocks
                    (id, digest_id, type, "order", bookmark_id, title, description, text, style)
                SELECT gen_random_uuid(), $2, type, "order", bookmark_id, title, description, text, style
                FROM digest_blocks
                WHERE digest_id = $1
                """,
                template_id,
                digest_id,
            )
            row = await conn.fetchrow(f"SELECT {_DIGEST_COLUMNS} FROM digests WHERE id = $1", digest_id)
            digest = _row_to_digest(row, await fetch_blocks(conn, digest_id))

        logger.info("digests: created %s from template %s (%d blocks)", digest_id, template_id, len(digest.blocks))
        return digest

    async def get_public(self, team: Team, digest_slug: str, preview: bool = False) -> Digest | None:
        """
        Get a published digest by slug for the public page.

        Drafts and digests scheduled in the future are hidden unless
        `preview` is set.
        """
        async with system_conn() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {_DIGEST_COLUMNS} FROM digests
                WHERE team_id = $1 AND slug = $2
                  AND ($3 OR (published_at IS NOT NULL AND published_at <= now()))
                """,
                team.id,
                digest_slug,
                preview,
            )
            if not row:
                return None
            return _row_to_digest(row, await fetch_blocks(conn, row["id"]))

    async def increment_views(self, digest_id: UUID) -> None:
        async with system_conn() as conn:
            await conn.execute("UPDATE digests SET views = views + 1 WHERE id = $1", digest_id)

    async def list_published_for_team(self, team: Team) -> list[PublicDigestSummary]:
        """
        A team's published digests for its public page, newest first.

        Digests scheduled for later (published_at in the future) are left out.
        """
        async with system_conn() as conn:
            rows = await conn.fetch(
                f"""
                SELECT d.id, d.title, d.slug, d.description, d.published_at
                FROM digests d
                WHERE d.team_id = $1 AND {_PUBLISHED}
                ORDER BY d.published_at DESC
                """,
                team.id,
            )
            return [
                _row_to_summary(row, team, await fetch_blocks(conn, row["id"], bookmarks_only=True)) for row in rows
            ]

    async def list_discover(
        self,
        page: int = 1,
        per_page: int = 10,
        team_id: UUID | None = None,
    ) -> tuple[list[PublicDigestSummary], int]:
        """
        One page of published digests across all teams, newest first.

        Only digests with at least one bookmark block are listed. `team_id`
        narrows the listing to one team.

        Returns:
            (digests with their bookmark blocks, total count)
        """
        where = f"""
            {_PUBLISHED}
            AND ($1::uuid IS NULL OR d.team_id = $1)
            AND EXISTS (SELECT 1 FROM digest_blocks b WHERE b.digest_id = d.id AND b.bookmark_id IS NOT NULL)
        """
        async with system_conn() as conn:
            count = await conn.fetchval(f"SELECT count(*) FROM digests d WHERE {where}", team_id)
            rows = await conn.fetch(
                f"""
                SELECT d.id, d.title, d.slug, d.description, d.published_at,
                       t.id AS team_id, t.slug AS team_slug, t.name AS team_name
                FROM digests d
                JOIN teams t ON t.id = d.team_id
                WHERE {where}
                ORDER BY d.published_at DESC
                LIMIT $2 OFFSET $3
                """,
                team_id,
                per_page,
                (page - 1) * per_page,
            )
            digests = []
            for row in rows:
                team = Team(id=row["team_id"], slug=row["team_slug"], name=row["team_name"])
                digests.append(_row_to_summary(row, team, await fetch_blocks(conn, row["id"], bookmarks_only=True)))
            return digests, count
