"""Public digest routes: published data only, no team scoping in the path."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from backend.config import settings
from backend.deps import Pagination
from backend.errors import NotFoundError
from backend.models.digest import DiscoverResponse, PublicDigestResponse, PublicTeamResponse, Team
from backend.repos.bookmark_repo import BookmarkRepo
from backend.repos.digest_repo import DigestRepo
from backend.repos.team_repo import TeamRepo

router = APIRouter(prefix="/api/public", tags=["public"])
team_repo = TeamRepo()
digest_repo = DigestRepo()
bookmark_repo = BookmarkRepo()

# Fixed paths are registered before the slug routes so they are not read as team slugs.


@router.get("/discover", status_code=200)
async def discover_digests(
    pagination: Pagination = Depends(),
    team_id: UUID | None = Query(default=None),
) -> DiscoverResponse:
    """Published digests with bookmark blocks, across teams or for one team."""
    per_page = pagination.per_page or settings.DISCOVER_PAGE_SIZE
    digests, count = await digest_repo.list_discover(pagination.page, per_page, team_id=team_id)
    return DiscoverResponse(digests=digests, digests_count=count, per_page=per_page)


@router.get("/teams/recent", status_code=200)
async def recent_teams() -> list[Team]:
    """The last teams to publish a digest."""
    return await team_repo.list_recently_published(settings.RECENT_TEAMS_LIMIT)


@router.get("/{team_slug}", status_code=200)
async def get_public_team(team_slug: str) -> PublicTeamResponse:
    """A team and its published digests, newest first."""
    team = await team_repo.get_by_slug(team_slug)
    if not team:
        raise NotFoundError("Team not found.", "TEAM_NOT_FOUND")

    digests = await digest_repo.list_published_for_team(team)
    return PublicTeamResponse(team=team, digests=digests)


@router.get("/{team_slug}/{digest_slug}", status_code=200)
async def get_public_digest(
    team_slug: str,
    digest_slug: str,
    preview: bool = Query(default=False),
) -> PublicDigestResponse:
    """
    Published digest data for the public page.

    Counts a view unless `preview` is set. Preview also shows drafts.
    """
    team = await team_repo.get_by_slug(team_slug)
    if not team:
        raise NotFoundError("Digest not found.", "DIGEST_NOT_FOUND")

    digest = await digest_repo.get_public(team, digest_slug, preview=preview)
    if not digest:
        raise NotFoundError("Digest not found.", "DIGEST_NOT_FOUND")

    if not preview:
        await digest_repo.increment_views(digest.id)

    return PublicDigestResponse(
        id=digest.id,
        title=digest.title,
        description=digest.description,
        published_at=digest.published_at,
        team=team,
        blocks=digest.blocks,
    )


@router.post("/bookmarks/{bookmark_id}/view", status_code=200)
async def count_bookmark_view(bookmark_id: UUID) -> dict[str, bool]:
    """Count a click-through on a bookmark shown in a public digest."""
    counted = await bookmark_repo.increment_views(bookmark_id)
    if not counted:
        raise NotFoundError("Bookmark not found.", "BOOKMARK_NOT_FOUND")
    return {"ok": True}
