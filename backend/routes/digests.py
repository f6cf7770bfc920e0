"""Digest CRUD routes: list, create, get, update, delete, use template."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from backend.config import settings
from backend.deps import Pagination, get_team
from backend.errors import NotFoundError
from backend.models.digest import (
    CreateDigestRequest,
    DigestListResponse,
    DigestResponse,
    Team,
    UpdateDigestRequest,
)
from backend.repos.digest_repo import DigestRepo

router = APIRouter(prefix="/api/teams/{team_id}/digests", tags=["digests"])
digest_repo = DigestRepo()


def _not_found() -> NotFoundError:
    return NotFoundError("Digest not found.", "DIGEST_NOT_FOUND")


@router.get("", status_code=200)
async def list_digests(
    team: Team = Depends(get_team),
    pagination: Pagination = Depends(),
    is_template: bool = Query(default=False),
) -> DigestListResponse:
    """List one page of the team's digests (or templates), newest first."""
    per_page = pagination.per_page or settings.DEFAULT_PAGE_SIZE
    digests, count = await digest_repo.list_for_team(team.id, pagination.page, per_page, is_template)
    return DigestListResponse(
        digests=[DigestResponse.from_model(d, team.slug) for d in digests],
        digests_count=count,
        per_page=per_page,
    )


@router.post("", status_code=201)
async def create_digest(
    req: CreateDigestRequest,
    team: Team = Depends(get_team),
) -> DigestResponse:
    """Create a new digest or template."""
    digest = await digest_repo.create(team.id, req, team.slug)
    return DigestResponse.from_model(digest, team.slug)


@router.get("/{digest_id}", status_code=200)
async def get_digest(
    digest_id: UUID,
    team: Team = Depends(get_team),
) -> DigestResponse:
    """Get a digest with its blocks in order."""
    digest = await digest_repo.get(team.id, digest_id)
    if not digest:
        raise _not_found()
    return DigestResponse.from_model(digest, team.slug)


@router.patch("/{digest_id}", status_code=200)
async def update_digest(
    digest_id: UUID,
    req: UpdateDigestRequest,
    team: Team = Depends(get_team),
) -> DigestResponse:
    """Update title, description, or publication date."""
    digest = await digest_repo.update(team.id, digest_id, req, team.slug)
    if not digest:
        raise _not_found()
    return DigestResponse.from_model(digest, team.slug)


@router.delete("/{digest_id}", status_code=200)
async def delete_digest(
    digest_id: UUID,
    team: Team = Depends(get_team),
) -> dict[str, str]:
    """Permanently delete a digest and its blocks."""
    deleted = await digest_repo.delete(team.id, digest_id)
    if not deleted:
        raise _not_found()
    return {"message": "Digest deleted."}


@router.post("/{template_id}/use", status_code=201)
async def use_template(
    template_id: UUID,
    team: Team = Depends(get_team),
) -> DigestResponse:
    """Create a new digest pre-filled with a template's blocks."""
    digest = await digest_repo.create_from_template(team.id, template_id, team.slug)
    if not digest:
        raise NotFoundError("Template not found.", "TEMPLATE_NOT_FOUND")
    return DigestResponse.from_model(digest, team.slug)
