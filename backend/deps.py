"""
Shared route dependencies.

Team scoping: every team route resolves {team_id} to a Team row first.
Membership checks belong to the auth layer in front of this service.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import Query

from backend.config import settings
from backend.errors import NotFoundError
from backend.models.digest import Team
from backend.repos.team_repo import TeamRepo

team_repo = TeamRepo()


async def get_team(team_id: UUID) -> Team:
    """Resolve the {team_id} path parameter. 404 if the team does not exist."""
    team = await team_repo.get(team_id)
    if not team:
        raise NotFoundError("Team not found.", "TEAM_NOT_FOUND")
    return team


class Pagination:
    """page / per_page query parameters, clamped to MAX_PAGE_SIZE."""

    def __init__(self, page: int = Query(default=1, ge=1), per_page: int | None = Query(default=None, ge=1)):
        self.page = page
        self.per_page = min(per_page, settings.MAX_PAGE_SIZE) if per_page else None
