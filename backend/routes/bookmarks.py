"""Bookmark pool routes: the source list blocks are dragged from."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from backend.config import settings
from backend.deps import Pagination, get_team
from backend.models.bookmark import Bookmark, BookmarkListResponse, CreateBookmarkRequest
from backend.models.digest import Team
from backend.repos.bookmark_repo import BookmarkRepo

router = APIRouter(prefix="/api/teams/{team_id}/bookmarks", tags=["bookmarks"])
bookmark_repo = BookmarkRepo()


@router.get("", status_code=200)
async def list_bookmarks(
    team: Team = Depends(get_team),
    pagination: Pagination = Depends(),
    search: str | None = Query(default=None, max_length=200),
    only_not_in_digest: bool = Query(default=False),
) -> BookmarkListResponse:
    """List one page of the team's bookmarks, newest first."""
    per_page = pagination.per_page or settings.BOOKMARKS_PAGE_SIZE
    bookmarks, count = await bookmark_repo.list_for_team(
        team.id,
        page=pagination.page,
        per_page=per_page,
        search=search,
        only_not_in_digest=only_not_in_digest,
    )
    return BookmarkListResponse(bookmarks=bookmarks, bookmarks_count=count, per_page=per_page)


@router.post("", status_code=201)
async def create_bookmark(
    req: CreateBookmarkRequest,
    team: Team = Depends(get_team),
) -> Bookmark:
    """Save a link into the team's pool."""
    return await bookmark_repo.create(team.id, req)
