"""Bookmark models: the team's pool of saved links."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class Bookmark(BaseModel):
    """Core bookmark model. Represents a row in the bookmarks table."""

    id: UUID
    team_id: UUID
    url: str
    title: str | None = None
    description: str | None = None
    image: str | None = None
    views: int = 0
    created_at: datetime
    # Digests that currently embed this bookmark (filled by list queries)
    digest_ids: list[UUID] = Field(default_factory=list)


class CreateBookmarkRequest(BaseModel):
    """What the client sends to save a link into the pool."""

    model_config = {"extra": "forbid"}

    url: str = Field(min_length=1, max_length=2000, pattern=r"^https?://")
    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=5000)
    image: str | None = Field(default=None, max_length=2000)


class BookmarkListResponse(BaseModel):
    """One page of the bookmark pool."""

    bookmarks: list[Bookmark]
    bookmarks_count: int
    per_page: int
