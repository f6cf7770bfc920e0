"""Digest models: named, optionally published collections of ordered blocks."""

from __future__ import annotations

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from backend.config import settings
from backend.models.block import Block


class Team(BaseModel):
    """A team row. Teams are managed outside this service; digests only reference them."""

    id: UUID
    slug: str
    name: str


class Digest(BaseModel):
    """Core digest model. Represents a row in the digests table."""

    id: UUID
    team_id: UUID
    title: str
    slug: str
    description: str | None = None
    published_at: datetime | None = None
    is_template: bool = False
    views: int = 0
    version: int = 0
    created_at: datetime
    updated_at: datetime
    blocks: list[Block] = Field(default_factory=list)

    @property
    def is_draft(self) -> bool:
        return self.published_at is None


class CreateDigestRequest(BaseModel):
    """What the client sends to create a digest or a template."""

    model_config = {"extra": "forbid"}

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    is_template: bool = False


class UpdateDigestRequest(BaseModel):
    """
    What the client sends to update digest metadata. All fields optional.

    `published_at` is tri-state: absent leaves it alone, a timestamp
    publishes, an explicit null moves the digest back to draft.
    """

    model_config = {"extra": "forbid"}

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    published_at: datetime | None = None


class DigestResponse(BaseModel):
    """What the API returns for one digest."""

    id: UUID
    team_id: UUID
    title: str
    slug: str
    description: str | None
    published_at: datetime | None
    is_template: bool
    views: int
    version: int
    created_at: datetime
    updated_at: datetime
    blocks: list[Block]

    @classmethod
    def from_model(cls, digest: Digest, team_slug: str | None = None) -> DigestResponse:
        """Convert internal Digest model to public API response."""
        title = digest.title
        if digest.is_template and team_slug:
            title = format_template_title(title, team_slug)
        return cls(
            id=digest.id,
            team_id=digest.team_id,
            title=title,
            slug=digest.slug,
            description=digest.description,
            published_at=digest.published_at,
            is_template=digest.is_template,
            views=digest.views,
            version=digest.version,
            created_at=digest.created_at,
            updated_at=digest.updated_at,
            blocks=digest.blocks,
        )


class DigestListResponse(BaseModel):
    """One page of a team's digests (or templates)."""

    digests: list[DigestResponse]
    digests_count: int
    per_page: int


class PublicDigestResponse(BaseModel):
    """Published digest data for the public page. No team-internal fields."""

    id: UUID
    title: str
    description: str | None
    published_at: datetime | None
    team: Team
    blocks: list[Block]


class PublicDigestSummary(BaseModel):
    """A published digest in a public listing. Only its BOOKMARK blocks are included."""

    id: UUID
    title: str
    slug: str
    description: str | None
    published_at: datetime
    team: Team
    blocks: list[Block]


class PublicTeamResponse(BaseModel):
    """A team's public page: its published digests, newest first."""

    team: Team
    digests: list[PublicDigestSummary]


class DiscoverResponse(BaseModel):
    """One page of published digests across teams."""

    digests: list[PublicDigestSummary]
    digests_count: int
    per_page: int


# ---------------------------------------------------------------------------
# Titles and slugs
# ---------------------------------------------------------------------------

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase, dash-separated slug. Falls back to 'digest' for empty input."""
    slug = _SLUG_STRIP.sub("-", text.lower()).strip("-")
    return slug[:80].rstrip("-") or "digest"


def template_title(title: str, team_slug: str) -> str:
    """Stored title of a template: '<team>-template-<title>'."""
    return f"{team_slug}{settings.TEMPLATE_TITLE_SEPARATOR}{title}"


def format_template_title(title: str, team_slug: str) -> str:
    """Display title of a template, without the team prefix."""
    prefix = f"{team_slug}{settings.TEMPLATE_TITLE_SEPARATOR}"
    return title[len(prefix):] if title.startswith(prefix) else title
