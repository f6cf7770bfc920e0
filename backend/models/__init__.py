"""
Pydantic models for the digest service.

All data shapes defined here. No imports from db, repos, or routes.
"""

from backend.models.block import (
    Block,
    BlockBookmark,
    BlockMutationResponse,
    BlockResponse,
    CreateBlockRequest,
    UpdateBlockRequest,
)
from backend.models.bookmark import Bookmark, BookmarkListResponse, CreateBookmarkRequest
from backend.models.digest import (
    CreateDigestRequest,
    Digest,
    DigestListResponse,
    DigestResponse,
    DiscoverResponse,
    PublicDigestResponse,
    PublicDigestSummary,
    PublicTeamResponse,
    Team,
    UpdateDigestRequest,
)

__all__ = [
    # Team
    "Team",
    # Digest models
    "Digest",
    "CreateDigestRequest",
    "UpdateDigestRequest",
    "DigestResponse",
    "DigestListResponse",
    "PublicDigestResponse",
    "PublicDigestSummary",
    "PublicTeamResponse",
    "DiscoverResponse",
    # Block models
    "Block",
    "BlockBookmark",
    "CreateBlockRequest",
    "UpdateBlockRequest",
    "BlockResponse",
    "BlockMutationResponse",
    # Bookmark models
    "Bookmark",
    "CreateBookmarkRequest",
    "BookmarkListResponse",
]
