"""
Repository layer for the digest service.

All SQL lives here and ONLY here. No database access outside this module.
"""

from backend.repos.block_repo import BlockRepo
from backend.repos.bookmark_repo import BookmarkRepo
from backend.repos.digest_repo import DigestRepo
from backend.repos.team_repo import TeamRepo

__all__ = [
    "TeamRepo",
    "DigestRepo",
    "BlockRepo",
    "BookmarkRepo",
]
