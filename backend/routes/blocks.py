"""
Digest block routes: insert at position, move/edit, remove.

Each call is one transaction on the server. Clients send the digest version
they last saw as expected_version; a stale version is answered with 409.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from backend.deps import get_team
from backend.models.block import (
    BlockMutationResponse,
    BlockResponse,
    CreateBlockRequest,
    UpdateBlockRequest,
)
from backend.models.digest import Team
from backend.repos.block_repo import BlockRepo

router = APIRouter(prefix="/api/teams/{team_id}/digests/{digest_id}/blocks", tags=["blocks"])
block_repo = BlockRepo()


@router.post("", status_code=201)
async def create_block(
    digest_id: UUID,
    req: CreateBlockRequest,
    response: Response,
    team: Team = Depends(get_team),
) -> BlockResponse:
    """
    Insert a block at req.position.

    Returns 201 with the new block, or 200 with the existing block when
    req.block_id was already created by an earlier attempt.
    """
    block, version, created = await block_repo.insert(team.id, digest_id, req)
    if not created:
        response.status_code = status.HTTP_200_OK
    return BlockResponse(**block.model_dump(), digest_version=version)


@router.patch("/{block_id}", status_code=200)
async def update_block(
    digest_id: UUID,
    block_id: UUID,
    req: UpdateBlockRequest,
    team: Team = Depends(get_team),
) -> BlockMutationResponse:
    """Move a block to req.position and/or edit its text fields."""
    version = await block_repo.update(team.id, digest_id, block_id, req)
    return BlockMutationResponse(version=version)


@router.delete("/{block_id}", status_code=200)
async def delete_block(
    digest_id: UUID,
    block_id: UUID,
    expected_version: int | None = Query(default=None, ge=0),
    team: Team = Depends(get_team),
) -> BlockMutationResponse:
    """Remove a block; the blocks after it move up one place."""
    version = await block_repo.remove(team.id, digest_id, block_id, expected_version)
    return BlockMutationResponse(version=version)
