"""Digest block models: one ordered unit of digest content."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from engine.kernel.types import BlockType


class BlockBookmark(BaseModel):
    """Bookmark fields embedded in a BOOKMARK block."""

    id: UUID
    url: str
    title: str | None = None
    description: str | None = None
    image: str | None = None


class Block(BaseModel):
    """Core block model. Represents a row in the digest_blocks table."""

    id: UUID
    digest_id: UUID
    type: BlockType
    order: int = Field(ge=0)
    bookmark_id: UUID | None = None
    title: str | None = None
    description: str | None = None
    text: str | None = None
    style: str | None = None
    bookmark: BlockBookmark | None = None


class CreateBlockRequest(BaseModel):
    """
    What the client sends to insert a block at a position.

    `block_id` is optional and client generated. Resending the same request
    with the same `block_id` returns the block created the first time.
    """

    model_config = {"extra": "forbid"}

    position: int = Field(ge=0)
    type: BlockType = BlockType.BOOKMARK
    bookmark_id: UUID | None = None
    block_id: UUID | None = None
    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=5000)
    text: str | None = Field(default=None, max_length=20000)
    style: str | None = Field(default=None, max_length=50)
    expected_version: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _bookmark_matches_type(self) -> CreateBlockRequest:
        if self.type == BlockType.BOOKMARK and self.bookmark_id is None:
            raise ValueError("bookmark_id is required for BOOKMARK blocks")
        if self.type != BlockType.BOOKMARK and self.bookmark_id is not None:
            raise ValueError("bookmark_id is only allowed on BOOKMARK blocks")
        return self


class UpdateBlockRequest(BaseModel):
    """What the client sends to move a block and/or edit its content. All fields optional."""

    model_config = {"extra": "forbid"}

    position: int | None = Field(default=None, ge=0)
    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=5000)
    text: str | None = Field(default=None, max_length=20000)
    style: str | None = Field(default=None, max_length=50)
    expected_version: int | None = Field(default=None, ge=0)

    def content_updates(self) -> dict[str, str]:
        """Non-None content fields, keyed by column name."""
        return {
            k: v
            for k, v in (
                ("title", self.title),
                ("description", self.description),
                ("text", self.text),
                ("style", self.style),
            )
            if v is not None
        }


class BlockResponse(Block):
    """A created block plus the digest version after the insert."""

    digest_version: int


class BlockMutationResponse(BaseModel):
    """Acknowledgement for move, edit and remove."""

    ok: bool = True
    version: int
