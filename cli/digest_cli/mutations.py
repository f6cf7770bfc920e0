"""
Block mutation client for one digest.

Holds two views of the block list:

  confirmed   the last list fetched from the server
  overlay     a tentative list shown while a move or remove is in flight

The confirmed list only changes by fetching. Once a mutation settles,
whether it succeeded or failed, the overlay is dropped and the digest is
fetched again, so local state always converges on the server's.

Every mutation sends the digest version it was based on. If someone else
changed the digest in the meantime the server answers 409 (ConflictError)
and the refetch brings the newer list in.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from uuid import uuid4

from digest_cli.client import ApiClient
from digest_cli.errors import GENERIC_MESSAGE, ApiError, NetworkError, ValidationError
from engine.kernel.ordering import plan_move, plan_remove
from engine.kernel.types import BlockType, OrderingError

logger = logging.getLogger(__name__)


class BlockMutationClient:
    """Insert, move and remove blocks of one digest with an optimistic overlay."""

    def __init__(self, api: ApiClient, team_id: str, digest_id: str):
        self.api = api
        self.team_id = team_id
        self.digest_id = digest_id
        self.digest: dict | None = None
        self.version: int | None = None
        self.error: ApiError | None = None
        self._confirmed: list[dict] = []
        self._overlay: list[dict] | None = None
        self._loading = False

    @property
    def blocks(self) -> list[dict]:
        """The overlay while a change is pending, else the confirmed list."""
        return list(self._overlay if self._overlay is not None else self._confirmed)

    @property
    def confirmed_blocks(self) -> list[dict]:
        return list(self._confirmed)

    @property
    def is_loading(self) -> bool:
        """True from the moment a mutation is sent until the refetch after it settles."""
        return self._loading

    async def load(self) -> dict:
        """Fetch the digest; its blocks become the confirmed state."""
        data = await self.api.get_digest(self.team_id, self.digest_id)
        if not isinstance(data, dict) or not isinstance(data.get("blocks", []), list):
            raise NetworkError(GENERIC_MESSAGE)
        self._confirm(data)
        return data

    def _confirm(self, data: dict) -> None:
        self.digest = data
        self.version = data.get("version")
        self._confirmed = sorted(data.get("blocks", []), key=lambda b: b["order"])

    async def _reconcile(self) -> None:
        """Refetch this digest. A failed refetch keeps the previous confirmed list."""
        try:
            await self.load()
        except ApiError as e:
            logger.warning("Could not refresh digest %s after mutation: %s", self.digest_id, e.message)

    @asynccontextmanager
    async def _mutation(self, overlay: list[dict] | None = None):
        self._loading = True
        self.error = None
        self._overlay = overlay
        try:
            yield
        except ApiError as e:
            self.error = e
            raise
        finally:
            self._overlay = None
            await self._reconcile()
            self._loading = False

    # ── operations ──

    async def insert_block(
        self,
        bookmark_id: str | None,
        position: int,
        block_type: BlockType = BlockType.BOOKMARK,
        block_id: str | None = None,
        **content,
    ) -> dict:
        """
        Insert a block at `position` (0 <= position <= number of blocks).

        Pass the same `block_id` to resend an insert whose outcome is unknown;
        the server returns the block it already created.

        Raises:
            ValidationError: position out of range (nothing is sent)
            ConflictError: digest deleted or changed since it was loaded
            NetworkError: transport failure or unexpected status
        """
        count = len(self.blocks)
        if isinstance(position, bool) or not 0 <= position <= count:
            raise ValidationError(f"Position {position} is out of range (0..{count}).", code="POSITION_OUT_OF_RANGE")

        data = {
            "block_id": block_id or str(uuid4()),
            "type": str(block_type),
            "bookmark_id": bookmark_id,
            "position": position,
            "expected_version": self.version,
            **content,
        }
        async with self._mutation():
            block = await self.api.create_block(self.team_id, self.digest_id, data)
        logger.info("Inserted block %s into digest %s at %d", block["id"], self.digest_id, position)
        return block

    async def move_block(self, block_id: str, position: int) -> None:
        """
        Move a block to `position`, showing the new order before the server answers.

        Moving a block onto its own position sends nothing.
        """
        current = self.blocks
        by_id = {b["id"]: b for b in current}
        try:
            plan = plan_move([b["id"] for b in current], block_id, position)
        except OrderingError as e:
            raise ValidationError(e.message, code=e.code) from e

        if not plan.changed:
            return

        overlay = [{**by_id[bid], "order": i} for i, bid in enumerate(plan.ids)]
        async with self._mutation(overlay):
            await self.api.update_block(
                self.team_id,
                self.digest_id,
                block_id,
                {"position": position, "expected_version": self.version},
            )
        logger.info("Moved block %s in digest %s to %d", block_id, self.digest_id, position)

    async def remove_block(self, block_id: str) -> None:
        """Remove a block; the blocks after it move up one place."""
        current = self.blocks
        by_id = {b["id"]: b for b in current}
        try:
            plan = plan_remove([b["id"] for b in current], block_id)
        except OrderingError as e:
            raise ValidationError(e.message, code=e.code) from e

        overlay = [{**by_id[bid], "order": i} for i, bid in enumerate(plan.ids)]
        async with self._mutation(overlay):
            await self.api.delete_block(self.team_id, self.digest_id, block_id, self.version)
        logger.info("Removed block %s from digest %s", block_id, self.digest_id)
