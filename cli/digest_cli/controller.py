"""
Drag interaction controller.

Turns the end of a drag gesture into one mutation:

  no-op     nothing dropped, or dropped back onto the bookmark pool
  insert    dragged from the bookmark pool into the block list
  reorder   dragged within the block list

States: idle -> dragging -> committing -> idle. A new drag is refused
while a mutation is still settling, which keeps at most one mutation per
digest in flight from this controller. Mutation failures end up in the
notifier and never escape drag_end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from digest_cli.errors import ApiError
from digest_cli.mutations import BlockMutationClient
from digest_cli.notify import Notifier
from engine.kernel.types import SOURCE_POOL_ID, BlockType

logger = logging.getLogger(__name__)


class DragState(StrEnum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"


class DropKind(StrEnum):
    NOOP = "noop"
    INSERT = "insert"
    REORDER = "reorder"


@dataclass(frozen=True)
class DraggableLocation:
    droppable_id: str
    index: int


@dataclass(frozen=True)
class DropResult:
    """What a drag gesture ended with. `destination` is None when dropped outside any list."""

    draggable_id: str
    source: DraggableLocation
    destination: DraggableLocation | None = None


def classify_drop(result: DropResult, pool_id: str = SOURCE_POOL_ID) -> DropKind:
    if result.destination is None or result.destination.droppable_id == pool_id:
        return DropKind.NOOP
    if result.source.droppable_id == pool_id:
        return DropKind.INSERT
    return DropKind.REORDER


class DragController:
    """Sequences drag gestures with the mutation client of one digest."""

    def __init__(
        self,
        mutations: BlockMutationClient,
        notifier: Notifier,
        pool_id: str = SOURCE_POOL_ID,
        block_type: BlockType = BlockType.BOOKMARK,
    ):
        self.mutations = mutations
        self.notifier = notifier
        self.pool_id = pool_id
        self.block_type = block_type
        self.state = DragState.IDLE
        self.last_error: ApiError | None = None

    @property
    def is_interactive(self) -> bool:
        """Whether a new drag may start now."""
        return self.state == DragState.IDLE and not self.mutations.is_loading

    def drag_start(self) -> bool:
        """Begin a drag. Returns False (and stays put) while a mutation is settling."""
        if not self.is_interactive:
            return False
        self.state = DragState.DRAGGING
        return True

    async def drag_end(self, result: DropResult) -> DropKind:
        """
        Finish the current drag and run the mutation it asks for.

        Returns how the drop was classified. Errors are reported to the
        notifier; the controller is always back in idle when this returns.
        """
        if self.state != DragState.DRAGGING:
            logger.warning("drag_end without an active drag (state=%s)", self.state)
            return DropKind.NOOP

        kind = classify_drop(result, self.pool_id)
        if kind == DropKind.NOOP:
            self.state = DragState.IDLE
            return kind

        self.state = DragState.COMMITTING
        self.last_error = None
        try:
            if kind == DropKind.INSERT:
                await self.mutations.insert_block(result.draggable_id, result.destination.index, self.block_type)
            else:
                await self.mutations.move_block(result.draggable_id, result.destination.index)
        except ApiError as e:
            logger.warning("%s of %s failed: %s", kind, result.draggable_id, e.message)
            self.last_error = e
            self.notifier.error(e.message)
        finally:
            self.state = DragState.IDLE

        return kind
