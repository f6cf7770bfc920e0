"""
Digest Kernel: Shared Types

Data classes used by the ordering functions and their callers (the block
repository on the server, the mutation client on the editor side).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

# ---------------------------------------------------------------------------
# Block types
# ---------------------------------------------------------------------------


class BlockType(StrEnum):
    """Kinds of content a digest block can hold."""

    BOOKMARK = "BOOKMARK"
    TEXT = "TEXT"


# Droppable id of the bookmark pool in the editor. Drops onto it never mutate.
SOURCE_POOL_ID = "bookmark"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class OrderingError(ValueError):
    """A position or block reference that an order plan cannot honour."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderUpdate:
    """One row whose `order` column must be rewritten."""

    block_id: Any
    order: int


@dataclass
class OrderPlan:
    """
    Result of planning an insert, move or remove on a digest.

    `ids` is the full block sequence after the change. `updates` lists only
    the rows whose order differs from before, so a no-op move yields an
    empty list.
    """

    ids: list[Any]
    updates: list[OrderUpdate] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.updates)

    def order_of(self, block_id: Any) -> int:
        return self.ids.index(block_id)
