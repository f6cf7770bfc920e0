"""
Digest Kernel: Ordering

Pure functions over ordered block lists. No side effects. No IO.

reorder_list() is what the editor applies optimistically while a move is in
flight. The plan_* functions are what the server persists: each one returns
the resulting id sequence and only the order updates that actually changed.

Invariant after any plan: orders are exactly 0..n-1, no gaps, no duplicates.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from engine.kernel.types import OrderingError, OrderPlan, OrderUpdate

T = TypeVar("T")

# ---------------------------------------------------------------------------
# List reducer
# ---------------------------------------------------------------------------


def reorder_list(items: Sequence[T], source: int, destination: int) -> list[T]:
    """
    Move the element at `source` to `destination`.

    Returns a new list; `items` is never modified. Everything between the two
    indices shifts by one place to close the gap and open the slot.

    Callers validate bounds first. Out-of-range indices raise IndexError
    instead of silently clamping.
    """
    _check_index(items, source, "source")
    _check_index(items, destination, "destination")

    result = list(items)
    moved = result.pop(source)
    result.insert(destination, moved)
    return result


def insert_at(items: Sequence[T], item: T, position: int) -> list[T]:
    """Return a new list with `item` at `position` (0 <= position <= len)."""
    if not 0 <= position <= len(items):
        raise IndexError(f"insert position {position} out of range for {len(items)} items")
    result = list(items)
    result.insert(position, item)
    return result


def remove_at(items: Sequence[T], index: int) -> list[T]:
    """Return a new list without the element at `index`."""
    _check_index(items, index, "index")
    result = list(items)
    del result[index]
    return result


def is_dense(orders: Iterable[int]) -> bool:
    """True when `orders` is exactly {0 .. n-1}."""
    values = list(orders)
    return sorted(values) == list(range(len(values)))


# ---------------------------------------------------------------------------
# Order plans
# ---------------------------------------------------------------------------


def plan_insert(ordered_ids: Sequence[Any], new_id: Any, position: int) -> OrderPlan:
    """
    Plan inserting `new_id` at `position`.

    Blocks at or after `position` move one place later. The new block itself
    is part of `updates` so the caller can read its assigned order there.
    """
    if new_id in ordered_ids:
        raise OrderingError("BLOCK_ALREADY_EXISTS", f"Block {new_id} is already in this digest.")
    if not _is_position(position) or not 0 <= position <= len(ordered_ids):
        raise OrderingError(
            "POSITION_OUT_OF_RANGE",
            f"Position {position} is out of range (0..{len(ordered_ids)}).",
            {"position": position, "length": len(ordered_ids)},
        )

    ids = insert_at(ordered_ids, new_id, position)
    return OrderPlan(ids=ids, updates=_diff(ordered_ids, ids))


def plan_move(ordered_ids: Sequence[Any], block_id: Any, position: int) -> OrderPlan:
    """
    Plan moving `block_id` to `position`.

    Moving a block onto its current position yields an empty update list.
    """
    source = _index_of(ordered_ids, block_id)
    if not _is_position(position) or not 0 <= position < len(ordered_ids):
        raise OrderingError(
            "POSITION_OUT_OF_RANGE",
            f"Position {position} is out of range (0..{len(ordered_ids) - 1}).",
            {"position": position, "length": len(ordered_ids)},
        )

    ids = reorder_list(ordered_ids, source, position)
    return OrderPlan(ids=ids, updates=_diff(ordered_ids, ids))


def plan_remove(ordered_ids: Sequence[Any], block_id: Any) -> OrderPlan:
    """Plan removing `block_id`; blocks after it move one place earlier."""
    index = _index_of(ordered_ids, block_id)
    ids = remove_at(ordered_ids, index)
    return OrderPlan(ids=ids, updates=_diff(ordered_ids, ids))


def plan_compact(ordered_ids: Sequence[Any], current_orders: Sequence[int]) -> OrderPlan:
    """
    Plan rewriting stored orders to 0..n-1 following `ordered_ids`.

    `current_orders[i]` is the stored order of `ordered_ids[i]`. Used to
    repair a digest whose rows were written outside the plan functions.
    """
    updates = [
        OrderUpdate(block_id=block_id, order=i)
        for i, (block_id, stored) in enumerate(zip(ordered_ids, current_orders, strict=True))
        if stored != i
    ]
    return OrderPlan(ids=list(ordered_ids), updates=updates)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_index(items: Sequence[Any], index: int, name: str) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"{name} index {index} out of range for {len(items)} items")


def _is_position(value: Any) -> bool:
    # bool is an int subclass; True must not pass as position 1
    return isinstance(value, int) and not isinstance(value, bool)


def _index_of(ordered_ids: Sequence[Any], block_id: Any) -> int:
    try:
        return list(ordered_ids).index(block_id)
    except ValueError:
        raise OrderingError("BLOCK_NOT_FOUND", f"Block {block_id} is not in this digest.") from None


def _diff(before: Sequence[Any], after: Sequence[Any]) -> list[OrderUpdate]:
    """Order updates for every id whose index differs between the two lists."""
    previous = {block_id: i for i, block_id in enumerate(before)}
    return [
        OrderUpdate(block_id=block_id, order=i)
        for i, block_id in enumerate(after)
        if previous.get(block_id) != i
    ]
