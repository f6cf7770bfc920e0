"""
Digest Kernel: the pure engine.

  ordering : list reducer and order plans for digest blocks
  types    : BlockType, OrderPlan, OrderUpdate, OrderingError
"""

from engine.kernel.ordering import (
    insert_at,
    is_dense,
    plan_compact,
    plan_insert,
    plan_move,
    plan_remove,
    remove_at,
    reorder_list,
)
from engine.kernel.types import (
    SOURCE_POOL_ID,
    BlockType,
    OrderingError,
    OrderPlan,
    OrderUpdate,
)

__all__ = [
    "reorder_list",
    "insert_at",
    "remove_at",
    "is_dense",
    "plan_insert",
    "plan_move",
    "plan_remove",
    "plan_compact",
    "BlockType",
    "OrderPlan",
    "OrderUpdate",
    "OrderingError",
    "SOURCE_POOL_ID",
]
