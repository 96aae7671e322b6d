"""Rebalance Planning — evenly re-space every rank of a scope in one pass.

Invariants:
    - plan_rebalance is PURE: input rows are the scope in ascending rank order,
      excluding the mutated record
    - n = len(rows) + 1; new_rank(i) = MIN + spacing * (i + 1), spacing = (MAX - MIN) // n
    - MIN + spacing * n <= MAX, so no planned rank leaves the bounds
    - spacing == 0 raises ScopeCapacityExhaustedError — never truncates silently
    - Relative order of existing rows is preserved; the mutated record is spliced
      at the slot's index

Design Decisions:
    - Splice index derived from the slot's upper neighbor (rows ranked below `after`
      stay before the record): no second sort pass over old ranks
    - Only rows whose rank actually changes are returned as assignments
"""

from dataclasses import dataclass
from typing import Sequence

from rankline.core.domain_types import RankedRow, RecordId
from rankline.core.errors import ScopeCapacityExhaustedError
from rankline.core.ordering_config import RankBounds
from rankline.core.rank_allocation import Slot


@dataclass(frozen=True)
class RebalancePlan:
    rank: int
    index: int
    assignments: tuple[tuple[RecordId, int], ...]


def splice_index(rows: Sequence[RankedRow], slot: Slot) -> int:
    """Index the mutated record takes among rows once ranks are recomputed."""
    if slot.after is None:
        return len(rows)
    index = 0
    for row in rows:
        if row.rank < slot.after:
            index += 1
    return index


def spacing_for(count: int, bounds: RankBounds) -> int:
    return bounds.span // count


def plan_rebalance(
    rows: Sequence[RankedRow], slot: Slot, bounds: RankBounds,
) -> RebalancePlan:
    """Recompute ranks for rows plus one incoming record at the slot's index."""
    n = len(rows) + 1
    spacing = spacing_for(n, bounds)
    if spacing == 0:
        raise ScopeCapacityExhaustedError(n, bounds.min, bounds.max)

    index = splice_index(rows, slot)
    assignments = []
    for i, row in enumerate(rows):
        position = i + 1 if i >= index else i
        new_rank = bounds.min + spacing * (position + 1)
        if new_rank != row.rank:
            assignments.append((row.id, new_rank))

    return RebalancePlan(
        rank=bounds.min + spacing * (index + 1),
        index=index,
        assignments=tuple(assignments),
    )
