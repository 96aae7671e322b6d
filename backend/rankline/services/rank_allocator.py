"""Rank Allocator — finds the slot a record should land in and proposes a midpoint rank.

Invariants:
    - Reads only; never writes a rank (the resolver decides what gets persisted)
    - Integer indexes are clamped into [0, count]; sparse mode never rejects a position
    - The mutated record is excluded from every neighbor lookup
    - move_up/move_down look at most two neighbors outward
"""

from rankline.core.domain_types import Move, RecordId, RequestedPosition, ScopeKey
from rankline.core.ordering_config import RankBounds
from rankline.core.rank_allocation import (
    Slot,
    candidate_rank,
    clamp_index,
    slot_for_append,
    slot_for_index,
    slot_for_move_down,
    slot_for_move_up,
)
from rankline.core.repository_protocols import RankStore


class RankAllocator:
    """Midpoint allocation over neighbor ranks fetched from the store."""

    def __init__(self, store: RankStore, bounds: RankBounds):
        self.store = store
        self.bounds = bounds

    async def slot_for(
        self,
        scope: ScopeKey,
        position: RequestedPosition,
        exclude_id: RecordId | None = None,
    ) -> Slot:
        """Slot for an insert-like placement (index or append)."""
        if position is None or isinstance(position, Move):
            return slot_for_append(
                await self.store.max_rank(scope, exclude_id),
            )

        count = await self.store.count(scope, exclude_id)
        index = clamp_index(position, count)
        if index == 0:
            window = await self.store.rank_at_offset(scope, 0, 1, exclude_id)
        else:
            window = await self.store.rank_at_offset(
                scope, index - 1, 2, exclude_id,
            )
        return slot_for_index(index, window)

    async def slot_for_move(
        self, scope: ScopeKey, move: Move, current_rank: int, record_id: RecordId,
    ) -> Slot | None:
        """Slot one step up or down from current_rank; None at the scope edge."""
        if move is Move.UP:
            above = await self.store.ranks_beyond(
                scope, current_rank, -1, 2, record_id,
            )
            return slot_for_move_up(above)
        below = await self.store.ranks_beyond(
            scope, current_rank, 1, 2, record_id,
        )
        return slot_for_move_down(below)

    def candidate(self, slot: Slot) -> int:
        return candidate_rank(slot, self.bounds)
