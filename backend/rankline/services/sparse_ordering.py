"""Sparse Ordering — midpoint ranks with local shifts and rare full rebalances.

Invariants:
    - Allocator → Resolver → (Rebalancer) is the only path that produces a rank
    - Deleting a record touches no other row (ranks are sparse)
    - move_up on the first record and move_down on the last are no-ops
    - An update without a requested position keeps the current rank

Design Decisions:
    - A record that has never been ranked (rank NULL) is placed like an insert
      on its first update; move sentinels then mean append
"""

import logging

from rankline.core.domain_types import (
    Move, Mutation, RankDecision, RecordId, RequestedPosition, ScopeKey,
)
from rankline.core.ordering_config import OrderingConfig
from rankline.core.rank_allocation import Slot
from rankline.core.repository_protocols import RankStore
from rankline.services.collision_resolver import CollisionResolver
from rankline.services.rank_allocator import RankAllocator
from rankline.services.rebalancer import Rebalancer
from rankline.services.scope_transition import ScopeTransition

logger = logging.getLogger(__name__)


class SparseOrdering:
    """Entry points for sparse-rank scopes."""

    def __init__(self, store: RankStore, config: OrderingConfig):
        self.store = store
        self.config = config
        self.allocator = RankAllocator(store, config.bounds)
        self.resolver = CollisionResolver(
            store, config.bounds, Rebalancer(store, config.bounds),
        )
        self.transition = ScopeTransition(store, self)

    async def before_insert(self, mutation: Mutation) -> RankDecision:
        await self.store.lock_scope(mutation.new_scope)
        return await self._place(
            mutation.new_scope, mutation.position, mutation.record_id,
        )

    async def before_update(self, mutation: Mutation) -> RankDecision:
        if mutation.changes_scope:
            return await self.transition.run(mutation)

        scope = mutation.new_scope
        await self.store.lock_scope(scope)

        if mutation.old_rank is None:
            return await self._place(scope, mutation.position, mutation.record_id)
        if mutation.position is None:
            return RankDecision(rank=mutation.old_rank, changed=False)

        if mutation.position in (Move.UP, Move.DOWN):
            slot = await self.allocator.slot_for_move(
                scope, mutation.position, mutation.old_rank, mutation.record_id,
            )
            if slot is None:
                return RankDecision(rank=mutation.old_rank, changed=False)
        else:
            slot = await self.allocator.slot_for(
                scope, mutation.position, mutation.record_id,
            )
        return await self._settle(scope, slot, mutation.record_id)

    async def before_delete(self, mutation: Mutation) -> RankDecision:
        await self.store.lock_scope(mutation.old_scope or mutation.new_scope)
        return RankDecision(rank=None, changed=False)

    # ─── Scope transition steps ──────────────────────────────────

    async def check_entry(self, mutation: Mutation) -> Mutation:
        return mutation  # sparse placement clamps, never rejects

    async def leave_scope(self, mutation: Mutation) -> RankDecision:
        return RankDecision(rank=None, changed=False)

    async def enter_scope(self, mutation: Mutation) -> RankDecision:
        return await self._place(
            mutation.new_scope, mutation.position, mutation.record_id,
        )

    # ─── Internals ───────────────────────────────────────────────

    async def _place(
        self,
        scope: ScopeKey,
        position: RequestedPosition,
        record_id: RecordId | None,
    ) -> RankDecision:
        slot = await self.allocator.slot_for(scope, position, record_id)
        return await self._settle(scope, slot, record_id)

    async def _settle(
        self, scope: ScopeKey, slot: Slot, record_id: RecordId | None,
    ) -> RankDecision:
        candidate = self.allocator.candidate(slot)
        decision = await self.resolver.resolve(scope, slot, candidate, record_id)
        logger.debug(
            f"Allocated rank {decision.rank} between {slot.before} and {slot.after}",
            extra={
                "scope_key": scope,
                "record_id": str(record_id) if record_id else None,
                "rank": decision.rank,
            },
        )
        return decision
