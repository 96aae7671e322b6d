"""Collision Resolver — makes sure a candidate rank is free before it is persisted.

Invariants:
    - A free, in-bounds candidate is returned unchanged (no extra writes)
    - Otherwise exactly one corrective action runs: shift down, shift up, or rebalance
    - The decision itself is core/collision_policy.choose_resolution (pure)
"""

import logging

from rankline.core.collision_policy import ResolutionKind, choose_resolution
from rankline.core.domain_types import RankDecision, RecordId, ScopeKey
from rankline.core.ordering_config import RankBounds
from rankline.core.rank_allocation import Slot
from rankline.core.repository_protocols import RankStore
from rankline.services.rebalancer import Rebalancer

logger = logging.getLogger(__name__)


class CollisionResolver:
    """Applies the cheapest corrective action for a colliding candidate."""

    def __init__(
        self, store: RankStore, bounds: RankBounds, rebalancer: Rebalancer,
    ):
        self.store = store
        self.bounds = bounds
        self.rebalancer = rebalancer

    async def resolve(
        self,
        scope: ScopeKey,
        slot: Slot,
        candidate: int,
        exclude_id: RecordId | None = None,
    ) -> RankDecision:
        taken = False
        if self.bounds.contains(candidate) and not slot.collides(candidate):
            taken = await self.store.rank_exists(scope, candidate, exclude_id)
            if not taken:
                return RankDecision(rank=candidate)

        scope_min = await self.store.min_rank(scope, exclude_id)
        scope_max = await self.store.max_rank(scope, exclude_id)
        resolution = choose_resolution(
            candidate, slot, scope_min, scope_max, self.bounds, taken,
        )

        if resolution.kind is ResolutionKind.REBALANCE:
            return await self.rebalancer.rebalance(scope, slot, exclude_id)

        shifted = await self.store.shift_ranks(
            scope, resolution.shift, resolution.delta,
        )
        logger.debug(
            f"{resolution.kind.value} freed rank {resolution.rank} "
            f"({shifted} row(s) moved)",
            extra={
                "scope_key": scope,
                "rank": resolution.rank,
                "shifted": shifted,
            },
        )
        return RankDecision(rank=resolution.rank, shifted=shifted)
