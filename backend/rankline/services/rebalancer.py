"""Rebalancer — rewrites every rank in a scope to restore even spacing.

Invariants:
    - Runs under the scope lock already held by the caller
    - All other rows are written before the mutated record's rank is returned
    - Capacity exhaustion is raised, logged, and never retried

Design Decisions:
    - Row-by-row set_rank over one CASE UPDATE: portable across SQLite/PostgreSQL,
      and rebalance is rare by construction (local shifts absorb most collisions)
"""

import logging

from rankline.core.domain_types import RankDecision, RecordId, ScopeKey
from rankline.core.errors import ScopeCapacityExhaustedError
from rankline.core.ordering_config import RankBounds
from rankline.core.rank_allocation import Slot
from rankline.core.rebalance_plan import plan_rebalance
from rankline.core.repository_protocols import RankStore

logger = logging.getLogger(__name__)


class Rebalancer:
    """Even re-spacing of one scope."""

    def __init__(self, store: RankStore, bounds: RankBounds):
        self.store = store
        self.bounds = bounds

    async def rebalance(
        self, scope: ScopeKey, slot: Slot, exclude_id: RecordId | None = None,
    ) -> RankDecision:
        rows = await self.store.ordered_ranks(scope, exclude_id)
        try:
            plan = plan_rebalance(rows, slot, self.bounds)
        except ScopeCapacityExhaustedError as e:
            e.context.scope_key = scope
            e.context.record_id = str(exclude_id) if exclude_id else None
            logger.warning(
                f"Scope capacity exhausted: {e.message}",
                extra={"scope_key": scope, "error_code": e.code},
            )
            raise

        for record_id, rank in plan.assignments:
            await self.store.set_rank(record_id, rank)

        logger.info(
            f"Rebalanced scope {scope!r}: {len(plan.assignments)} of "
            f"{len(rows)} row(s) rewritten",
            extra={
                "scope_key": scope,
                "rank": plan.rank,
                "rebalanced": len(plan.assignments),
            },
        )
        return RankDecision(rank=plan.rank, rebalanced=len(plan.assignments))
