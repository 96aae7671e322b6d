"""Dense Ordering — consecutive positions, every mutation shifts the affected range.

Invariants:
    - Positions are validated (core/dense_positions.check_position) before any row moves
    - OutOfRangePolicy.REJECT raises PositionOutOfRangeError; CLAMP uses the clamped value
    - Delete closes the gap: rows after the removed one move down by one
    - A scope change checks the target position in the new scope first; a rejected
      move leaves both scopes as they were

Design Decisions:
    - Offered for small lists where exact index semantics matter more than write cost:
      O(n) writes per mutation, no rebalancing, no capacity limit below the column type
"""

import logging
from dataclasses import replace

from rankline.core.dense_positions import (
    DensePlan,
    check_position,
    insert_target,
    move_target,
    plan_delete,
    plan_insert,
    plan_move,
)
from rankline.core.domain_types import (
    Mutation, OutOfRangePolicy, RankDecision, ScopeKey,
)
from rankline.core.ordering_config import OrderingConfig
from rankline.core.repository_protocols import RankStore
from rankline.services.scope_transition import ScopeTransition

logger = logging.getLogger(__name__)


class DenseOrdering:
    """Entry points for dense-position scopes."""

    def __init__(self, store: RankStore, config: OrderingConfig):
        self.store = store
        self.config = config
        self.transition = ScopeTransition(store, self)

    async def before_insert(self, mutation: Mutation) -> RankDecision:
        await self.store.lock_scope(mutation.new_scope)
        return await self.enter_scope(mutation)

    async def before_update(self, mutation: Mutation) -> RankDecision:
        if mutation.changes_scope:
            return await self.transition.run(mutation)

        scope = mutation.new_scope
        await self.store.lock_scope(scope)
        if mutation.old_rank is None:
            return await self.enter_scope(mutation)

        old = mutation.old_rank
        count = await self.store.count(scope)
        target = move_target(mutation.position, old, count)
        if target is None:
            return RankDecision(rank=old, changed=False)

        position = self._checked(target, count + 1, mutation)
        plan = plan_move(old, position, count)
        if plan.position == old:
            return RankDecision(rank=old, changed=False)
        shifted = await self._apply(scope, plan)
        return RankDecision(rank=plan.position, shifted=shifted)

    async def before_delete(self, mutation: Mutation) -> RankDecision:
        await self.store.lock_scope(mutation.old_scope or mutation.new_scope)
        return await self.leave_scope(mutation)

    # ─── Scope transition steps ──────────────────────────────────

    async def check_entry(self, mutation: Mutation) -> Mutation:
        """Resolve the target position in the new scope before any row moves."""
        count = await self.store.count(mutation.new_scope, mutation.record_id)
        position = self._checked(
            insert_target(mutation.position, count), count + 1, mutation,
        )
        return replace(mutation, position=position)

    async def leave_scope(self, mutation: Mutation) -> RankDecision:
        if mutation.old_rank is None:
            return RankDecision(rank=None, changed=False)
        scope = mutation.old_scope or mutation.new_scope
        shifted = await self._apply(scope, plan_delete(mutation.old_rank))
        return RankDecision(rank=None, changed=False, shifted=shifted)

    async def enter_scope(self, mutation: Mutation) -> RankDecision:
        scope = mutation.new_scope
        count = await self.store.count(scope, mutation.record_id)
        position = self._checked(
            insert_target(mutation.position, count), count + 1, mutation,
        )
        shifted = await self._apply(scope, plan_insert(position))
        return RankDecision(rank=position, shifted=shifted)

    # ─── Internals ───────────────────────────────────────────────

    def _checked(self, target: int, upper: int, mutation: Mutation) -> int:
        check = check_position(target, upper)
        if check.ok:
            return check.requested
        if self.config.out_of_range is OutOfRangePolicy.CLAMP:
            logger.info(
                f"Clamped position {check.requested} to {check.clamped}",
                extra={"scope_key": mutation.new_scope, "rank": check.clamped},
            )
            return check.clamped

        error = check.error
        error.context.scope_key = mutation.new_scope
        error.context.record_id = (
            str(mutation.record_id) if mutation.record_id else None
        )
        raise error

    async def _apply(self, scope: ScopeKey, plan: DensePlan) -> int:
        shifted = 0
        for shift in plan.shifts:
            shifted += await self.store.shift_ranks(scope, shift.span, shift.delta)
        return shifted
