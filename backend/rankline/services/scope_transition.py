"""Scope Transition Handler — moves a record between scopes as delete + insert.

Invariants:
    - Both scopes are locked before either is read, in a deterministic order
    - The target position is checked before the old scope is touched; a rejected
      move shifts no row in either scope
    - The old scope sees a delete, the new scope sees an insert at the requested
      position (append when none, or when a move sentinel is given)
    - The record is excluded from the new scope's lookups, so it never collides with itself
    - Only the two scopes' rank ranges are touched

Design Decisions:
    - Lock order by repr(scope): tuples with None components are not orderable,
      repr is total and stable for the same key
    - Ordering strategies supply check_entry/leave_scope/enter_scope; the handler
      owns sequencing
"""

import logging
from typing import Protocol

from rankline.core.domain_types import Mutation, RankDecision
from rankline.core.repository_protocols import RankStore

logger = logging.getLogger(__name__)


class TransitionSteps(Protocol):
    """The steps of a scope change, provided by an ordering strategy.

    check_entry validates the requested position against the new scope and
    returns the mutation to carry through (possibly with a clamped position).
    """
    async def check_entry(self, mutation: Mutation) -> Mutation: ...
    async def leave_scope(self, mutation: Mutation) -> RankDecision: ...
    async def enter_scope(self, mutation: Mutation) -> RankDecision: ...


class ScopeTransition:
    """Coordinates a scope change inside one transaction."""

    def __init__(self, store: RankStore, steps: TransitionSteps):
        self.store = store
        self.steps = steps

    async def run(self, mutation: Mutation) -> RankDecision:
        for scope in sorted({mutation.old_scope, mutation.new_scope}, key=repr):
            await self.store.lock_scope(scope)

        mutation = await self.steps.check_entry(mutation)
        left = await self.steps.leave_scope(mutation)
        entered = await self.steps.enter_scope(mutation)

        logger.info(
            f"Record {mutation.record_id} moved from scope "
            f"{mutation.old_scope!r} to {mutation.new_scope!r}",
            extra={
                "record_id": str(mutation.record_id),
                "scope_key": mutation.new_scope,
                "rank": entered.rank,
            },
        )
        return RankDecision(
            rank=entered.rank,
            shifted=left.shifted + entered.shifted,
            rebalanced=left.rebalanced + entered.rebalanced,
        )
