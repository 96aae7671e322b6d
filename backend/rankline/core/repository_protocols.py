"""Boundary Protocols — the Store Adapter contract between ordering core and persistence.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Every scoped read ascends by rank and ignores rows whose rank is NULL
    - exclude_id removes the mutated record from every scoped query it is given to,
      so a record never collides with itself during an update or scope transition
    - lock_scope holds an exclusive row lock over the whole scope until the
      enclosing transaction commits or rolls back

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO; the pure core never awaits —
      the shell orchestrates the async calls around the pure logic
"""

from typing import Protocol, Sequence

from rankline.core.domain_types import (
    LockHandle, Rank, RankedRow, RankRange, RecordId, ScopeKey,
)


class RankStore(Protocol):
    """Contract for ranked-row persistence — implemented by infrastructure/."""

    async def lock_scope(self, scope: ScopeKey) -> LockHandle: ...

    async def ordered_ranks(
        self, scope: ScopeKey, exclude_id: RecordId | None = None,
    ) -> Sequence[RankedRow]: ...

    async def rank_at_offset(
        self, scope: ScopeKey, offset: int, limit: int,
        exclude_id: RecordId | None = None,
    ) -> Sequence[Rank]: ...

    async def ranks_beyond(
        self, scope: ScopeKey, rank: Rank, direction: int, limit: int,
        exclude_id: RecordId | None = None,
    ) -> Sequence[Rank]: ...

    async def min_rank(
        self, scope: ScopeKey, exclude_id: RecordId | None = None,
    ) -> Rank | None: ...

    async def max_rank(
        self, scope: ScopeKey, exclude_id: RecordId | None = None,
    ) -> Rank | None: ...

    async def rank_exists(
        self, scope: ScopeKey, rank: Rank, exclude_id: RecordId | None = None,
    ) -> bool: ...

    async def shift_ranks(
        self, scope: ScopeKey, span: RankRange, delta: int,
    ) -> int: ...

    async def set_rank(self, record_id: RecordId, rank: Rank) -> None: ...

    async def count(
        self, scope: ScopeKey, exclude_id: RecordId | None = None,
    ) -> int: ...
