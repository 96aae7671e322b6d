"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - RecordId wraps UUID, Rank wraps int — never pass bare ranks around as "positions"
    - ScopeKey is a plain tuple: value equality, None is a matchable value (not a wildcard)
    - All positional sentinels encoded as Enums — no raw string matching
    - Mutation is a materialized descriptor: no ORM object crosses into core/

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - frozen dataclasses for value objects: hashable, safe to share between services
    - str Enums: serialize to JSON without custom encoders (ADR: HTTP host speaks JSON)
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

RecordId = NewType("RecordId", UUID)
Rank = NewType("Rank", int)

ScopeKey = tuple  # fixed-arity tuple of optional field values


def scope_key(*values: object) -> ScopeKey:
    """Build a scope key from field values, in declared scope-field order."""
    return tuple(values)


# ─── Enums ───────────────────────────────────────────────────────

class Move(str, Enum):
    """Positional sentinels a caller may request instead of an index."""
    APPEND = "append"
    UP = "up"
    DOWN = "down"


RequestedPosition = int | Move | None  # None = caller did not ask for a position


class OrderingMode(str, Enum):
    """Sparse midpoint ranks (default) or dense consecutive positions."""
    SPARSE = "sparse"
    DENSE = "dense"


class OutOfRangePolicy(str, Enum):
    """What dense mode does with a position outside [first, count + 1]."""
    REJECT = "reject"
    CLAMP = "clamp"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class RankedRow:
    """One row of a scope as seen by the ordering core."""
    id: RecordId
    rank: Rank


@dataclass(frozen=True)
class RankRange:
    """Inclusive rank range; None leaves that end open."""
    low: int | None = None
    high: int | None = None

    def contains(self, rank: int) -> bool:
        if self.low is not None and rank < self.low:
            return False
        if self.high is not None and rank > self.high:
            return False
        return True


@dataclass(frozen=True)
class LockHandle:
    """Proof that a scope's rows are locked until the transaction ends."""
    scope_key: ScopeKey
    row_count: int


@dataclass(frozen=True)
class Mutation:
    """Everything the ordering core needs to know about one insert/update/delete."""
    record_id: RecordId | None
    new_scope: ScopeKey
    old_scope: ScopeKey | None = None
    old_rank: int | None = None
    position: RequestedPosition = None

    @property
    def is_insert(self) -> bool:
        return self.old_scope is None

    @property
    def changes_scope(self) -> bool:
        return self.old_scope is not None and self.old_scope != self.new_scope


@dataclass(frozen=True)
class RankDecision:
    """Outcome of an ordering entry point.

    rank is what the host must persist on the mutated record (None only for deletes).
    shifted/rebalanced count the OTHER rows rewritten as a side effect.
    """
    rank: Rank | None
    changed: bool = True
    shifted: int = 0
    rebalanced: int = 0
