"""Ordering Configuration — rank bounds and mode selection, validated once.

Invariants:
    - RankBounds always satisfies max - min >= 2 (at least one integer strictly between)
    - A scope is ordered by exactly one OrderingMode; modes are never mixed
    - OrderingConfig is immutable and shared by every service instance

Design Decisions:
    - Bounds validated in __post_init__: an invalid pair cannot exist, so the allocator
      never re-checks it (ADR: parse, don't validate)
    - 32-bit signed defaults: fits INTEGER columns on every supported backend
"""

from dataclasses import dataclass, field

from rankline.core.domain_types import OrderingMode, OutOfRangePolicy
from rankline.core.errors import InvalidBoundsError


INT32_MIN: int = -(2 ** 31)
INT32_MAX: int = 2 ** 31 - 1


@dataclass(frozen=True)
class RankBounds:
    """Closed rank range [min, max] available to a scope."""
    min: int = INT32_MIN
    max: int = INT32_MAX

    def __post_init__(self):
        if self.max - self.min < 2:
            raise InvalidBoundsError(self.min, self.max)

    def contains(self, rank: int) -> bool:
        return self.min <= rank <= self.max

    @property
    def span(self) -> int:
        return self.max - self.min


@dataclass(frozen=True)
class OrderingConfig:
    """Everything that selects and parameterizes an ordering strategy."""
    bounds: RankBounds = field(default_factory=RankBounds)
    mode: OrderingMode = OrderingMode.SPARSE
    out_of_range: OutOfRangePolicy = OutOfRangePolicy.REJECT
