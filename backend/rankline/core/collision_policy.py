"""Collision Policy — picks the cheapest fix when a candidate rank is not free.

Invariants:
    - choose_resolution is PURE: returns a Resolution descriptor, the shell applies it
    - Policy order is fixed: shift down (top collision) → shift up (slack above) → rebalance
    - Every shift frees the colliding neighbor's slot, so the record still lands
      strictly between its neighbors after the shift
    - No shift ever pushes a rank outside [MIN, MAX]

Design Decisions:
    - Shift ranges end at the scope's current min/max instead of an open bound: the
      UPDATE touches exactly the rows that move
    - Shift-up requires scope_max < MAX - 1 so a slot above stays free for appends
"""

from dataclasses import dataclass
from enum import Enum

from rankline.core.domain_types import RankRange
from rankline.core.ordering_config import RankBounds
from rankline.core.rank_allocation import Slot


class ResolutionKind(str, Enum):
    ASSIGN = "assign"
    SHIFT_DOWN = "shift_down"
    SHIFT_UP = "shift_up"
    REBALANCE = "rebalance"


@dataclass(frozen=True)
class Resolution:
    kind: ResolutionKind
    rank: int | None = None
    shift: RankRange | None = None
    delta: int = 0


def choose_resolution(
    candidate: int,
    slot: Slot,
    scope_min: int | None,
    scope_max: int | None,
    bounds: RankBounds,
    taken: bool = False,
) -> Resolution:
    """Decide how to make room for a record that wants to land in slot.

    taken reports that the store already holds candidate in this scope.
    """
    if bounds.contains(candidate) and not slot.collides(candidate) and not taken:
        return Resolution(ResolutionKind.ASSIGN, rank=candidate)

    if (
        slot.at_end and slot.before is not None
        and scope_min is not None and scope_min > bounds.min
    ):
        return Resolution(
            ResolutionKind.SHIFT_DOWN,
            rank=slot.before,
            shift=RankRange(low=scope_min, high=slot.before),
            delta=-1,
        )

    if (
        slot.after is not None
        and scope_max is not None and scope_max < bounds.max - 1
    ):
        return Resolution(
            ResolutionKind.SHIFT_UP,
            rank=slot.after,
            shift=RankRange(low=slot.after, high=scope_max),
            delta=1,
        )

    return Resolution(ResolutionKind.REBALANCE)
