"""Midpoint Allocation — pure rank arithmetic for inserts and directional moves.

Invariants:
    - midpoint() is exact integer arithmetic, biased toward the lower bound b
    - A Slot names the two neighbors the record must land between; None is a scope edge
    - candidate_rank() always returns lower <= candidate <= upper for the slot's bounds
    - A candidate that equals a real neighbor is a collision (degenerate midpoint)

Design Decisions:
    - Floor division over round(): float rounding loses precision near 2**31 and
      Python's banker's rounding would flip tie direction between calls
    - Slot builders take already-fetched ranks: services/ does the IO, core/ decides
"""

from dataclasses import dataclass
from typing import Sequence

from rankline.core.ordering_config import RankBounds


def midpoint(a: int, b: int) -> int:
    """Rounded mean of two ranks, ties resolved toward b."""
    return (a - b) // 2 + b


@dataclass(frozen=True)
class Slot:
    """Gap between two adjacent records (or a record and a scope edge)."""
    before: int | None
    after: int | None

    def lower(self, bounds: RankBounds) -> int:
        return bounds.min if self.before is None else self.before

    def upper(self, bounds: RankBounds) -> int:
        return bounds.max if self.after is None else self.after

    def collides(self, rank: int) -> bool:
        return rank == self.before or rank == self.after

    @property
    def at_end(self) -> bool:
        return self.after is None


def candidate_rank(slot: Slot, bounds: RankBounds) -> int:
    return midpoint(slot.upper(bounds), slot.lower(bounds))


def clamp_index(index: int, count: int) -> int:
    """Sparse mode never rejects an index: clamp into [0, count]."""
    return max(0, min(index, count))


def slot_for_append(max_rank: int | None) -> Slot:
    return Slot(before=max_rank, after=None)


def slot_for_index(index: int, window: Sequence[int]) -> Slot:
    """Build the slot for a clamped index from the ranks around it.

    window holds ranks starting at offset index - 1 (or at 0 when index == 0),
    at most two of them, ascending.
    """
    if index <= 0:
        return Slot(before=None, after=window[0] if window else None)
    if not window:
        return Slot(before=None, after=None)  # empty scope
    return Slot(
        before=window[0], after=window[1] if len(window) > 1 else None,
    )


def slot_for_move_up(above: Sequence[int]) -> Slot | None:
    """above: nearest ranks preceding the record, nearest first. None = already first."""
    if not above:
        return None
    return Slot(before=above[1] if len(above) > 1 else None, after=above[0])


def slot_for_move_down(below: Sequence[int]) -> Slot | None:
    """below: nearest ranks following the record, nearest first. None = already last."""
    if not below:
        return None
    return Slot(before=below[0], after=below[1] if len(below) > 1 else None)
