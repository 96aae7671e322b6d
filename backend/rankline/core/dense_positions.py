"""Dense Positions — consecutive 1-based positions with full-range shifting.

Invariants:
    - Positions in a scope are exactly 1..count, no gaps
    - check_position returns a typed PositionCheck, it never raises —
      the dense service decides to reject or clamp
    - Plans are computed before any row moves; a rejected position shifts nothing
    - Insert shifts rows >= p up by one; delete shifts rows > old down by one

Design Decisions:
    - Same Shift descriptor as the sparse collision policy (RankRange + delta):
      one store primitive serves both modes
    - "count + 1" on an update means "last" and is clamped to count, matching append
"""

from dataclasses import dataclass

from rankline.core.domain_types import Move, RankRange, RequestedPosition
from rankline.core.errors import PositionOutOfRangeError


FIRST_POSITION: int = 1


@dataclass(frozen=True)
class PositionCheck:
    """Result of validating a requested dense position."""
    requested: int
    clamped: int
    error: PositionOutOfRangeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Shift:
    span: RankRange
    delta: int


@dataclass(frozen=True)
class DensePlan:
    position: int | None
    shifts: tuple[Shift, ...] = ()


def check_position(position: int, upper: int) -> PositionCheck:
    """Validate position against [FIRST_POSITION, upper]."""
    clamped = max(FIRST_POSITION, min(position, upper))
    if clamped != position:
        return PositionCheck(
            position, clamped,
            PositionOutOfRangeError(position, FIRST_POSITION, upper),
        )
    return PositionCheck(position, position)


def insert_target(position: RequestedPosition, count: int) -> int:
    """Requested position for a new row; sentinels collapse to append."""
    if position is None or isinstance(position, Move):
        return count + 1
    return position


def move_target(
    position: RequestedPosition, old: int, count: int,
) -> int | None:
    """Requested position for an existing row; None means leave it where it is."""
    if position is None:
        return None
    if position is Move.UP:
        return old - 1 if old > FIRST_POSITION else None
    if position is Move.DOWN:
        return old + 1 if old < count else None
    if position is Move.APPEND:
        return count
    return position


def plan_insert(position: int) -> DensePlan:
    return DensePlan(
        position=position,
        shifts=(Shift(RankRange(low=position), 1),),
    )


def plan_move(old: int, new: int, count: int) -> DensePlan:
    """Plan for moving a row from old to an already-checked new position."""
    new = min(new, count)
    if new == old:
        return DensePlan(position=old)
    if new > old:
        return DensePlan(
            position=new,
            shifts=(Shift(RankRange(low=old + 1, high=new), -1),),
        )
    return DensePlan(
        position=new,
        shifts=(Shift(RankRange(low=new, high=old - 1), 1),),
    )


def plan_delete(old: int) -> DensePlan:
    return DensePlan(
        position=None,
        shifts=(Shift(RankRange(low=old + 1), -1),),
    )
