"""Dense Ordering — consecutive positions, reject/clamp policy, gap closing.

Tests cover:
    - Append and positional insert keep positions 1..count
    - REJECT raises PositionOutOfRangeError before any row moves
    - CLAMP lands out-of-range requests on the nearest valid position
    - Moves by index and sentinel, deletes close the gap
    - Scope change closes the old gap and opens one in the new scope
"""

import pytest

from rankline.core.domain_types import Move, OrderingMode, OutOfRangePolicy
from rankline.core.errors import PositionOutOfRangeError


async def _fill(lifecycle, n: int, list_id: str = "D", section=None):
    return [
        await lifecycle.create(list_id, f"row {i + 1}", section)
        for i in range(n)
    ]


@pytest.fixture
def clamping(make_lifecycle):
    return make_lifecycle(
        mode=OrderingMode.DENSE, out_of_range=OutOfRangePolicy.CLAMP,
    )


# ─── Inserting ───────────────────────────────────────────────────

async def test_appends_take_consecutive_positions(dense, scope_ranks):
    items = await _fill(dense, 4)
    assert [item.rank for item in items] == [1, 2, 3, 4]
    assert await scope_ranks("D") == [1, 2, 3, 4]


async def test_insert_at_position_shifts_followers(dense, ranked_ids, scope_ranks):
    r1, r2, r3 = await _fill(dense, 3)
    model = await dense.create("D", "wedged", position=2)
    assert model.rank == 2
    assert dense.last_decision.shifted == 2
    assert await ranked_ids("D") == [r1.id, model.id, r2.id, r3.id]
    assert await scope_ranks("D") == [1, 2, 3, 4]


async def test_insert_at_count_plus_one_appends(dense, scope_ranks):
    await _fill(dense, 3)
    model = await dense.create("D", "last", position=4)
    assert model.rank == 4
    assert dense.last_decision.shifted == 0


async def test_rejects_position_past_the_end(dense, scope_ranks):
    await _fill(dense, 3)
    with pytest.raises(PositionOutOfRangeError) as exc_info:
        await dense.create("D", "too far", position=5)
    error = exc_info.value
    assert error.http_status == 400
    assert error.too_large is True
    assert error.context.scope_key == ("D", None)
    assert await scope_ranks("D") == [1, 2, 3]


async def test_rejects_position_before_the_start(dense):
    await _fill(dense, 2)
    with pytest.raises(PositionOutOfRangeError) as exc_info:
        await dense.create("D", "too early", position=0)
    assert exc_info.value.too_large is False


async def test_clamp_policy_appends_oversized_position(clamping, ranked_ids):
    r1, r2 = await _fill(clamping, 2)
    model = await clamping.create("D", "clamped", position=99)
    assert model.rank == 3
    assert await ranked_ids("D") == [r1.id, r2.id, model.id]


async def test_clamp_policy_prepends_non_positive_position(clamping, ranked_ids):
    r1, r2 = await _fill(clamping, 2)
    model = await clamping.create("D", "clamped", position=-3)
    assert model.rank == 1
    assert await ranked_ids("D") == [model.id, r1.id, r2.id]


# ─── Moving ──────────────────────────────────────────────────────

async def test_move_later_pulls_intermediate_rows_up(dense, ranked_ids, scope_ranks):
    r1, r2, r3, r4, r5 = await _fill(dense, 5)
    await dense.update(r2.id, {}, 4)
    assert await ranked_ids("D") == [r1.id, r3.id, r4.id, r2.id, r5.id]
    assert await scope_ranks("D") == [1, 2, 3, 4, 5]


async def test_move_earlier_pushes_intermediate_rows_down(dense, ranked_ids, scope_ranks):
    r1, r2, r3, r4, r5 = await _fill(dense, 5)
    await dense.update(r5.id, {}, 2)
    assert await ranked_ids("D") == [r1.id, r5.id, r2.id, r3.id, r4.id]
    assert await scope_ranks("D") == [1, 2, 3, 4, 5]


async def test_move_to_count_plus_one_means_last(dense, ranked_ids):
    r1, r2, r3 = await _fill(dense, 3)
    updated = await dense.update(r1.id, {}, 4)
    assert updated.rank == 3
    assert await ranked_ids("D") == [r2.id, r3.id, r1.id]


async def test_move_past_count_plus_one_is_rejected(dense, scope_ranks):
    r1, _, _ = await _fill(dense, 3)
    with pytest.raises(PositionOutOfRangeError):
        await dense.update(r1.id, {}, 5)
    assert await scope_ranks("D") == [1, 2, 3]


async def test_move_up_and_down(dense, ranked_ids):
    r1, r2, r3 = await _fill(dense, 3)
    await dense.update(r3.id, {}, Move.UP)
    assert await ranked_ids("D") == [r1.id, r3.id, r2.id]
    await dense.update(r1.id, {}, Move.DOWN)
    assert await ranked_ids("D") == [r3.id, r1.id, r2.id]


async def test_move_sentinels_at_the_edges_are_noops(dense, scope_ranks):
    r1, _, r3 = await _fill(dense, 3)
    await dense.update(r1.id, {}, Move.UP)
    assert dense.last_decision.changed is False
    await dense.update(r3.id, {}, Move.DOWN)
    assert dense.last_decision.changed is False
    assert await scope_ranks("D") == [1, 2, 3]


async def test_move_append(dense, ranked_ids):
    r1, r2, r3 = await _fill(dense, 3)
    await dense.update(r1.id, {}, Move.APPEND)
    assert await ranked_ids("D") == [r2.id, r3.id, r1.id]


async def test_update_without_position_keeps_position(dense):
    _, r2, _ = await _fill(dense, 3)
    updated = await dense.update(r2.id, {"title": "renamed"})
    assert updated.rank == 2
    assert dense.last_decision.changed is False


# ─── Deleting ────────────────────────────────────────────────────

async def test_delete_closes_the_gap(dense, ranked_ids, scope_ranks):
    r1, r2, r3, r4 = await _fill(dense, 4)
    await dense.delete(r2.id)
    assert dense.last_decision.shifted == 2
    assert await ranked_ids("D") == [r1.id, r3.id, r4.id]
    assert await scope_ranks("D") == [1, 2, 3]


# ─── Scope change ────────────────────────────────────────────────

async def test_scope_change_closes_and_opens_gaps(dense, ranked_ids, scope_ranks):
    a1, a2, a3 = await _fill(dense, 3, section=1)
    b1, b2 = await _fill(dense, 2, section=2)

    moved = await dense.update(a2.id, {"section": 2}, 1)

    assert moved.rank == 1
    assert await ranked_ids("D", 1) == [a1.id, a3.id]
    assert await scope_ranks("D", 1) == [1, 2]
    assert await ranked_ids("D", 2) == [a2.id, b1.id, b2.id]
    assert await scope_ranks("D", 2) == [1, 2, 3]


async def test_scope_change_rejection_leaves_both_scopes_untouched(dense, scope_ranks):
    a1, _ = await _fill(dense, 2, section=1)
    await _fill(dense, 1, section=2)
    with pytest.raises(PositionOutOfRangeError):
        await dense.update(a1.id, {"section": 2}, 5)
    assert await scope_ranks("D", 1) == [1, 2]
    assert await scope_ranks("D", 2) == [1]


async def test_scope_change_clamps_before_leaving(clamping, ranked_ids, scope_ranks):
    a1, a2 = await _fill(clamping, 2, section=1)
    (b1,) = await _fill(clamping, 1, section=2)
    moved = await clamping.update(a1.id, {"section": 2}, 9)
    assert moved.rank == 2
    assert await ranked_ids("D", 1) == [a2.id]
    assert await scope_ranks("D", 1) == [1]
    assert await ranked_ids("D", 2) == [b1.id, a1.id]
