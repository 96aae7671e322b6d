"""SQLAlchemy Rank Store — scoped reads and writes against SQLite.

Tests cover:
    - Scope arity is checked before any SQL runs
    - NULL-rank rows are invisible to ordering reads and shifts, but still locked
    - Neighbor lookups honor direction, limit and the excluded record
    - Lock and serialization failures become ConcurrencyConflictError
    - PostgreSQL scopes take an advisory lock so empty scopes are serialized too
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from rankline.core.domain_types import RankRange
from rankline.core.errors import ConcurrencyConflictError, InvalidScopeKeyError
from rankline.infrastructure.rank_store import SqlAlchemyRankStore, scope_lock_key
from rankline.models.list_item import ListItem

SCOPE = ("L", None)


async def test_rejects_scope_key_of_wrong_arity(store):
    with pytest.raises(InvalidScopeKeyError) as exc_info:
        await store.count(("L",))
    assert exc_info.value.http_status == 400


async def test_unranked_rows_are_invisible_to_reads(store, seed_items):
    await seed_items("L", [None, 10, 20])
    assert await store.count(SCOPE) == 2
    assert await store.min_rank(SCOPE) == 10
    assert await store.max_rank(SCOPE) == 20
    assert [row.rank for row in await store.ordered_ranks(SCOPE)] == [10, 20]


async def test_lock_scope_covers_unranked_rows(store, seed_items):
    await seed_items("L", [None, 10, 20])
    handle = await store.lock_scope(SCOPE)
    assert handle.scope_key == SCOPE
    assert handle.row_count == 3


async def test_lock_empty_scope(store):
    handle = await store.lock_scope(SCOPE)
    assert handle.row_count == 0


async def test_empty_scope_reads(store):
    assert await store.count(SCOPE) == 0
    assert await store.min_rank(SCOPE) is None
    assert await store.max_rank(SCOPE) is None
    assert await store.rank_at_offset(SCOPE, 0, 2) == []


async def test_scopes_do_not_leak(store, seed_items):
    await seed_items("L", [1, 2])
    await seed_items("L", [3], section=1)
    await seed_items("M", [4])
    assert await store.count(SCOPE) == 2
    assert await store.count(("L", 1)) == 1
    assert await store.max_rank(SCOPE) == 2


async def test_rank_at_offset_window(store, seed_items):
    await seed_items("L", [40, 10, 30, 20])
    assert await store.rank_at_offset(SCOPE, 1, 2) == [20, 30]
    assert await store.rank_at_offset(SCOPE, 3, 2) == [40]


async def test_ranks_beyond_in_both_directions(store, seed_items):
    await seed_items("L", [10, 20, 30, 40])
    assert await store.ranks_beyond(SCOPE, 30, -1, 2) == [20, 10]
    assert await store.ranks_beyond(SCOPE, 20, 1, 2) == [30, 40]
    assert await store.ranks_beyond(SCOPE, 10, -1, 2) == []


async def test_exclude_id_hides_the_mutated_record(store, seed_items):
    _, middle, _ = await seed_items("L", [10, 20, 30])
    assert await store.count(SCOPE, middle.id) == 2
    assert await store.rank_exists(SCOPE, 20) is True
    assert await store.rank_exists(SCOPE, 20, middle.id) is False
    assert await store.ranks_beyond(SCOPE, 30, -1, 1, middle.id) == [10]


async def test_shift_ranks_moves_only_the_span(store, seed_items, scope_ranks):
    await seed_items("L", [None, 10, 20, 30])
    shifted = await store.shift_ranks(SCOPE, RankRange(low=20), 5)
    assert shifted == 2
    # SQLite sorts NULL first
    assert await scope_ranks("L") == [None, 10, 25, 35]


async def test_shift_ranks_closed_span(store, seed_items):
    await seed_items("L", [10, 20, 30])
    shifted = await store.shift_ranks(SCOPE, RankRange(low=10, high=20), -1)
    assert shifted == 2
    assert [row.rank for row in await store.ordered_ranks(SCOPE)] == [9, 19, 30]


async def test_set_rank(store, seed_items):
    (item,) = await seed_items("L", [10])
    await store.set_rank(item.id, 99)
    assert await store.max_rank(SCOPE) == 99


# ─── Conflict translation ────────────────────────────────────────

def _mock_session(dialect: str = "sqlite") -> AsyncMock:
    db = AsyncMock()
    db.get_bind = MagicMock(
        return_value=SimpleNamespace(dialect=SimpleNamespace(name=dialect)),
    )
    db.execute.return_value = MagicMock()
    return db


def _failing_store(message: str) -> SqlAlchemyRankStore:
    db = _mock_session()
    db.execute.side_effect = OperationalError(
        "SELECT ...", {}, Exception(message),
    )
    return SqlAlchemyRankStore(db, ListItem, ListItem.SCOPE_FIELDS)


async def test_lock_timeout_becomes_concurrency_conflict():
    store = _failing_store("database is locked")
    with pytest.raises(ConcurrencyConflictError) as exc_info:
        await store.lock_scope(SCOPE)
    error = exc_info.value
    assert error.http_status == 409
    assert error.context.retry_after_ms == 100
    assert error.context.scope_key == SCOPE


async def test_other_driver_errors_propagate_unchanged():
    store = _failing_store("disk I/O error")
    with pytest.raises(OperationalError):
        await store.count(SCOPE)


# ─── Advisory scope lock ─────────────────────────────────────────

def test_scope_lock_key_is_stable_and_scope_specific():
    key = scope_lock_key("list_items", ("L", None))
    assert key == scope_lock_key("list_items", ("L", None))
    assert key != scope_lock_key("list_items", ("L", 1))
    assert key != scope_lock_key("other_items", ("L", None))
    assert -(2 ** 63) <= key < 2 ** 63


async def test_postgres_lock_takes_advisory_lock_before_row_lock():
    db = _mock_session("postgresql")
    store = SqlAlchemyRankStore(db, ListItem, ListItem.SCOPE_FIELDS)

    await store.lock_scope(SCOPE)

    statements = [str(c.args[0]) for c in db.execute.await_args_list]
    assert len(statements) == 2
    assert "pg_advisory_xact_lock" in statements[0]
    assert "FOR UPDATE" in statements[1]


async def test_sqlite_lock_skips_advisory_lock():
    db = _mock_session("sqlite")
    store = SqlAlchemyRankStore(db, ListItem, ListItem.SCOPE_FIELDS)

    await store.lock_scope(SCOPE)

    statements = [str(c.args[0]) for c in db.execute.await_args_list]
    assert len(statements) == 1
    assert "pg_advisory_xact_lock" not in statements[0]
