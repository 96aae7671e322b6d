"""Service test fixtures — ItemLifecycle bound to the per-test SQLite session.

Invariants:
    - Every lifecycle shares test_db, so all writes of a test live in one transaction
    - make_lifecycle builds any OrderingConfig; named fixtures cover the common ones
"""

import pytest

from rankline.core.domain_types import OrderingMode, OutOfRangePolicy
from rankline.core.ordering_config import OrderingConfig, RankBounds
from rankline.infrastructure.rank_store import SqlAlchemyRankStore
from rankline.models.list_item import ListItem
from rankline.services.item_lifecycle import ItemLifecycle


@pytest.fixture
def make_lifecycle(test_db):
    def _make(
        rank_min: int | None = None,
        rank_max: int | None = None,
        mode: OrderingMode = OrderingMode.SPARSE,
        out_of_range: OutOfRangePolicy = OutOfRangePolicy.REJECT,
    ) -> ItemLifecycle:
        bounds = (
            RankBounds(rank_min, rank_max) if rank_min is not None
            else RankBounds()
        )
        return ItemLifecycle(
            test_db, OrderingConfig(bounds, mode, out_of_range),
        )
    return _make


@pytest.fixture
def sparse(make_lifecycle) -> ItemLifecycle:
    """Sparse ordering over the full 32-bit rank range."""
    return make_lifecycle()


@pytest.fixture
def small_sparse(make_lifecycle) -> ItemLifecycle:
    """Sparse ordering over [-100, 100]."""
    return make_lifecycle(-100, 100)


@pytest.fixture
def dense(make_lifecycle) -> ItemLifecycle:
    return make_lifecycle(mode=OrderingMode.DENSE)


@pytest.fixture
def store(test_db) -> SqlAlchemyRankStore:
    return SqlAlchemyRankStore(test_db, ListItem, ListItem.SCOPE_FIELDS)
