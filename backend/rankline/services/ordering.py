"""Ordering Factory — selects the sparse or dense strategy from configuration.

Invariants:
    - Exactly one strategy per OrderingConfig; callers never mix modes on a scope
    - Both strategies expose the same three entry points
"""

from typing import Protocol

from rankline.core.domain_types import Mutation, OrderingMode, RankDecision
from rankline.core.ordering_config import OrderingConfig
from rankline.core.repository_protocols import RankStore
from rankline.services.dense_ordering import DenseOrdering
from rankline.services.sparse_ordering import SparseOrdering


class Ordering(Protocol):
    """What the host persistence layer calls around each write."""
    async def before_insert(self, mutation: Mutation) -> RankDecision: ...
    async def before_update(self, mutation: Mutation) -> RankDecision: ...
    async def before_delete(self, mutation: Mutation) -> RankDecision: ...


def build_ordering(store: RankStore, config: OrderingConfig) -> Ordering:
    if config.mode is OrderingMode.DENSE:
        return DenseOrdering(store, config)
    return SparseOrdering(store, config)
