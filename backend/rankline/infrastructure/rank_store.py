"""SQLAlchemy Rank Store — RankStore implementation over any mapped model.

Invariants:
    - Scope predicates compare every scope column; None compiles to IS NULL
    - Rows with a NULL rank are invisible to ordering reads and shifts
    - lock_scope issues SELECT ... FOR UPDATE over the whole scope (no-op on SQLite,
      which serializes writers at the database level)
    - FOR UPDATE locks existing rows only, so an empty scope has nothing to lock;
      on PostgreSQL lock_scope also takes a transaction-scoped advisory lock keyed
      by (table, scope), which serializes first inserts into a new scope. Other
      backends keep that gap
    - Lock/serialization failures raise ConcurrencyConflictError; other driver
      errors propagate unchanged to the session manager

Design Decisions:
    - Generic over (model, scope fields, rank field): one adapter serves every
      ordered table, mirroring how the ordering core is configured per table
    - ORM-enabled UPDATE with default synchronize_session: in-session objects in the
      shifted range see their new rank without a refresh
"""

import hashlib
import logging
from typing import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from rankline.core.domain_types import (
    LockHandle, Rank, RankedRow, RankRange, RecordId, ScopeKey,
)
from rankline.core.errors import (
    ConcurrencyConflictError, ErrorContext, InvalidScopeKeyError,
)
from rankline.infrastructure.database import is_concurrency_conflict

logger = logging.getLogger(__name__)


def scope_lock_key(table: str, scope: ScopeKey) -> int:
    """Signed 64-bit advisory lock key, stable across processes."""
    digest = hashlib.blake2b(
        repr((table, scope)).encode(), digest_size=8,
    ).digest()
    return int.from_bytes(digest, "big", signed=True)


class SqlAlchemyRankStore:
    """Scoped rank reads and writes for one ordered table."""

    def __init__(
        self,
        db: AsyncSession,
        model: type,
        scope_fields: Sequence[str] = (),
        rank_field: str = "rank",
        id_field: str = "id",
    ):
        self.db = db
        self.model = model
        self.rank_field = rank_field
        self._rank = getattr(model, rank_field)
        self._id = getattr(model, id_field)
        self._scope_columns = tuple(getattr(model, f) for f in scope_fields)

    # ─── Locking ─────────────────────────────────────────────────

    async def lock_scope(self, scope: ScopeKey) -> LockHandle:
        stmt = self._scoped(select(self._id), scope).with_for_update()
        if self.db.get_bind().dialect.name == "postgresql":
            key = scope_lock_key(self.model.__tablename__, scope)
            await self._execute(
                select(func.pg_advisory_xact_lock(key)), "lock_scope", scope,
            )
        result = await self._execute(stmt, "lock_scope", scope)
        return LockHandle(scope_key=scope, row_count=len(result.all()))

    # ─── Reads ───────────────────────────────────────────────────

    async def ordered_ranks(
        self, scope: ScopeKey, exclude_id: RecordId | None = None,
    ) -> list[RankedRow]:
        stmt = self._ranked(
            select(self._id, self._rank), scope, exclude_id,
        ).order_by(self._rank)
        result = await self._execute(stmt, "ordered_ranks", scope)
        return [RankedRow(id=row[0], rank=row[1]) for row in result.all()]

    async def rank_at_offset(
        self, scope: ScopeKey, offset: int, limit: int,
        exclude_id: RecordId | None = None,
    ) -> list[Rank]:
        stmt = (
            self._ranked(select(self._rank), scope, exclude_id)
            .order_by(self._rank)
            .offset(offset)
            .limit(limit)
        )
        result = await self._execute(stmt, "rank_at_offset", scope)
        return list(result.scalars().all())

    async def ranks_beyond(
        self, scope: ScopeKey, rank: Rank, direction: int, limit: int,
        exclude_id: RecordId | None = None,
    ) -> list[Rank]:
        stmt = self._ranked(select(self._rank), scope, exclude_id)
        if direction < 0:
            stmt = stmt.where(self._rank < rank).order_by(self._rank.desc())
        else:
            stmt = stmt.where(self._rank > rank).order_by(self._rank.asc())
        result = await self._execute(stmt.limit(limit), "ranks_beyond", scope)
        return list(result.scalars().all())

    async def min_rank(
        self, scope: ScopeKey, exclude_id: RecordId | None = None,
    ) -> Rank | None:
        stmt = self._ranked(select(func.min(self._rank)), scope, exclude_id)
        result = await self._execute(stmt, "min_rank", scope)
        return result.scalar()

    async def max_rank(
        self, scope: ScopeKey, exclude_id: RecordId | None = None,
    ) -> Rank | None:
        stmt = self._ranked(select(func.max(self._rank)), scope, exclude_id)
        result = await self._execute(stmt, "max_rank", scope)
        return result.scalar()

    async def rank_exists(
        self, scope: ScopeKey, rank: Rank, exclude_id: RecordId | None = None,
    ) -> bool:
        stmt = (
            self._ranked(select(self._id), scope, exclude_id)
            .where(self._rank == rank)
            .limit(1)
        )
        result = await self._execute(stmt, "rank_exists", scope)
        return result.scalar() is not None

    async def count(
        self, scope: ScopeKey, exclude_id: RecordId | None = None,
    ) -> int:
        stmt = self._ranked(
            select(func.count()).select_from(self.model), scope, exclude_id,
        )
        result = await self._execute(stmt, "count", scope)
        return result.scalar_one()

    # ─── Writes ──────────────────────────────────────────────────

    async def shift_ranks(
        self, scope: ScopeKey, span: RankRange, delta: int,
    ) -> int:
        stmt = self._ranked(update(self.model), scope)
        if span.low is not None:
            stmt = stmt.where(self._rank >= span.low)
        if span.high is not None:
            stmt = stmt.where(self._rank <= span.high)
        stmt = stmt.values({self.rank_field: self._rank + delta})
        result = await self._execute(stmt, "shift_ranks", scope)
        return result.rowcount

    async def set_rank(self, record_id: RecordId, rank: Rank) -> None:
        stmt = (
            update(self.model)
            .where(self._id == record_id)
            .values({self.rank_field: rank})
        )
        await self._execute(stmt, "set_rank")

    # ─── Internals ───────────────────────────────────────────────

    def _scoped(self, stmt, scope: ScopeKey, exclude_id: RecordId | None = None):
        if len(scope) != len(self._scope_columns):
            raise InvalidScopeKeyError(
                len(self._scope_columns), len(scope),
                ErrorContext(scope_key=scope),
            )
        for column, value in zip(self._scope_columns, scope):
            stmt = stmt.where(column.is_(None) if value is None else column == value)
        if exclude_id is not None:
            stmt = stmt.where(self._id != exclude_id)
        return stmt

    def _ranked(self, stmt, scope: ScopeKey, exclude_id: RecordId | None = None):
        return self._scoped(stmt, scope, exclude_id).where(self._rank.is_not(None))

    async def _execute(self, stmt, operation: str, scope: ScopeKey | None = None):
        try:
            return await self.db.execute(stmt)
        except DBAPIError as e:
            if not is_concurrency_conflict(e):
                raise
            logger.warning(
                f"Concurrency conflict during {operation}: {e.orig}",
                extra={"scope_key": scope, "error_code": "CONCURRENCY_CONFLICT"},
            )
            raise ConcurrencyConflictError(
                operation, ErrorContext(scope_key=scope),
            ) from e
