"""Item Lifecycle — host persistence layer that drives the ordering core for list_items.

Invariants:
    - The ordering entry point runs BEFORE the row is written, with the row's old state
    - Everything happens inside the caller's AsyncSession transaction; nothing commits here
    - A record's rank is only ever assigned from a RankDecision

Design Decisions:
    - Explicit before_* calls over SQLAlchemy mapper events: event hooks cannot await
      the async store, and explicit calls make the transaction boundary obvious
    - Only fields present in the update payload are applied (None is a real value for section)
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rankline.core.domain_types import (
    Mutation, RankDecision, RecordId, RequestedPosition, scope_key,
)
from rankline.core.errors import ResourceNotFoundError
from rankline.core.ordering_config import OrderingConfig
from rankline.infrastructure.rank_store import SqlAlchemyRankStore
from rankline.models.list_item import ListItem
from rankline.services.ordering import build_ordering

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "list_id", "section")


class ItemLifecycle:
    """Create, update, delete and list ordered items."""

    def __init__(self, db: AsyncSession, config: OrderingConfig):
        self.db = db
        self.store = SqlAlchemyRankStore(db, ListItem, ListItem.SCOPE_FIELDS)
        self.ordering = build_ordering(self.store, config)
        self.last_decision: RankDecision | None = None

    async def get(self, item_id: UUID) -> ListItem:
        result = await self.db.execute(
            select(ListItem).where(ListItem.id == item_id),
        )
        item = result.scalar_one_or_none()
        if not item:
            raise ResourceNotFoundError("ListItem", str(item_id))
        return item

    async def create(
        self,
        list_id: str,
        title: str,
        section: int | None = None,
        position: RequestedPosition = None,
    ) -> ListItem:
        decision = await self.ordering.before_insert(Mutation(
            record_id=None,
            new_scope=scope_key(list_id, section),
            position=position,
        ))
        self.last_decision = decision
        item = ListItem(
            list_id=list_id, section=section, title=title, rank=decision.rank,
        )
        self.db.add(item)
        await self.db.flush()
        return item

    async def update(
        self,
        item_id: UUID,
        changes: dict,
        position: RequestedPosition = None,
    ) -> ListItem:
        item = await self.get(item_id)
        fields = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        new_scope = scope_key(
            fields.get("list_id", item.list_id),
            fields.get("section", item.section),
        )
        decision = await self.ordering.before_update(Mutation(
            record_id=RecordId(item.id),
            old_scope=item.scope_key,
            new_scope=new_scope,
            old_rank=item.rank,
            position=position,
        ))
        self.last_decision = decision
        for name, value in fields.items():
            setattr(item, name, value)
        item.rank = decision.rank
        await self.db.flush()
        return item

    async def delete(self, item_id: UUID) -> None:
        item = await self.get(item_id)
        self.last_decision = await self.ordering.before_delete(Mutation(
            record_id=RecordId(item.id),
            old_scope=item.scope_key,
            new_scope=item.scope_key,
            old_rank=item.rank,
        ))
        await self.db.delete(item)
        await self.db.flush()
        logger.info(
            f"Deleted item {item_id}",
            extra={"record_id": str(item_id), "scope_key": item.scope_key},
        )

    async def list_scope(
        self, list_id: str, section: int | None = None,
    ) -> list[ListItem]:
        section_clause = (
            ListItem.section.is_(None) if section is None
            else ListItem.section == section
        )
        result = await self.db.execute(
            select(ListItem)
            .where(ListItem.list_id == list_id)
            .where(section_clause)
            .order_by(ListItem.rank.asc().nulls_last(), ListItem.created_at)
        )
        return list(result.scalars().all())
