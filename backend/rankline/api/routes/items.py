"""Item Routes — create, read, reposition and delete ordered items.

Invariants:
    - Each request is one transaction: commit on success, rollback on any rankline error
    - Ordering errors surface through the global RanklineError handler (400/409)

Design Decisions:
    - PATCH carries both field changes and the requested position: a scope change
      and its target index must be computed in the same transaction
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from rankline.api.dependencies import get_item_lifecycle
from rankline.core.errors import RanklineError
from rankline.schemas.item import (
    ItemCreate, ItemResponse, ItemUpdate, to_requested_position,
)
from rankline.services.item_lifecycle import ItemLifecycle

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/items", tags=["items"])


@router.post(
    "", response_model=ItemResponse, status_code=status.HTTP_201_CREATED,
)
async def create_item(
    body: ItemCreate, lifecycle: ItemLifecycle = Depends(get_item_lifecycle),
):
    """Insert an item at the requested position (append by default)."""
    try:
        item = await lifecycle.create(
            list_id=body.list_id,
            title=body.title,
            section=body.section,
            position=to_requested_position(body.position),
        )
        await lifecycle.db.commit()
    except RanklineError:
        await lifecycle.db.rollback()
        raise
    return ItemResponse.model_validate(item)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: UUID, lifecycle: ItemLifecycle = Depends(get_item_lifecycle),
):
    """Get a single item."""
    return ItemResponse.model_validate(await lifecycle.get(item_id))


@router.patch("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: UUID,
    body: ItemUpdate,
    lifecycle: ItemLifecycle = Depends(get_item_lifecycle),
):
    """Update fields and/or reposition an item (index, append, up, down)."""
    try:
        item = await lifecycle.update(
            item_id, body.changes(), to_requested_position(body.position),
        )
        await lifecycle.db.commit()
    except RanklineError:
        await lifecycle.db.rollback()
        raise
    return ItemResponse.model_validate(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: UUID, lifecycle: ItemLifecycle = Depends(get_item_lifecycle),
):
    """Delete an item. Sparse scopes leave every other rank untouched."""
    try:
        await lifecycle.delete(item_id)
        await lifecycle.db.commit()
    except RanklineError:
        await lifecycle.db.rollback()
        raise
