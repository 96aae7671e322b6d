"""List Routes — read a scope's items in rank order.

Invariants:
    - Read-only: never takes the scope lock
    - Omitted section query parameter selects the NULL section (its own scope)
"""

from fastapi import APIRouter, Depends, Query

from rankline.api.dependencies import get_item_lifecycle
from rankline.schemas.item import ItemResponse, ScopeItemsResponse
from rankline.services.item_lifecycle import ItemLifecycle

router = APIRouter(prefix="/api/v1/lists", tags=["lists"])


@router.get("/{list_id}/items", response_model=ScopeItemsResponse)
async def list_items(
    list_id: str,
    section: int | None = Query(None),
    lifecycle: ItemLifecycle = Depends(get_item_lifecycle),
):
    """Items of (list_id, section) in ascending rank order."""
    items = await lifecycle.list_scope(list_id, section)
    return ScopeItemsResponse(
        list_id=list_id,
        section=section,
        items=[ItemResponse.model_validate(i) for i in items],
    )
