"""Route Dependencies — ordering configuration and lifecycle wiring for handlers.

Invariants:
    - One ItemLifecycle per request, bound to the request's AsyncSession
    - Ordering configuration comes from settings; tests override get_ordering_config
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rankline.config import get_settings
from rankline.core.ordering_config import OrderingConfig
from rankline.infrastructure.database import get_db
from rankline.services.item_lifecycle import ItemLifecycle


def get_ordering_config() -> OrderingConfig:
    return get_settings().ordering_config()


def get_item_lifecycle(
    db: AsyncSession = Depends(get_db),
    config: OrderingConfig = Depends(get_ordering_config),
) -> ItemLifecycle:
    return ItemLifecycle(db, config)
