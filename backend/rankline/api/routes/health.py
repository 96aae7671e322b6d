"""Health Checks — liveness, plus readiness that reports how scopes are ordered.

Invariants:
    - GET /health/ returns 200 while the process is up, without touching the database
    - GET /health/ready returns 503 unless the database answers and the ordered
      table is reachable
    - Both readiness outcomes echo the active ordering (mode, rank bounds, dense
      out-of-range policy), so a misconfigured replica is visible from outside

Design Decisions:
    - The table check is a LIMIT 1 read with no lock: a health check must never queue
      behind a scope lock held by a rebalance
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

import rankline.infrastructure.database as database
from rankline.api.dependencies import get_ordering_config
from rankline.core.errors import RanklineError
from rankline.core.ordering_config import OrderingConfig
from rankline.models.list_item import ListItem

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


def describe_ordering(config: OrderingConfig) -> dict:
    return {
        "mode": config.mode.value,
        "rank_min": config.bounds.min,
        "rank_max": config.bounds.max,
        "out_of_range": config.out_of_range.value,
    }


async def _table_reachable() -> bool:
    try:
        async with database.db_manager.session() as db:
            await db.execute(select(ListItem.id).limit(1))
        return True
    except (RanklineError, SQLAlchemyError) as e:
        logger.error(f"Ordered table check failed: {e}")
        return False


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Liveness check."""
    return {"status": "healthy", "service": "rankline-api"}


@router.get("/ready")
async def readiness_check(
    config: OrderingConfig = Depends(get_ordering_config),
):
    """Readiness check: database, ordered table, and the active ordering."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    table_ok = await _table_reachable() if db_ok else False
    checks = {
        "database": "healthy" if db_ok else "unavailable",
        "list_items": "healthy" if table_ok else "unavailable",
    }
    body = {"checks": checks, "ordering": describe_ordering(config)}
    if not table_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", **body},
        )
    return {"status": "ready", **body}
