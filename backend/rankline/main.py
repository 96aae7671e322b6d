"""Rankline API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map RanklineError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py (keeps this module's imports small)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import rankline.infrastructure.database as database
from rankline.api.error_handlers import register_error_handlers
from rankline.api.routes import health, items, lists
from rankline.config import get_settings
from rankline.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(
        f"Rankline API started ({settings.ordering_mode.value} ordering, "
        f"ranks [{settings.rank_min}, {settings.rank_max}])",
    )
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("Rankline API shutting down")


app = FastAPI(
    title="Rankline API", version="0.1.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(items.router)
app.include_router(lists.router)

register_error_handlers(app)
