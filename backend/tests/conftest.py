"""Root conftest — shared test configuration and database fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Settings never point at a real PostgreSQL instance during tests

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FOR UPDATE compiles away
      and SQLite serializes writers, which is enough for single-session tests
"""

import os

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)

from rankline.db.base import Base  # noqa: E402
from rankline.models.list_item import ListItem  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def ranked_ids(test_db):
    """Ids of one scope in ascending rank order, read straight from the table."""
    async def _ranked_ids(list_id: str, section: int | None = None) -> list:
        section_clause = (
            ListItem.section.is_(None) if section is None
            else ListItem.section == section
        )
        result = await test_db.execute(
            select(ListItem.id)
            .where(ListItem.list_id == list_id)
            .where(section_clause)
            .order_by(ListItem.rank)
        )
        return list(result.scalars().all())
    return _ranked_ids


@pytest.fixture
def scope_ranks(test_db):
    """Ranks of one scope in ascending order."""
    async def _scope_ranks(list_id: str, section: int | None = None) -> list[int | None]:
        section_clause = (
            ListItem.section.is_(None) if section is None
            else ListItem.section == section
        )
        result = await test_db.execute(
            select(ListItem.rank)
            .where(ListItem.list_id == list_id)
            .where(section_clause)
            .order_by(ListItem.rank)
        )
        return list(result.scalars().all())
    return _scope_ranks


@pytest.fixture
def seed_items(test_db):
    """Insert rows with fixed ranks, bypassing the ordering core."""
    async def _seed(list_id: str, ranks: list[int | None], section: int | None = None):
        items = [
            ListItem(list_id=list_id, section=section, title=f"seed #{i}", rank=r)
            for i, r in enumerate(ranks)
        ]
        test_db.add_all(items)
        await test_db.flush()
        return items
    return _seed
