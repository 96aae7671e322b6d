"""API test fixtures — FastAPI test client over the per-test SQLite engine.

Invariants:
    - get_db overridden to open sessions on the test engine
    - get_ordering_config overridden per test through the ordering_config fixture
    - db_manager patched so the readiness check sees the test engine

Design Decisions:
    - Small sparse bounds by default: collision and capacity paths are reachable
      with a handful of requests
"""

import pytest
from httpx import ASGITransport, AsyncClient

import rankline.infrastructure.database as db_module
from rankline.api.dependencies import get_ordering_config
from rankline.core.ordering_config import OrderingConfig, RankBounds
from rankline.infrastructure.database import DatabaseSessionManager, get_db
from rankline.main import app


@pytest.fixture
def ordering_config() -> OrderingConfig:
    return OrderingConfig(bounds=RankBounds(-100, 100))


@pytest.fixture
async def client(test_engine, test_session_factory, ordering_config):
    """FastAPI test client with DB and ordering dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ordering_config] = lambda: ordering_config

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def create_item(client):
    async def _create(title: str, list_id: str = "L", **fields) -> dict:
        res = await client.post(
            "/api/v1/items", json={"title": title, "list_id": list_id, **fields},
        )
        assert res.status_code == 201, res.text
        return res.json()
    return _create


@pytest.fixture
def titles(client):
    """Titles of one scope in rank order, read through the list endpoint."""
    async def _titles(list_id: str = "L", section: int | None = None) -> list[str]:
        params = {} if section is None else {"section": section}
        res = await client.get(f"/api/v1/lists/{list_id}/items", params=params)
        assert res.status_code == 200
        return [item["title"] for item in res.json()["items"]]
    return _titles
