"""
Shared fixtures: a fake pool wrapped in the real `Database`, and an HTTP
client bound to the app without a network.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from core.db import Database
from fakes import FakePool
from main import create_app


@pytest.fixture
def pool() -> FakePool:
    return FakePool()


@pytest.fixture
def database(pool: FakePool) -> Database:
    return Database(pool, acquire_timeout=1, host="db.test", database="collection")


@pytest.fixture
async def client(database: Database) -> AsyncClient:
    transport = ASGITransport(app=create_app(database))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
