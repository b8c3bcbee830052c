"""Fixtures wiring the API to an in-memory deck service."""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

import api.session
from api.main import app, limiter


@pytest.fixture(autouse=True)
def isolated_api(deck_client, monkeypatch):
    """Fresh registry and a fake deck service for every API test."""
    monkeypatch.setattr(api.session, "_registry", None)
    monkeypatch.setattr(api.session, "_deck_client", deck_client)
    monkeypatch.setattr(limiter, "enabled", False)


@pytest_asyncio.fixture
async def client():
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def session_id(client):
    """Signed id of a freshly created session."""
    response = await client.post("/api/game/new")
    return response.json()["session_id"]
