"""Service test fixtures — in-memory store, fake remote document, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with tables created
    - Remote config document served by httpx.MockTransport (no network)
    - get_config_store / get_reading_service overridden on the app
    - db_manager patched for the readiness probe, which reads it directly

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - ASGITransport does not run the lifespan: fixtures build what startup would
    - FakeRemoteStore keeps the document as a dict so tests assert on camelCase keys
"""

import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

import thaiat.infrastructure.database as db_module
from thaiat.infrastructure.database import DatabaseSessionManager
from thaiat.main import app
from thaiat.services.config_store import ConfigStore, get_config_store
from thaiat.services.reading_service import ReadingService, get_reading_service

from tests.services.mock_anthropic import MockAnthropicClient

REMOTE_URL = "https://store.example.test/destiny_config.json"


class FakeRemoteStore:
    """Firebase-style JSON document behind httpx.MockTransport.

    Attributes:
      - document: current JSON value (None → remote returns null)
      - down: raise ConnectError on every request
      - error: exception raised as-is on every request (overrides down)
      - status: HTTP status returned for every request
      - requests: list of (method, url) seen
    """

    def __init__(self, document=None):
        self.document = document
        self.down = False
        self.error = None
        self.status = 200
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, str(request.url)))
        if self.error is not None:
            raise self.error
        if self.down:
            raise httpx.ConnectError("store unreachable", request=request)
        if self.status >= 400:
            return httpx.Response(self.status, json={"error": "denied"})
        if request.method == "PUT":
            self.document = json.loads(request.content)
            return httpx.Response(200, json=self.document)
        return httpx.Response(200, json=self.document)


@pytest.fixture
async def db_manager():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.create_tables()
    yield manager
    await manager.dispose()


@pytest.fixture
def remote():
    return FakeRemoteStore()


@pytest.fixture
async def http_client(remote):
    async with httpx.AsyncClient(transport=httpx.MockTransport(remote.handler)) as c:
        yield c


@pytest.fixture
def config_store(db_manager, http_client):
    """Store with a remote document configured."""
    return ConfigStore(db_manager, http_client, default_url=REMOTE_URL)


@pytest.fixture
def local_store(db_manager, http_client):
    """Store with no remote URL: local table only."""
    return ConfigStore(db_manager, http_client, default_url="")


@pytest.fixture
def mock_client():
    return MockAnthropicClient()


@pytest.fixture
def reading_service(mock_client):
    return ReadingService(mock_client, model="test-model")


@pytest.fixture
async def client(db_manager, config_store, reading_service):
    """FastAPI test client with store and oracle dependencies overridden."""
    app.dependency_overrides[get_config_store] = lambda: config_store
    app.dependency_overrides[get_reading_service] = lambda: reading_service

    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
