"""API test fixtures — FastAPI app per test with the gateway injected.

Invariants:
    - get_user_gateway overridden to a gateway over the test store
    - Lifespan is not run by ASGITransport; the override supplies the gateway

Design Decisions:
    - FailingGateway stands in for a store that fails with a given FailureKind
"""

import pytest
from httpx import ASGITransport, AsyncClient

from account_service.api.dependencies import get_user_gateway
from account_service.core.domain_types import FailureKind
from account_service.core.errors import PersistenceError
from account_service.main import create_app


class FailingGateway:
    """Gateway double whose every store call fails with one FailureKind."""

    def __init__(self, kind: FailureKind):
        self.kind = kind
        self.insert_calls = []

    async def insert_user(self, user):
        self.insert_calls.append(user)
        raise PersistenceError("connection reset by peer", "insert", self.kind)

    async def list_users(self):
        raise PersistenceError("connection reset by peer", "select", self.kind)

    async def health_check(self):
        return False


@pytest.fixture
def app(settings):
    return create_app(settings)


async def _client_for(app, gateway):
    app.dependency_overrides[get_user_gateway] = lambda: gateway
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def client(app, gateway):
    """FastAPI test client backed by the in-memory store."""
    async with await _client_for(app, gateway) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def failing_client(app):
    """Factory: client whose gateway fails with the given FailureKind."""
    clients = []

    async def _make(kind: FailureKind):
        gateway = FailingGateway(kind)
        c = await _client_for(app, gateway)
        clients.append(c)
        return c, gateway

    yield _make
    for c in clients:
        await c.aclose()
    app.dependency_overrides.clear()
