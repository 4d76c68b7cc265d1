"""API-specific test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from galuxium.api.deps import get_orchestrator, get_store
from galuxium.main import create_app


@pytest.fixture
def app(store, orchestrator):
    """FastAPI app wired to the in-memory store and CompletionFake.

    The lifespan is not run; dependencies come from overrides and app.state.
    """
    app = create_app()
    app.state.store = store
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
