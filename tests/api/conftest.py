"""API test fixtures — full middleware pipeline over an in-memory database.

Invariants:
    - Apps are built with create_app(Settings(...)): no environment leaks into tests
    - app.state.db_manager wraps the per-test SQLite engine (lifespan is not run by ASGITransport)
"""

from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

from drawboard.config import Settings
from drawboard.infrastructure.database import DatabaseSessionManager
from drawboard.main import create_app

ACCESS_KEY = "test-access-key"
ALLOWED_ORIGIN = "http://localhost:5173"


def _manager_for(engine, session_factory) -> DatabaseSessionManager:
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = engine
    manager._session_factory = session_factory
    return manager


@pytest.fixture
def build_app(test_engine, test_session_factory):
    """Factory: build_app(**settings_overrides) -> FastAPI."""
    def _build(**overrides):
        settings = Settings(_env_file=None, **overrides)
        app = create_app(settings)
        app.state.db_manager = _manager_for(test_engine, test_session_factory)
        return app
    return _build


@pytest.fixture
def client_for():
    """Async context manager yielding an AsyncClient bound to the given app."""
    @asynccontextmanager
    async def _client(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    return _client


@pytest.fixture
async def app(build_app):
    return build_app()


@pytest.fixture
async def client(app, client_for):
    async with client_for(app) as ac:
        yield ac


@pytest.fixture
async def auth_client(build_app, client_for):
    app = build_app(auth_enabled=True, auth_access_key=ACCESS_KEY)
    async with client_for(app) as ac:
        yield ac
