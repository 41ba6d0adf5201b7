"""API test fixtures: AsyncClient with dependency overrides."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from pagegen.api.deps import get_db, get_document_store, get_settings_store
from pagegen.api.main import create_app


@pytest.fixture
def mock_api_db_session():
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def app(mock_api_db_session, memory_store, memory_settings_store):
    """Create app with database and stores overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = lambda: mock_api_db_session
    application.dependency_overrides[get_document_store] = lambda: memory_store
    application.dependency_overrides[get_settings_store] = lambda: memory_settings_store
    return application


@pytest.fixture
async def client(app):
    """Async test client that bypasses lifespan."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
