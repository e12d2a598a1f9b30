"""Pytest fixtures for FuelGrid API tests."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.app import app
from src.database.session import get_db


@pytest.fixture
def mock_db() -> AsyncMock:
    """An AsyncSession stand-in; tests queue results on ``execute``."""
    db = AsyncMock(spec=AsyncSession)
    db.add = MagicMock()
    return db


@pytest_asyncio.fixture
async def async_client(mock_db: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Yield an httpx AsyncClient wired to the FastAPI app with a mocked DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
