"""Shared test fixtures for RateMyGit."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ratemygit.auth.sessions import create_session
from ratemygit.config import settings
from ratemygit.models.user import User
from ratemygit.services.cache_service import roast_cache

ACCESS_TOKEN = "gho_testtoken1234567890"
TEST_USER = User(
    github_id=12345,
    github_login="testuser",
    display_name="Test User",
    email="test@example.com",
    avatar_url="https://avatars.githubusercontent.com/u/12345",
)


# ---------------------------------------------------------------------------
# App / client fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_roast_cache():
    roast_cache.clear()
    yield
    roast_cache.clear()


@pytest_asyncio.fixture
async def app():
    from ratemygit.main import app as fastapi_app

    yield fastapi_app


@pytest_asyncio.fixture
async def client(app):
    """Anonymous async HTTP client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def session_cookie() -> str:
    return create_session(TEST_USER, ACCESS_TOKEN)


@pytest_asyncio.fixture
async def auth_client(app, session_cookie):
    """Async HTTP client carrying a valid session cookie."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={settings.session_cookie_name: session_cookie},
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Upstream mocks
# ---------------------------------------------------------------------------

def make_httpx_client(response: MagicMock | None = None, *, post=None, get=None) -> AsyncMock:
    """An AsyncMock standing in for ``httpx.AsyncClient`` used as a context manager."""
    mock_client = AsyncMock()
    mock_client.post = post or AsyncMock(return_value=response)
    mock_client.get = get or AsyncMock(return_value=response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


def make_json_response(payload, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.raise_for_status = MagicMock()
    return resp
