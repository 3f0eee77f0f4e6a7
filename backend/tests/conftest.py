"""Pytest fixtures for the progressify backend."""

import os

# Settings are read at import time; pin the test environment first.
os.environ.setdefault("APP_ENV", "test")

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import AsyncExitStack
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient, Response

from app import create_app
from services import InMemoryRateLimitClient, RateLimiter, set_rate_limiters
from services.auth import CSRF_COOKIE, CSRF_HEADER
from services.rate_limiter import LOGIN_PATH, REGISTER_PATH, RESET_PASSWORD_PATH

DEFAULT_PASSWORD = "Sup3rSecret1"
ClientFactory = Callable[[], Awaitable[AsyncClient]]


def build_credentials(password: str = DEFAULT_PASSWORD) -> dict[str, str]:
    return {"email": f"user_{uuid4().hex[:10]}@example.com", "password": password}


def csrf_headers(client: AsyncClient) -> dict[str, str]:
    """Mirror the anti-forgery cookie into the request header, as a browser client does."""
    token = client.cookies.get(CSRF_COOKIE)
    assert token, "client has no anti-forgery cookie"
    return {CSRF_HEADER: token}


async def register(client: AsyncClient, credentials: dict[str, str] | None = None) -> Response:
    payload = credentials or build_credentials()
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response


@pytest.fixture()
def app() -> FastAPI:
    """Create a fresh app backed by empty in-memory repositories."""
    return create_app()


@pytest_asyncio.fixture()
async def client_factory(app: FastAPI) -> AsyncIterator[ClientFactory]:
    """Return a factory of independent clients (separate cookie jars) on one app."""
    async with AsyncExitStack() as stack:

        async def _make() -> AsyncClient:
            transport = ASGITransport(app=app)
            return await stack.enter_async_context(
                AsyncClient(transport=transport, base_url="http://testserver")
            )

        yield _make


@pytest_asyncio.fixture()
async def async_client(client_factory: ClientFactory) -> AsyncClient:
    """Return an HTTPX async client bound to the FastAPI app."""
    return await client_factory()


@pytest_asyncio.fixture()
async def authed_client(async_client: AsyncClient) -> AsyncClient:
    """Client holding a fresh user's session and anti-forgery cookies."""
    await register(async_client)
    return async_client


@pytest.fixture(autouse=True)
def _rate_limiter_stub() -> Iterator[None]:
    client = InMemoryRateLimitClient()
    set_rate_limiters(
        {
            path: RateLimiter(client, limit=1_000, window_seconds=60, prefix=path)
            for path in (LOGIN_PATH, REGISTER_PATH, RESET_PASSWORD_PATH)
        }
    )
    yield
    set_rate_limiters(None)
