"""Shared fixtures and helpers for unit and integration tests."""

from collections.abc import AsyncGenerator, Callable

import httpx
import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from portal.core.config import Settings
from portal.main import create_app

# Fixed hash used wherever a test needs a known stored value
TEST_HASH = "a1b2c3d4e5f60718293a4b5c6d7e8f90"

# Fixed 16-byte XOR key for deterministic randomized tokens
TEST_KEY = bytes(range(16))

CSRF_COOKIE = "csrf_cookie_name"
CSRF_FIELD = "csrf_token_name"
CSRF_HEADER = "X-CSRF-TOKEN"


def make_settings(**overrides: object) -> Settings:
    """Build Settings for tests, independent of the process environment.

    Args:
        **overrides: Field values to change from the test defaults.

    Returns:
        Validated Settings instance.
    """
    values: dict[str, object] = {
        "environment": "test",
        "csrf_protection": "cookie",
        "csrf_token_randomize": False,
        "csrf_regenerate": True,
        "csrf_expires": 7200,
        "cookie_prefix": "",
        "csrf_exempt_paths": [],
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[arg-type]


def set_cookie_value(response: httpx.Response, name: str) -> str | None:
    """Return the value a response sets for cookie `name`, if any."""
    for header in response.headers.get_list("set-cookie"):
        pair = header.split(";", 1)[0]
        key, _, value = pair.partition("=")
        if key.strip() == name:
            return value.strip().strip('"')
    return None


def add_echo_routes(app: FastAPI) -> None:
    """Register routes that report what the handler received."""

    @app.post("/test/echo")
    async def echo_post(request: Request) -> dict:
        body = await request.body()
        return {
            "body": body.decode("utf-8"),
            "content_length": request.headers.get("content-length"),
        }

    @app.put("/test/echo")
    async def echo_put(request: Request) -> dict:
        body = await request.body()
        return {"body": body.decode("utf-8")}

    @app.get("/test/echo")
    async def echo_get() -> dict:
        return {"ok": True}

    @app.delete("/test/echo")
    async def echo_delete() -> dict:
        return {"ok": True}


AppFactory = Callable[..., FastAPI]


@pytest.fixture
def app_factory() -> AppFactory:
    """Create an app with echo routes for the given settings overrides."""

    def _factory(**overrides: object) -> FastAPI:
        app = create_app(make_settings(**overrides))
        add_echo_routes(app)
        return app

    return _factory


@pytest.fixture
def app(app_factory: AppFactory) -> FastAPI:
    """Application with default cookie-backed CSRF protection."""
    return app_factory()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
