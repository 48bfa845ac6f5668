"""Test configuration and fixtures."""

import json
import os
from typing import Any, Callable

import httpx
import pytest

# Keep the developer's .env and OAUTH_* variables out of the tests
for _key in list(os.environ):
    if _key.startswith("OAUTH_"):
        del os.environ[_key]

from idp.auth.providers.base import ProviderConfig
from idp.auth.providers.registry import reset_providers
from idp.config import get_settings

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def reset_state():
    """Reset cached settings and the provider table between tests."""
    get_settings.cache_clear()
    reset_providers()
    yield
    get_settings.cache_clear()
    reset_providers()


@pytest.fixture
def provider_config() -> ProviderConfig:
    """A complete provider configuration."""
    return ProviderConfig(client_id="test-client-id", client_secret="test-client-secret")


def json_routes(routes: dict[str, Any], status_code: int = 200) -> Handler:
    """Handler answering each URL (without query) with a fixed JSON body."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        if url not in routes:
            return httpx.Response(404, json={"message": "not found"})
        return httpx.Response(status_code, content=json.dumps(routes[url]))

    return handler


@pytest.fixture
def mock_transport() -> Callable[..., httpx.MockTransport]:
    """Build an httpx.MockTransport from a URL -> JSON body mapping or a handler."""

    def build(routes: dict[str, Any] | Handler, status_code: int = 200) -> httpx.MockTransport:
        if callable(routes):
            return httpx.MockTransport(routes)
        return httpx.MockTransport(json_routes(routes, status_code))

    return build
