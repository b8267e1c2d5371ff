"""Tests for backend status handling, driven through httpx.MockTransport."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from backend.client import BackendClient, BackendError, map_backend_error
from backend.config import BackendConfig

CONFIG = BackendConfig(base_url="http://g5api.test", api_key="secret")


def _get(handler: Callable[[httpx.Request], httpx.Response], path: str = "/api/matches") -> Any:
    async def run() -> Any:
        async with BackendClient(CONFIG, transport=httpx.MockTransport(handler)) as client:
            return await client.get_json(path)

    return asyncio.run(run())


def test_json_response_is_returned_and_api_key_is_sent() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"matches": []})

    assert _get(handler) == {"matches": []}
    assert seen[0].headers["user-api"] == "secret"
    assert str(seen[0].url) == "http://g5api.test/api/matches"


def test_not_found_means_no_data() -> None:
    assert _get(lambda request: httpx.Response(404, text="no matches")) is None


def test_redirect_is_reported_as_misconfiguration() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"location": "/login"})

    with pytest.raises(BackendError, match="redirected \\(302\\).*-> /login") as exc_info:
        _get(handler)
    assert exc_info.value.status is None


def test_server_error_carries_status_and_body_preview() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="x" * 500)

    with pytest.raises(BackendError) as exc_info:
        _get(handler)
    assert exc_info.value.status == 503
    assert exc_info.value.message.endswith("x" * 200)
    assert "x" * 201 not in exc_info.value.message


def test_non_json_body_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>login</html>", headers={"content-type": "text/html"})

    with pytest.raises(BackendError, match="non-JSON response"):
        _get(handler)


def test_invalid_json_body_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"{oops", headers={"content-type": "application/json"})

    with pytest.raises(BackendError, match="invalid JSON"):
        _get(handler)


def test_map_backend_error() -> None:
    assert map_backend_error(BackendError(404, "gone")) == ("gone", 404)
    assert map_backend_error(BackendError(None, "redirected")) == ("redirected", 502)
    assert map_backend_error(RuntimeError("boom")) == ("boom", 502)
    assert map_backend_error("not an exception") == ("Unknown error", 500)
