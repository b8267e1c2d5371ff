"""Async HTTP client for the match-tracking backend."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from backend.config import BackendConfig

logger = logging.getLogger(__name__)

API_KEY_HEADER = "user-api"
DEFAULT_ERROR_STATUS = 502
UNKNOWN_ERROR_STATUS = 500
ERROR_BODY_PREVIEW = 200


class BackendError(Exception):
    """A backend response that cannot be turned into data."""

    def __init__(self, status: int | None, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


def map_backend_error(error: object) -> tuple[str, int]:
    """Translate a failure into a ``(message, status)`` pair for callers."""
    if isinstance(error, BackendError):
        return error.message, error.status or DEFAULT_ERROR_STATUS
    if isinstance(error, BaseException):
        return str(error), DEFAULT_ERROR_STATUS
    return "Unknown error", UNKNOWN_ERROR_STATUS


class BackendClient:
    """Thin JSON GET wrapper that applies the backend's status conventions.

    404 means "no data" and yields ``None``. Redirects are never followed: the
    backend redirects unauthenticated requests to its login page, which almost
    always means the API key is wrong.
    """

    def __init__(
        self,
        config: BackendConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={API_KEY_HEADER: config.api_key},
            timeout=config.timeout_seconds,
            follow_redirects=False,
            transport=transport,
        )

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, path: str) -> Any:
        logger.debug("GET %s", path)
        response = await self._client.get(path)

        if 300 <= response.status_code < 400:
            location = response.headers.get("location", "")
            raise BackendError(
                None,
                f"Backend redirected ({response.status_code}) for {path} -> {location}. "
                "Check that the API key is correct.",
            )
        if response.status_code == 404:
            return None
        if not response.is_success:
            detail = response.text[:ERROR_BODY_PREVIEW]
            message = f"Backend error: {response.status_code} {response.reason_phrase} for {path}"
            if detail:
                message = f"{message}: {detail}"
            raise BackendError(response.status_code, message)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise BackendError(
                None,
                f"Backend returned non-JSON response for {path}: "
                f"{response.text[:ERROR_BODY_PREVIEW]}",
            )
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(None, f"Backend returned invalid JSON for {path}") from exc


__all__ = [
    "API_KEY_HEADER",
    "BackendClient",
    "BackendError",
    "map_backend_error",
]
