"""Async client for the user/file service.

Thin wrapper around :class:`httpx.AsyncClient` that adds the service bearer
token, prefixes every endpoint with ``/api/files`` and turns any transport or
HTTP failure into a :class:`DownstreamError` carrying the message the user
service reported (when it reported one).
"""
from __future__ import annotations

from typing import Any, AsyncIterator, Optional

import httpx
from loguru import logger

from admin_gateway.config import settings

_API_PREFIX = "/api/files"
_FALLBACK_MESSAGE = "Failed to communicate with user backend"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DownstreamError(RuntimeError):
    """The user service failed or could not be reached."""

    def __init__(self, message: str = _FALLBACK_MESSAGE, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DownstreamTimeoutError(DownstreamError):
    """No response from the user service within ``USER_API_TIMEOUT``."""


class DownstreamResponseError(DownstreamError):
    """The user service answered 2xx but the body was not a JSON object."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class UserApiClient:
    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + _API_PREFIX,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        files: Optional[list[tuple[str, tuple[str, bytes, str]]]] = None,
    ) -> dict[str, Any]:
        """Send one call to ``/api/files{endpoint}`` and return the decoded body."""

        logger.debug("User API → {} {}", method.upper(), endpoint)
        try:
            resp = await self._client.request(
                method, endpoint, params=params, json=json, data=data, files=files
            )
        except httpx.TimeoutException as exc:
            logger.warning("User API timed out: {} {}", method.upper(), endpoint)
            raise DownstreamTimeoutError("User service timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("User API unreachable ({} {}): {}", method.upper(), endpoint, exc)
            raise DownstreamError() from exc

        if resp.is_error:
            message = _extract_message(resp) or _FALLBACK_MESSAGE
            logger.error(
                "User API {} {} → {}: {}", method.upper(), endpoint, resp.status_code, message
            )
            raise DownstreamError(message, status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError as exc:
            raise DownstreamResponseError(
                "Malformed response from user service", status_code=resp.status_code
            ) from exc
        if not isinstance(body, dict):
            raise DownstreamResponseError(
                "Malformed response from user service", status_code=resp.status_code
            )
        return body

    async def aclose(self) -> None:
        await self._client.aclose()


def _extract_message(resp: httpx.Response) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------

_shared: Optional[UserApiClient] = None


def build_client() -> UserApiClient:
    return UserApiClient(
        settings.USER_API_URL,
        settings.USER_API_TOKEN,
        timeout=settings.USER_API_TIMEOUT,
    )


async def get_user_api() -> AsyncIterator[UserApiClient]:
    """Yield the process‑wide client, creating it on first use."""
    global _shared  # noqa: PLW0603
    if _shared is None:
        _shared = build_client()
    yield _shared


async def close_user_api() -> None:
    global _shared  # noqa: PLW0603
    if _shared is not None:
        await _shared.aclose()
        _shared = None
