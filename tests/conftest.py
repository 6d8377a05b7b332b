"""Shared fixtures: a fake user/file service behind ``httpx.MockTransport``."""
from __future__ import annotations

from typing import Any, Callable, Optional, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from admin_gateway.config import settings
from admin_gateway.main import app
from admin_gateway.models.auth import AdminIdentity
from admin_gateway.services.auth import create_token
from admin_gateway.services.user_api import UserApiClient, get_user_api

USER_A = "64b7f0c2a1b2c3d4e5f60718"
USER_B = "64b7f0c2a1b2c3d4e5f60719"
FILE_ID = "650a1b2c3d4e5f6071829abc"
BAD_IDS = ["not-an-id", "64b7f0c2a1b2c3d4e5f6071", "64b7f0c2a1b2c3d4e5f6071z"]

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeUserService:
    """Records every request and answers from a (method, path) table."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Reply] = {}

    def on(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        status_code: int = 200,
        reply: Optional[Reply] = None,
    ) -> None:
        self._routes[(method.upper(), path)] = reply or (
            lambda _request: httpx.Response(status_code, json=json)
        )

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [c for c in self.calls if c.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        reply = self._routes.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(reply):
            return reply(request)
        return reply


@pytest.fixture(autouse=True)
def _audit_to_tmp(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "AUDIT_LOG_FILE", str(tmp_path / "audit.log"))


@pytest.fixture
def user_service() -> FakeUserService:
    return FakeUserService()


@pytest.fixture
async def api(user_service):
    api_client = UserApiClient(
        "http://users.test",
        "svc-token",
        timeout=5,
        transport=httpx.MockTransport(user_service),
    )
    yield api_client
    await api_client.aclose()


@pytest.fixture
def client(user_service):
    async def _override():
        fake_api = UserApiClient(
            "http://users.test",
            "svc-token",
            timeout=5,
            transport=httpx.MockTransport(user_service),
        )
        try:
            yield fake_api
        finally:
            await fake_api.aclose()

    app.dependency_overrides[get_user_api] = _override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def bearer(role: Optional[str] = "super-admin", **claims: Any) -> dict[str, str]:
    identity = AdminIdentity(id="a1", email="ops@example.com", role=role)
    token = create_token(identity, **claims)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def super_admin_headers() -> dict[str, str]:
    return bearer("super-admin")


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return bearer("admin")
