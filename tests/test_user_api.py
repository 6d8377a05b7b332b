import httpx
import pytest

from admin_gateway.services.user_api import (
    DownstreamError,
    DownstreamResponseError,
    DownstreamTimeoutError,
)


async def test_request_prefixes_path_and_adds_service_token(api, user_service):
    user_service.on("GET", "/api/files/admin/storage/abc", json={"storageUsed": 1})

    body = await api.request("get", "/admin/storage/abc")

    assert body == {"storageUsed": 1}
    (call,) = user_service.calls
    assert str(call.url) == "http://users.test/api/files/admin/storage/abc"
    assert call.headers["Authorization"] == "Bearer svc-token"


async def test_error_without_message_uses_fallback(api, user_service):
    user_service.on("GET", "/api/files/x", reply=httpx.Response(502, text="Bad Gateway"))

    with pytest.raises(DownstreamError) as exc_info:
        await api.request("get", "/x")

    assert exc_info.value.message == "Failed to communicate with user backend"
    assert exc_info.value.status_code == 502


async def test_malformed_success_body(api, user_service):
    user_service.on("GET", "/api/files/x", reply=httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(DownstreamResponseError):
        await api.request("get", "/x")


async def test_non_object_json_is_malformed(api, user_service):
    user_service.on("GET", "/api/files/x", json=["not", "an", "object"])

    with pytest.raises(DownstreamResponseError):
        await api.request("get", "/x")


async def test_timeout_is_its_own_kind(api, user_service):
    def _hang(request):
        raise httpx.ConnectTimeout("slow", request=request)

    user_service.on("GET", "/api/files/x", reply=_hang)

    with pytest.raises(DownstreamTimeoutError) as exc_info:
        await api.request("get", "/x")

    assert exc_info.value.message == "User service timed out"


async def test_connection_refused(api, user_service):
    def _refuse(request):
        raise httpx.ConnectError("refused", request=request)

    user_service.on("GET", "/api/files/x", reply=_refuse)

    with pytest.raises(DownstreamError) as exc_info:
        await api.request("get", "/x")

    assert not isinstance(exc_info.value, DownstreamTimeoutError)
    assert exc_info.value.message == "Failed to communicate with user backend"
