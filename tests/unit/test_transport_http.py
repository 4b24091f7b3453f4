"""Tests for the httpx platform transport."""

from __future__ import annotations

import base64
import json
from collections.abc import Callable
from urllib.parse import parse_qs

import httpx
import pytest

from platform_admin_auth.exceptions import (
    ConfigurationError,
    PlatformApiError,
    PlatformConnectionError,
)
from platform_admin_auth.state import SessionState
from platform_admin_auth.transport.http import HttpxPlatformTransport, get_realm_path

from ..fakes import COOKIE_NAME, HOST

Handler = Callable[[httpx.Request], httpx.Response]


class Recorder:
    """Records requests and answers them with a fixed handler."""

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_transport(handler: Handler) -> tuple[HttpxPlatformTransport, Recorder]:
    recorder = Recorder(handler)
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return HttpxPlatformTransport(client), recorder


class TestGetRealmPath:
    @pytest.mark.parametrize(
        ("realm", "expected"),
        [
            ("/", "/realms/root"),
            (None, "/realms/root"),
            ("root", "/realms/root"),
            ("alpha", "/realms/root/realms/alpha"),
            ("/alpha/sub", "/realms/root/realms/alpha/realms/sub"),
        ],
    )
    def test_paths(self, realm: str | None, expected: str) -> None:
        assert get_realm_path(realm) == expected


class TestStep:
    @pytest.mark.asyncio
    async def test_first_step(self, state: SessionState) -> None:
        transport, recorder = make_transport(
            lambda r: httpx.Response(200, json={"tokenId": "abc123"})
        )

        data = await transport.step(
            state, {}, headers={"X-OpenAM-Username": "admin"}
        )

        assert data == {"tokenId": "abc123"}
        request = recorder.last
        assert request.method == "POST"
        assert str(request.url) == f"{HOST}/json/realms/root/authenticate"
        assert request.headers["Accept-API-Version"] == "resource=2.1, protocol=1.0"
        assert request.headers["X-OpenAM-Username"] == "admin"
        assert json.loads(request.content) == {}

    @pytest.mark.asyncio
    async def test_service_realm_and_overrides(self, state: SessionState) -> None:
        state.authentication_header_overrides = {"X-Tenant-Hint": "blue"}
        transport, recorder = make_transport(
            lambda r: httpx.Response(200, json={"authId": "a", "callbacks": []})
        )

        await transport.step(state, {"authId": "a"}, realm="alpha", service="AdminLogin")

        request = recorder.last
        assert request.url.path == "/am/json/realms/root/realms/alpha/authenticate"
        assert request.url.params["authIndexType"] == "service"
        assert request.url.params["authIndexValue"] == "AdminLogin"
        assert request.headers["X-Tenant-Hint"] == "blue"
        assert json.loads(request.content) == {"authId": "a"}

    @pytest.mark.asyncio
    async def test_no_service_no_params(self, state: SessionState) -> None:
        transport, recorder = make_transport(lambda r: httpx.Response(200, json={}))

        await transport.step(state, {})

        assert "authIndexType" not in recorder.last.url.params

    @pytest.mark.asyncio
    async def test_error_status(self, state: SessionState) -> None:
        transport, _ = make_transport(
            lambda r: httpx.Response(
                401, json={"code": 401, "message": "Login failure"}
            )
        )

        with pytest.raises(PlatformApiError) as exc_info:
            await transport.step(state, {})

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Login failure"

    @pytest.mark.asyncio
    async def test_connection_error(self, state: SessionState) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport, _ = make_transport(fail)

        with pytest.raises(PlatformConnectionError):
            await transport.step(state, {})

    @pytest.mark.asyncio
    async def test_no_host(self) -> None:
        transport, recorder = make_transport(lambda r: httpx.Response(200, json={}))

        with pytest.raises(ConfigurationError):
            await transport.step(SessionState(), {})
        assert recorder.requests == []


class TestOAuth2Endpoints:
    @pytest.mark.asyncio
    async def test_authorize_does_not_follow_redirect(self, state: SessionState) -> None:
        state.cookie_name = COOKIE_NAME
        state.cookie_value = "session-token"
        location = "https://tenant.example.com/platform/appAuthHelperRedirect.html?code=abc"
        transport, recorder = make_transport(
            lambda r: httpx.Response(302, headers={"Location": location})
        )

        response = await transport.authorize(
            state,
            {"client_id": "idmAdminClient", "decision": "allow"},
            headers={COOKIE_NAME: "session-token"},
        )

        assert response.status == 302
        assert response.is_redirect
        assert response.location == location
        assert len(recorder.requests) == 1
        request = recorder.last
        assert str(request.url) == f"{HOST}/oauth2/authorize"
        assert request.headers[COOKIE_NAME] == "session-token"
        assert request.headers["Cookie"] == f"{COOKIE_NAME}=session-token"
        assert parse_qs(request.content.decode()) == {
            "client_id": ["idmAdminClient"],
            "decision": ["allow"],
        }

    @pytest.mark.asyncio
    async def test_authorize_error_status_is_returned(self, state: SessionState) -> None:
        transport, _ = make_transport(
            lambda r: httpx.Response(400, json={"error": "invalid_client"})
        )

        response = await transport.authorize(state, {})

        assert response.status == 400
        assert response.data == {"error": "invalid_client"}

    @pytest.mark.asyncio
    async def test_access_token_basic_auth(self, state: SessionState) -> None:
        transport, recorder = make_transport(
            lambda r: httpx.Response(200, json={"access_token": "at"})
        )

        response = await transport.access_token(
            state, {"grant_type": "authorization_code"}, auth=("idmAdminClient", "doesnotmatter")
        )

        assert response.data == {"access_token": "at"}
        expected = base64.b64encode(b"idmAdminClient:doesnotmatter").decode()
        assert recorder.last.headers["Authorization"] == f"Basic {expected}"
        assert str(recorder.last.url) == f"{HOST}/oauth2/access_token"

    @pytest.mark.asyncio
    async def test_access_token_error(self, state: SessionState) -> None:
        transport, recorder = make_transport(
            lambda r: httpx.Response(
                400, json={"error": "invalid_grant", "error_description": "expired"}
            )
        )

        with pytest.raises(PlatformApiError, match="expired"):
            await transport.access_token(state, {"grant_type": "x"})
        assert "Authorization" not in recorder.last.headers


class TestServerInfo:
    @pytest.mark.asyncio
    async def test_cookie_name(self, state: SessionState) -> None:
        transport, recorder = make_transport(
            lambda r: httpx.Response(200, json={"cookieName": "6ac6499e9da2071"})
        )

        info = await transport.get_server_info(state)

        assert info.cookie_name == "6ac6499e9da2071"
        assert recorder.last.url.path == "/am/json/serverinfo/*"
        assert recorder.last.headers["Accept-API-Version"] == "resource=1.1"

    @pytest.mark.asyncio
    async def test_missing_cookie_name(self, state: SessionState) -> None:
        transport, _ = make_transport(lambda r: httpx.Response(200, json={}))

        with pytest.raises(PlatformApiError):
            await transport.get_server_info(state)

    @pytest.mark.asyncio
    async def test_version_info_with_bearer(self, state: SessionState) -> None:
        state.bearer_token = "bt"
        state.use_bearer_token_for_am_apis = True
        transport, recorder = make_transport(
            lambda r: httpx.Response(
                200,
                json={"version": "7.3.0", "fullVersion": "7.3.0 Build abc"},
            )
        )

        info = await transport.get_server_version_info(state)

        assert info.version == "7.3.0"
        assert info.full_version == "7.3.0 Build abc"
        assert recorder.last.headers["Authorization"] == "Bearer bt"
        assert recorder.last.url.path == "/am/json/serverinfo/version"


class TestServiceAccount:
    @pytest.mark.asyncio
    async def test_fetch_from_idm(self, state: SessionState) -> None:
        state.bearer_token = "bt"
        transport, recorder = make_transport(
            lambda r: httpx.Response(200, json={"_id": "sa-1234", "name": "automation"})
        )

        account = await transport.get_service_account(state, "sa-1234")

        assert account["name"] == "automation"
        assert (
            str(recorder.last.url)
            == "https://tenant.example.com/openidm/managed/svcacct/sa-1234"
        )
        assert recorder.last.headers["Authorization"] == "Bearer bt"


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self) -> None:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200))
        )

        async with HttpxPlatformTransport(client):
            pass

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self) -> None:
        transport = HttpxPlatformTransport()

        async with transport:
            pass

        assert transport._client.is_closed
