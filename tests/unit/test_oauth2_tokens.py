"""Tests for bearer token acquisition."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from platform_admin_auth.config import DeploymentType
from platform_admin_auth.exceptions import (
    ConfigurationError,
    PlatformApiError,
    ServiceAccountAuthError,
)
from platform_admin_auth.oauth2.pkce import create_pkce_data, generate_pkce_challenge
from platform_admin_auth.oauth2.tokens import (
    JWT_BEARER_GRANT,
    get_access_token_for_service_account,
    get_access_token_for_user,
    get_auth_code,
)
from platform_admin_auth.ports import HttpResponse, TokenResponse
from platform_admin_auth.state import SessionState

from ..fakes import COOKIE_NAME, FakeTransport, redirect

REDIRECT_URL = "https://tenant.example.com/platform/appAuthHelperRedirect.html"


@pytest.fixture
def cloud_state(state: SessionState) -> SessionState:
    state.cookie_name = COOKIE_NAME
    state.cookie_value = "session-token"
    state.deployment_type = DeploymentType.CLOUD
    return state


class TestGetAuthCode:
    @pytest.mark.asyncio
    async def test_code_from_location(
        self, cloud_state: SessionState, transport: FakeTransport
    ) -> None:
        transport.authorize.return_value = redirect(f"{REDIRECT_URL}?code=xyz&iss=a")

        code = await get_auth_code(
            cloud_state, transport, pkce=create_pkce_data(), redirect_url=REDIRECT_URL
        )

        assert code == "xyz"
        _, form = transport.authorize.await_args.args
        assert form["client_id"] == "idmAdminClient"
        assert form["scope"] == "openid fr:idm:* fr:idc:esv:*"

    @pytest.mark.asyncio
    async def test_error_status(
        self, cloud_state: SessionState, transport: FakeTransport
    ) -> None:
        transport.authorize.return_value = HttpResponse(status=400)

        assert (
            await get_auth_code(
                cloud_state,
                transport,
                pkce=create_pkce_data(),
                redirect_url=REDIRECT_URL,
            )
            is None
        )

    @pytest.mark.asyncio
    async def test_redirect_without_code(
        self, cloud_state: SessionState, transport: FakeTransport
    ) -> None:
        transport.authorize.return_value = redirect(f"{REDIRECT_URL}?error=denied")

        assert (
            await get_auth_code(
                cloud_state,
                transport,
                pkce=create_pkce_data(),
                redirect_url=REDIRECT_URL,
            )
            is None
        )


class TestGetAccessTokenForUser:
    @pytest.mark.asyncio
    async def test_cloud_uses_basic_auth(
        self, cloud_state: SessionState, transport: FakeTransport
    ) -> None:
        transport.authorize.return_value = redirect(f"{REDIRECT_URL}?code=xyz")

        token = await get_access_token_for_user(cloud_state, transport)

        assert isinstance(token, TokenResponse)
        assert token.access_token == "access-token"
        assert token.expires_in == 3599
        _, form = transport.access_token.await_args.args
        assert transport.access_token.await_args.kwargs["auth"] == (
            "idmAdminClient",
            "doesnotmatter",
        )
        assert "client_id" not in form
        assert form["grant_type"] == "authorization_code"
        assert form["code"] == "xyz"
        assert form["redirect_uri"] == REDIRECT_URL
        assert len(form["code_verifier"]) == 43

    @pytest.mark.asyncio
    async def test_forgeops_sends_client_id(
        self, cloud_state: SessionState, transport: FakeTransport
    ) -> None:
        cloud_state.deployment_type = DeploymentType.FORGEOPS
        cloud_state.admin_client_id = "idm-admin-ui"
        transport.authorize.return_value = redirect(f"{REDIRECT_URL}?code=xyz")

        token = await get_access_token_for_user(cloud_state, transport)

        assert token is not None
        _, form = transport.authorize.await_args.args
        assert form["client_id"] == "idm-admin-ui"
        assert form["scope"] == "openid fr:idm:*"
        _, token_form = transport.access_token.await_args.args
        assert token_form["client_id"] == "idm-admin-ui"
        assert transport.access_token.await_args.kwargs["auth"] is None

    @pytest.mark.asyncio
    async def test_verifier_matches_challenge(
        self, cloud_state: SessionState, transport: FakeTransport
    ) -> None:
        transport.authorize.return_value = redirect(f"{REDIRECT_URL}?code=xyz")

        await get_access_token_for_user(cloud_state, transport)

        _, authorize_form = transport.authorize.await_args.args
        _, token_form = transport.access_token.await_args.args
        assert generate_pkce_challenge(token_form["code_verifier"]) == (
            authorize_form["code_challenge"]
        )

    @pytest.mark.asyncio
    async def test_no_code_returns_none(
        self, cloud_state: SessionState, transport: FakeTransport
    ) -> None:
        assert await get_access_token_for_user(cloud_state, transport) is None
        transport.access_token.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_token_error_returns_none(
        self, cloud_state: SessionState, transport: FakeTransport
    ) -> None:
        transport.authorize.return_value = redirect(f"{REDIRECT_URL}?code=xyz")
        transport.access_token.side_effect = PlatformApiError(
            400, "https://h/oauth2/access_token", {"error": "invalid_grant"}
        )

        assert await get_access_token_for_user(cloud_state, transport) is None

    @pytest.mark.asyncio
    async def test_missing_access_token_returns_none(
        self, cloud_state: SessionState, transport: FakeTransport
    ) -> None:
        transport.authorize.return_value = redirect(f"{REDIRECT_URL}?code=xyz")
        transport.access_token.return_value = HttpResponse(status=200, data={})

        assert await get_access_token_for_user(cloud_state, transport) is None

    @pytest.mark.asyncio
    async def test_no_host(self, transport: FakeTransport) -> None:
        with pytest.raises(ConfigurationError):
            await get_access_token_for_user(SessionState(), transport)


class TestGetAccessTokenForServiceAccount:
    @pytest.mark.asyncio
    async def test_jwt_bearer_grant(
        self, service_account_state: SessionState, transport: FakeTransport
    ) -> None:
        signer = MagicMock(return_value="signed-assertion")

        token = await get_access_token_for_service_account(
            service_account_state, transport, signer=signer
        )

        assert token.access_token == "access-token"
        payload, jwk = signer.call_args.args
        assert payload["iss"] == "sa-1234"
        assert payload["aud"] == "https://tenant.example.com:443/am/oauth2/access_token"
        assert jwk is service_account_state.service_account_jwk
        _, form = transport.access_token.await_args.args
        assert form == {
            "assertion": "signed-assertion",
            "client_id": "service-account",
            "grant_type": JWT_BEARER_GRANT,
            "scope": "fr:am:* fr:idm:* fr:idc:esv:*",
        }

    @pytest.mark.asyncio
    async def test_fresh_assertion_each_call(
        self, service_account_state: SessionState, transport: FakeTransport
    ) -> None:
        payloads: list[dict[str, Any]] = []

        def signer(payload: dict[str, Any], jwk: dict[str, Any]) -> str:
            payloads.append(payload)
            return "signed"

        await get_access_token_for_service_account(
            service_account_state, transport, signer=signer
        )
        await get_access_token_for_service_account(
            service_account_state, transport, signer=signer
        )

        assert payloads[0]["jti"] != payloads[1]["jti"]

    @pytest.mark.asyncio
    async def test_real_signature(
        self, service_account_state: SessionState, transport: FakeTransport
    ) -> None:
        token = await get_access_token_for_service_account(
            service_account_state, transport
        )

        assert token.access_token == "access-token"
        _, form = transport.access_token.await_args.args
        assert form["assertion"].count(".") == 2

    @pytest.mark.asyncio
    async def test_missing_access_token_raises(
        self, service_account_state: SessionState, transport: FakeTransport
    ) -> None:
        transport.access_token.return_value = HttpResponse(status=200, data={})

        with pytest.raises(ServiceAccountAuthError, match="No access token"):
            await get_access_token_for_service_account(
                service_account_state, transport, signer=MagicMock(return_value="s")
            )

    @pytest.mark.asyncio
    async def test_token_endpoint_error_propagates(
        self, service_account_state: SessionState, transport: FakeTransport
    ) -> None:
        transport.access_token.side_effect = PlatformApiError(
            400,
            "https://h/oauth2/access_token",
            {"error_description": "Invalid assertion"},
        )

        with pytest.raises(PlatformApiError, match="Invalid assertion"):
            await get_access_token_for_service_account(
                service_account_state, transport, signer=MagicMock(return_value="s")
            )

    @pytest.mark.asyncio
    async def test_missing_jwk(self, transport: FakeTransport) -> None:
        state = SessionState(host="https://h/am", service_account_id="sa")

        with pytest.raises(ConfigurationError):
            await get_access_token_for_service_account(state, transport)
