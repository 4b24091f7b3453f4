"""Tests for session state."""

from __future__ import annotations

import pytest

from platform_admin_auth.state import SessionState, is_valid_url


class TestIsValidUrl:
    @pytest.mark.parametrize(
        "value",
        ["https://tenant.example.com/am", "http://localhost:8080/am"],
    )
    def test_valid(self, value: str) -> None:
        assert is_valid_url(value) is True

    @pytest.mark.parametrize("value", [None, "", "tenant", "ftp://host/am", "https://"])
    def test_invalid(self, value: str | None) -> None:
        assert is_valid_url(value) is False


class TestSessionState:
    def test_defaults(self) -> None:
        state = SessionState()
        assert state.admin_client_id == "idmAdminClient"
        assert state.use_bearer_token_for_am_apis is False
        assert state.authentication_header_overrides == {}

    def test_secrets_not_in_repr(self) -> None:
        state = SessionState(
            password="hunter2", cookie_value="cookie-xyz", bearer_token="bearer-xyz"
        )
        text = repr(state)
        assert "hunter2" not in text
        assert "cookie-xyz" not in text
        assert "bearer-xyz" not in text

    def test_credentials(self) -> None:
        assert SessionState(username="u", password="p").has_user_credentials()
        assert not SessionState(username="u").has_user_credentials()
        assert SessionState(
            service_account_id="sa", service_account_jwk={"kty": "RSA"}
        ).has_service_account()
        assert not SessionState(service_account_id="sa").has_service_account()

    def test_has_any_credentials(self) -> None:
        assert not SessionState(host="h").has_any_credentials()
        assert SessionState(username="u").has_any_credentials()
        assert SessionState(password="").has_any_credentials()
        assert SessionState(service_account_id="sa").has_any_credentials()

    def test_is_authenticated(self) -> None:
        assert not SessionState().is_authenticated()
        assert SessionState(cookie_value="tok").is_authenticated()
        assert not SessionState(bearer_token="bt").is_authenticated()
        assert SessionState(
            bearer_token="bt", use_bearer_token_for_am_apis=True
        ).is_authenticated()
