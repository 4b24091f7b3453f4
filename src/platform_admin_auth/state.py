"""Mutable session state shared between the caller and the auth state machine.

The caller owns a SessionState for the lifetime of one invocation. The
authentication code only ever fills in fields; it never resets them, so a
second ``get_tokens`` call treats whatever is already set as authoritative.
Concurrent sessions must each use their own instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

from .config import DEFAULT_CONFIG, DeploymentType


def is_valid_url(value: str | None) -> bool:
    """Return True when value is an absolute http(s) URL."""
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass
class SessionState:
    """Connection and credential state for one tenant session.

    Attributes:
        host: Tenant base URL, or a unique substring of a saved profile's URL.
        realm: Current realm; defaulted from the deployment type once known.
        username: Admin username for the journey flow.
        password: Admin password for the journey flow.
        service_account_id: Service account id for the JWT-bearer grant.
        service_account_jwk: Private JWK (dict) used to sign the assertion.
        deployment_type: Detected deployment flavor; set at most once.
        cookie_name: Session cookie name reported by the server.
        cookie_value: Session token obtained from the journey.
        bearer_token: OAuth2 access token.
        use_bearer_token_for_am_apis: Call AM APIs with the bearer token.
        am_version: Semantic version of the platform.
        admin_client_id: OAuth2 admin client for this session.
        authentication_service: Optional journey name to authenticate with.
        authentication_header_overrides: Extra headers for journey requests.
        connection_profiles_path: Override for the connection profile file.
    """

    host: str | None = None
    realm: str | None = None
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    service_account_id: str | None = None
    service_account_jwk: dict[str, Any] | None = field(default=None, repr=False)
    deployment_type: DeploymentType | None = None
    cookie_name: str | None = None
    cookie_value: str | None = field(default=None, repr=False)
    bearer_token: str | None = field(default=None, repr=False)
    use_bearer_token_for_am_apis: bool = False
    am_version: str | None = None
    admin_client_id: str = DEFAULT_CONFIG.cloud_admin_client_id
    authentication_service: str | None = None
    authentication_header_overrides: dict[str, str] = field(default_factory=dict)
    connection_profiles_path: str | None = None

    def has_service_account(self) -> bool:
        return bool(self.service_account_id and self.service_account_jwk)

    def has_user_credentials(self) -> bool:
        return bool(self.username and self.password)

    def has_any_credentials(self) -> bool:
        """True when any credential field was supplied by the caller."""
        return (
            self.username is not None
            or self.password is not None
            or bool(self.service_account_id)
            or bool(self.service_account_jwk)
        )

    def is_authenticated(self) -> bool:
        """A session cookie, or a bearer token while in bearer mode."""
        return bool(self.cookie_value) or (
            self.use_bearer_token_for_am_apis and bool(self.bearer_token)
        )


__all__: list[str] = ["SessionState", "is_valid_url"]
