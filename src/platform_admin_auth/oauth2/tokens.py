"""Bearer token acquisition.

Two independent exchanges:

- User flow: turn an established session cookie into an access token via
  the authorization code grant with PKCE. Best-effort, returns None on
  failure since cookie-only sessions remain usable.
- Service account: sign a JWT assertion and exchange it via the JWT-bearer
  grant. Failures propagate.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config import DEFAULT_CONFIG, DeploymentType, PlatformAuthConfig
from ..exceptions import ConfigurationError, ServiceAccountAuthError
from ..observability import AuthTracing
from ..ports import TokenResponse
from .authorize import build_authorization_form, extract_code, get_redirect_url
from .jose import create_service_account_payload, create_signed_jwt_token
from .pkce import PKCEData, create_pkce_data

if TYPE_CHECKING:
    from ..ports import IJwtSigner, IPlatformTransport
    from ..state import SessionState

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


async def get_auth_code(
    state: SessionState,
    transport: IPlatformTransport,
    *,
    pkce: PKCEData,
    redirect_url: str,
    config: PlatformAuthConfig = DEFAULT_CONFIG,
) -> str | None:
    """Request an authorization code for the session's admin client.

    Returns:
        The code from the redirect Location, or None.
    """
    form = build_authorization_form(
        state,
        client_id=state.admin_client_id,
        scope=config.scopes_for(state.deployment_type),
        pkce=pkce,
        redirect_url=redirect_url,
    )
    response = await transport.authorize(state, form)
    if response.status < 200 or response.status > 399:
        logger.error(
            f"Error getting auth code (status {response.status}); likely cause: "
            "mismatched parameters with OAuth client config"
        )
        return None
    code = extract_code(response.location)
    if code is None:
        logger.error("Auth code not found in authorize redirect.")
    return code


async def get_access_token_for_user(
    state: SessionState,
    transport: IPlatformTransport,
    config: PlatformAuthConfig = DEFAULT_CONFIG,
) -> TokenResponse | None:
    """Exchange the session cookie for an access token.

    Cloud tenants authenticate the exchange with the admin client id and
    the placeholder password. ForgeOps uses a public client exchange.

    Args:
        state: Session with host, cookie and deployment type.
        transport: Platform transport.
        config: Client and scope configuration.

    Returns:
        TokenResponse, or None when no code or token could be obtained.
    """
    if not state.host:
        raise ConfigurationError("A host is required to request an access token")

    with AuthTracing.span("user_token_exchange", host=state.host) as span:
        try:
            pkce = create_pkce_data()
            redirect_url = get_redirect_url(state.host, config)
            code = await get_auth_code(
                state, transport, pkce=pkce, redirect_url=redirect_url, config=config
            )
            if code is None:
                return None

            form = {
                "redirect_uri": redirect_url,
                "grant_type": "authorization_code",
                "code": code,
                "code_verifier": pkce.code_verifier,
            }
            auth: tuple[str, str] | None = None
            if state.deployment_type == DeploymentType.CLOUD:
                auth = (state.admin_client_id, config.admin_client_password)
            else:
                form = {"client_id": state.admin_client_id, **form}

            response = await transport.access_token(state, form, auth=auth)
            if isinstance(response.data, dict) and "access_token" in response.data:
                AuthTracing.set_success(span)
                return TokenResponse.from_dict(response.data)
            logger.error("No access token in response.")
        except Exception as e:
            logger.debug(f"Error getting access token for user: {e}")
            AuthTracing.set_error(span, e)
    return None


async def get_access_token_for_service_account(
    state: SessionState,
    transport: IPlatformTransport,
    config: PlatformAuthConfig = DEFAULT_CONFIG,
    signer: IJwtSigner = create_signed_jwt_token,
) -> TokenResponse:
    """Exchange a signed service-account assertion for an access token.

    A new assertion is signed for every call.

    Args:
        state: Session with host, service account id and JWK.
        transport: Platform transport.
        config: Scope and lifetime configuration.
        signer: Signs the claims with the JWK.

    Returns:
        TokenResponse with the access token.

    Raises:
        ConfigurationError: If the session lacks host or service account.
        ServiceAccountAuthError: If the response carries no access token.
        PlatformApiError: If the token endpoint returns an error status.
    """
    if not state.host or not state.service_account_id or not state.service_account_jwk:
        raise ConfigurationError("Service account id and JWK are required")

    with AuthTracing.span("service_account_token_exchange", host=state.host) as span:
        payload = create_service_account_payload(
            state.service_account_id, state.host, config.jwt_lifetime
        )
        logger.debug(
            f"Service account assertion: iss={payload['iss']}, aud={payload['aud']}, "
            f"exp={payload['exp']}"
        )
        assertion = signer(payload, state.service_account_jwk)
        form = {
            "assertion": assertion,
            "client_id": config.service_account_client_id,
            "grant_type": JWT_BEARER_GRANT,
            "scope": config.service_account_scopes,
        }
        response = await transport.access_token(state, form)
        if not isinstance(response.data, dict) or "access_token" not in response.data:
            raise ServiceAccountAuthError("No access token in response.")
        AuthTracing.set_success(span)
        return TokenResponse.from_dict(response.data)


__all__: list[str] = [
    "JWT_BEARER_GRANT",
    "get_auth_code",
    "get_access_token_for_user",
    "get_access_token_for_service_account",
]
