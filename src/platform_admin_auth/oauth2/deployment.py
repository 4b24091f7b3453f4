"""Deployment type detection by authorization redirect probing.

The platform exposes no unauthenticated endpoint that tells cloud,
ForgeOps and classic deployments apart. What differs is which admin
OAuth2 client is registered: an authorize request for a registered client
answers with a redirect carrying ``code=``, an unregistered one does not.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config import DEFAULT_CONFIG, DeploymentType, PlatformAuthConfig
from ..exceptions import ConfigurationError
from ..observability import AuthTracing
from .authorize import (
    build_authorization_form,
    get_redirect_url,
    location_has_code,
    session_headers,
)
from .pkce import PKCEData, create_pkce_data

if TYPE_CHECKING:
    from ..ports import IPlatformTransport
    from ..state import SessionState

logger = logging.getLogger(__name__)


async def _client_authorizes(
    state: SessionState,
    transport: IPlatformTransport,
    *,
    client_id: str,
    scope: str,
    pkce: PKCEData,
    redirect_url: str,
) -> bool:
    """Return True when the authorize request redirects with a code.

    Any transport failure is a negative signal.
    """
    form = build_authorization_form(
        state,
        client_id=client_id,
        scope=scope,
        pkce=pkce,
        redirect_url=redirect_url,
    )
    try:
        response = await transport.authorize(
            state, form, headers=session_headers(state)
        )
    except Exception as e:
        logger.debug(f"Authorize check for client {client_id} failed: {e}")
        return False
    logger.debug(
        f"Authorize check for client {client_id}: status={response.status}"
    )
    return response.is_redirect and location_has_code(response.location)


async def determine_deployment_type(
    state: SessionState,
    transport: IPlatformTransport,
    config: PlatformAuthConfig = DEFAULT_CONFIG,
) -> DeploymentType:
    """Classify the tenant as cloud, ForgeOps or classic.

    Already-known deployment types are returned without a request. Service
    accounts only exist on cloud tenants, so bearer-mode sessions are cloud.
    The session's admin client id is set to the matching client from
    config, the cloud client for bearer-mode sessions. Failed authorize
    requests never raise.

    Args:
        state: Session with host and, usually, a session cookie.
        transport: Platform transport.
        config: Client ids and scope sets to try.

    Returns:
        The detected deployment type.
    """
    if state.deployment_type is not None:
        return state.deployment_type

    if state.use_bearer_token_for_am_apis:
        state.admin_client_id = config.cloud_admin_client_id
        return DeploymentType.CLOUD

    if not state.host:
        raise ConfigurationError("A host is required to detect the deployment type")
    pkce = create_pkce_data()
    redirect_url = get_redirect_url(state.host, config)

    with AuthTracing.span("detect_deployment", host=state.host) as span:
        if await _client_authorizes(
            state,
            transport,
            client_id=config.cloud_admin_client_id,
            scope=config.cloud_admin_scopes,
            pkce=pkce,
            redirect_url=redirect_url,
        ):
            logger.info("Cloud deployment detected.")
            state.admin_client_id = config.cloud_admin_client_id
            deployment_type = DeploymentType.CLOUD
        elif await _client_authorizes(
            state,
            transport,
            client_id=config.forgeops_admin_client_id,
            scope=config.forgeops_admin_scopes,
            pkce=pkce,
            redirect_url=redirect_url,
        ):
            logger.info("ForgeOps deployment detected.")
            state.admin_client_id = config.forgeops_admin_client_id
            deployment_type = DeploymentType.FORGEOPS
        else:
            logger.info("Classic deployment detected.")
            deployment_type = DeploymentType.CLASSIC
        span.set_attribute("auth.deployment_type", deployment_type.value)

    return deployment_type


__all__: list[str] = ["determine_deployment_type"]
