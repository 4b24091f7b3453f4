"""Session establishment: credentials, deployment detection and tokens.

``get_tokens`` is the single catch-all boundary of this package. It
sequences credential resolution, cookie name lookup, service-account or
user authentication, deployment/realm/version detection and bearer token
acquisition, and reports the outcome as a boolean. Every step is awaited
in order because each depends on state filled in by the previous one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .config import (
    DEFAULT_CONFIG,
    DEFAULT_REALM_KEY,
    DEPLOYMENT_TYPE_REALM_MAP,
    DeploymentType,
    PlatformAuthConfig,
)
from .exceptions import ConfigurationError, PlatformApiError, ServiceAccountAuthError
from .journey.driver import authenticate
from .oauth2.deployment import determine_deployment_type
from .oauth2.jose import create_signed_jwt_token
from .oauth2.tokens import (
    get_access_token_for_service_account,
    get_access_token_for_user,
)
from .observability import AuthTracing
from .profiles.store import JsonConnectionProfileStore
from .state import is_valid_url
from .version import get_semantic_version

if TYPE_CHECKING:
    from .ports import (
        IChallengeAnswerer,
        IConnectionProfileSource,
        IJwtSigner,
        IPlatformTransport,
    )
    from .profiles.models import ConnectionProfile
    from .state import SessionState

logger = logging.getLogger(__name__)

BEARER_DEPLOYMENT_TYPES = (DeploymentType.CLOUD, DeploymentType.FORGEOPS)


async def determine_cookie_name(
    state: SessionState, transport: IPlatformTransport
) -> str:
    info = await transport.get_server_info(state)
    logger.debug(f"cookieName={info.cookie_name}")
    return info.cookie_name


def determine_default_realm(state: SessionState) -> None:
    """Default the realm from the deployment type unless one was chosen."""
    if state.deployment_type is None:
        return
    if not state.realm or state.realm == DEFAULT_REALM_KEY:
        state.realm = DEPLOYMENT_TYPE_REALM_MAP[state.deployment_type]


async def determine_deployment_type_realm_and_version(
    state: SessionState,
    transport: IPlatformTransport,
    config: PlatformAuthConfig = DEFAULT_CONFIG,
) -> None:
    """Fill in deployment type, default realm and AM version if still unset."""
    if state.deployment_type is None:
        state.deployment_type = await determine_deployment_type(
            state, transport, config
        )
    determine_default_realm(state)
    logger.debug(f"realm={state.realm}, type={state.deployment_type.value}")

    if state.am_version is None:
        version_info = await transport.get_server_version_info(state)
        logger.debug(f"Full version: {version_info.full_version}")
        state.am_version = get_semantic_version(version_info)


async def get_logged_in_subject(
    state: SessionState, transport: IPlatformTransport
) -> str:
    """Human-readable description of who the session is logged in as."""
    if state.use_bearer_token_for_am_apis and state.service_account_id:
        account = await transport.get_service_account(state, state.service_account_id)
        return f"service account {account.get('name')} [{state.service_account_id}]"
    return f"user {state.username}"


def _apply_profile(state: SessionState, profile: ConnectionProfile) -> None:
    state.host = profile.tenant
    state.username = profile.username
    state.password = profile.password
    state.authentication_service = profile.authentication_service
    state.authentication_header_overrides = dict(
        profile.authentication_header_overrides
    )
    state.service_account_id = profile.svcacct_id
    state.service_account_jwk = profile.svcacct_jwk


def _describe(error: Exception) -> str:
    if isinstance(error, PlatformApiError):
        return error.detail
    return str(error)


async def _resolve_credentials(
    state: SessionState, profiles: IConnectionProfileSource
) -> bool:
    """Load credentials and the full tenant URL from a saved profile if needed."""
    if not state.has_any_credentials():
        profile = await profiles.get_connection_profile(state)
        if profile is None:
            return False
        _apply_profile(state, profile)

    if not is_valid_url(state.host):
        profile = await profiles.get_connection_profile(state)
        if profile is None:
            return False
        state.host = profile.tenant
        if not is_valid_url(state.host):
            raise ConfigurationError(f"Host '{state.host}' is not a valid URL")
    return True


async def _login_with_service_account(
    state: SessionState,
    transport: IPlatformTransport,
    config: PlatformAuthConfig,
    signer: IJwtSigner,
) -> None:
    logger.debug(f"Authenticating with service account {state.service_account_id}")
    try:
        token = await get_access_token_for_service_account(
            state, transport, config, signer
        )
    except Exception as e:
        raise ServiceAccountAuthError(
            f"Service account login error: {_describe(e)}"
        ) from e
    state.bearer_token = token.access_token
    state.use_bearer_token_for_am_apis = True
    await determine_deployment_type_realm_and_version(state, transport, config)


async def _login_with_user(
    state: SessionState,
    transport: IPlatformTransport,
    config: PlatformAuthConfig,
    answerer: IChallengeAnswerer | None,
) -> None:
    logger.debug(f"Authenticating with user account {state.username}")
    token_id = await authenticate(state, transport, answerer=answerer, config=config)
    if token_id:
        state.cookie_value = token_id
    await determine_deployment_type_realm_and_version(state, transport, config)
    if (
        state.cookie_value
        and not state.bearer_token
        and state.deployment_type in BEARER_DEPLOYMENT_TYPES
    ):
        token = await get_access_token_for_user(state, transport, config)
        if token is not None:
            state.bearer_token = token.access_token


async def get_tokens(
    state: SessionState,
    transport: IPlatformTransport,
    *,
    profiles: IConnectionProfileSource | None = None,
    answerer: IChallengeAnswerer | None = None,
    config: PlatformAuthConfig = DEFAULT_CONFIG,
    signer: IJwtSigner = create_signed_jwt_token,
    force_login_as_user: bool = False,
) -> bool:
    """Establish an authenticated session.

    Never raises: every error is logged and turned into ``False``.

    Args:
        state: Caller-owned session state, filled in on success.
        transport: Platform transport.
        profiles: Source of saved credentials (JSON profile file by default).
        answerer: Answers one-time-code prompts (console prompt by default).
        config: Client, scope and budget configuration.
        signer: Signs service-account assertions.
        force_login_as_user: Use username/password even if a service
            account is configured.

    Returns:
        True if a session cookie, or a bearer token in bearer mode, was obtained.
    """
    if not state.host:
        logger.error("No host specified!")
        return False

    with AuthTracing.span("get_tokens", host=state.host) as span:
        try:
            if not await _resolve_credentials(
                state, profiles or JsonConnectionProfileStore()
            ):
                return False

            if not state.cookie_name:
                state.cookie_name = await determine_cookie_name(state, transport)

            if not force_login_as_user and state.has_service_account():
                await _login_with_service_account(state, transport, config, signer)
            elif state.has_user_credentials():
                await _login_with_user(state, transport, config, answerer)
            else:
                raise ConfigurationError("Incomplete or no credentials!")

            AuthTracing.set_session(span, state)
            if state.is_authenticated():
                subject = await get_logged_in_subject(state, transport)
                logger.info(
                    f"Connected to {state.host} [{state.realm or 'root'}] as {subject}"
                )
                AuthTracing.set_success(span)
                return True
        except Exception as error:
            logger.error(_describe(error))
            logger.debug("get_tokens failed", exc_info=error)
            AuthTracing.set_error(span, error)

    logger.debug("get_tokens: end without tokens")
    return False


class Authenticator:
    """Binds a session to its collaborators.

    Example:
        ```python
        state = SessionState(host="https://tenant.example.com/am",
                             username="admin", password="secret")
        async with HttpxPlatformTransport() as transport:
            ok = await Authenticator(state, transport).get_tokens()
        ```
    """

    def __init__(
        self,
        state: SessionState,
        transport: IPlatformTransport,
        *,
        profiles: IConnectionProfileSource | None = None,
        answerer: IChallengeAnswerer | None = None,
        config: PlatformAuthConfig = DEFAULT_CONFIG,
        signer: IJwtSigner = create_signed_jwt_token,
    ) -> None:
        self.state = state
        self.transport = transport
        self.profiles = profiles
        self.answerer = answerer
        self.config = config
        self.signer = signer

    async def get_tokens(self, force_login_as_user: bool = False) -> bool:
        """Establish the session; see :func:`get_tokens`."""
        return await get_tokens(
            self.state,
            self.transport,
            profiles=self.profiles,
            answerer=self.answerer,
            config=self.config,
            signer=self.signer,
            force_login_as_user=force_login_as_user,
        )


__all__: list[str] = [
    "determine_cookie_name",
    "determine_default_realm",
    "determine_deployment_type_realm_and_version",
    "get_logged_in_subject",
    "get_tokens",
    "Authenticator",
]
