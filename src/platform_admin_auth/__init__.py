"""Platform Admin Auth

Session establishment for administering a multi-tenant identity platform's
access-management and identity-management APIs over REST.

Usage:
    ```python
    from platform_admin_auth import HttpxPlatformTransport, SessionState, get_tokens

    state = SessionState(
        host="https://tenant.example.com/am",
        username="admin",
        password="secret",
    )
    async with HttpxPlatformTransport() as transport:
        if await get_tokens(state, transport):
            print(state.deployment_type, state.realm, state.am_version)
    ```

Submodules:
    - `journey`: authentication journey callbacks and step driver
    - `oauth2`: PKCE, deployment detection and token acquisition
    - `profiles`: saved connection profiles
    - `transport`: httpx transport
    - `observability`: OpenTelemetry tracing helpers
"""

from __future__ import annotations

from .authenticate import (
    Authenticator,
    determine_default_realm,
    determine_deployment_type_realm_and_version,
    get_logged_in_subject,
    get_tokens,
)
from .config import (
    DEFAULT_CONFIG,
    DEFAULT_REALM_KEY,
    DEPLOYMENT_TYPE_REALM_MAP,
    DeploymentType,
    PlatformAuthConfig,
)
from .exceptions import (
    ConfigurationError,
    ConnectionProfileError,
    JourneyError,
    PlatformApiError,
    PlatformAuthError,
    PlatformConnectionError,
    ServiceAccountAuthError,
    UnrecognizedCallbackError,
    UnsupportedFactorError,
    VersionParseError,
)
from .journey import (
    ConsoleChallengeAnswerer,
    JourneyDriver,
    JourneyOutcome,
    StaticChallengeAnswerer,
)
from .oauth2 import (
    create_signed_jwt_token,
    determine_deployment_type,
    get_access_token_for_service_account,
    get_access_token_for_user,
)
from .ports import (
    HttpResponse,
    IChallengeAnswerer,
    IConnectionProfileSource,
    IJwtSigner,
    IPlatformTransport,
    ServerInfo,
    TokenResponse,
    VersionInfo,
)
from .profiles import (
    ConnectionProfile,
    InMemoryConnectionProfileStore,
    JsonConnectionProfileStore,
)
from .state import SessionState, is_valid_url
from .transport import HttpxPlatformTransport
from .version import get_semantic_version

__all__: list[str] = [
    # Session
    "SessionState",
    "is_valid_url",
    "Authenticator",
    "get_tokens",
    "determine_default_realm",
    "determine_deployment_type_realm_and_version",
    "get_logged_in_subject",
    # Configuration
    "DeploymentType",
    "PlatformAuthConfig",
    "DEFAULT_CONFIG",
    "DEFAULT_REALM_KEY",
    "DEPLOYMENT_TYPE_REALM_MAP",
    # Exceptions
    "PlatformAuthError",
    "ConfigurationError",
    "JourneyError",
    "UnsupportedFactorError",
    "UnrecognizedCallbackError",
    "PlatformApiError",
    "PlatformConnectionError",
    "VersionParseError",
    "ServiceAccountAuthError",
    "ConnectionProfileError",
    # Journey
    "JourneyDriver",
    "JourneyOutcome",
    "ConsoleChallengeAnswerer",
    "StaticChallengeAnswerer",
    # OAuth2
    "determine_deployment_type",
    "get_access_token_for_user",
    "get_access_token_for_service_account",
    "create_signed_jwt_token",
    # Ports
    "HttpResponse",
    "ServerInfo",
    "VersionInfo",
    "TokenResponse",
    "IPlatformTransport",
    "IConnectionProfileSource",
    "IChallengeAnswerer",
    "IJwtSigner",
    # Profiles
    "ConnectionProfile",
    "JsonConnectionProfileStore",
    "InMemoryConnectionProfileStore",
    # Transport
    "HttpxPlatformTransport",
    # Version
    "get_semantic_version",
]
