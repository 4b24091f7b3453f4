"""Static configuration for platform admin authentication.

Client registrations, scope sets and realm defaults differ per deployment
type. They are grouped in a frozen dataclass so that tests and embedding
applications can override individual values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum


class DeploymentType(str, Enum):
    """Packaging flavor of the platform.

    Each flavor registers different OAuth2 admin clients and uses a
    different default realm.
    """

    CLOUD = "cloud"
    FORGEOPS = "forgeops"
    CLASSIC = "classic"


DEFAULT_REALM_KEY = "__default__realm__"

DEPLOYMENT_TYPE_REALM_MAP: dict[DeploymentType, str] = {
    DeploymentType.CLOUD: "alpha",
    DeploymentType.FORGEOPS: "/",
    DeploymentType.CLASSIC: "/",
}

ENV_PREFIX = "PLATFORM_AUTH_"


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(f"{ENV_PREFIX}{name}")
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class PlatformAuthConfig:
    """Configuration for the authentication state machine.

    Attributes:
        cloud_admin_client_id: Admin client registered on cloud tenants.
        forgeops_admin_client_id: Admin client registered on ForgeOps deployments.
        admin_client_password: Placeholder secret the cloud admin client requires.
        redirect_path: Redirect URI path registered for both admin clients.
        cloud_admin_scopes: Scopes requested from cloud tenants.
        forgeops_admin_scopes: Scopes requested from ForgeOps deployments.
        service_account_scopes: Scopes requested with the JWT-bearer grant.
        service_account_client_id: Client id sent with the JWT-bearer grant.
        jwt_lifetime: Service-account assertion lifetime in seconds.
        max_journey_steps: Follow-up round-trips allowed after the first journey step.
        timeout: HTTP timeout in seconds.
        verify: Verify TLS certificates.
    """

    cloud_admin_client_id: str = "idmAdminClient"
    forgeops_admin_client_id: str = "idm-admin-ui"
    admin_client_password: str = "doesnotmatter"  # noqa: S105
    redirect_path: str = "/platform/appAuthHelperRedirect.html"
    cloud_admin_scopes: str = "openid fr:idm:* fr:idc:esv:*"
    forgeops_admin_scopes: str = "openid fr:idm:*"
    service_account_scopes: str = "fr:am:* fr:idm:* fr:idc:esv:*"
    service_account_client_id: str = "service-account"
    jwt_lifetime: int = 180
    max_journey_steps: int = 3
    timeout: float = 30.0
    verify: bool = True

    def scopes_for(self, deployment_type: DeploymentType | None) -> str:
        """Admin scope set for a deployment type."""
        if deployment_type == DeploymentType.CLOUD:
            return self.cloud_admin_scopes
        return self.forgeops_admin_scopes

    @classmethod
    def from_env(cls) -> PlatformAuthConfig:
        """Build a configuration, applying ``PLATFORM_AUTH_*`` overrides.

        Recognized variables: ``PLATFORM_AUTH_TIMEOUT``,
        ``PLATFORM_AUTH_MAX_JOURNEY_STEPS`` and ``PLATFORM_AUTH_VERIFY``.
        Opt-in: ``DEFAULT_CONFIG`` ignores the environment, so callers pass
        the result as ``config=`` to apply it.
        """
        config = cls()
        timeout = os.environ.get(f"{ENV_PREFIX}TIMEOUT")
        if timeout:
            config = replace(config, timeout=float(timeout))
        steps = os.environ.get(f"{ENV_PREFIX}MAX_JOURNEY_STEPS")
        if steps:
            config = replace(config, max_journey_steps=int(steps))
        return replace(config, verify=_env_bool("VERIFY", config.verify))


DEFAULT_CONFIG = PlatformAuthConfig()

__all__: list[str] = [
    "DeploymentType",
    "DEFAULT_REALM_KEY",
    "DEPLOYMENT_TYPE_REALM_MAP",
    "PlatformAuthConfig",
    "DEFAULT_CONFIG",
]
