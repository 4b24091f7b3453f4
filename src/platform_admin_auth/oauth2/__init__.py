"""OAuth2 module: PKCE, deployment probing and token acquisition."""

from .deployment import determine_deployment_type
from .jose import (
    create_service_account_payload,
    create_signed_jwt_token,
    get_token_audience,
)
from .pkce import (
    PKCEData,
    create_pkce_data,
    generate_pkce_challenge,
    generate_pkce_verifier,
)
from .tokens import (
    JWT_BEARER_GRANT,
    get_access_token_for_service_account,
    get_access_token_for_user,
    get_auth_code,
)

__all__: list[str] = [
    # PKCE
    "PKCEData",
    "generate_pkce_verifier",
    "generate_pkce_challenge",
    "create_pkce_data",
    # JOSE
    "create_signed_jwt_token",
    "create_service_account_payload",
    "get_token_audience",
    # Deployment
    "determine_deployment_type",
    # Tokens
    "JWT_BEARER_GRANT",
    "get_auth_code",
    "get_access_token_for_user",
    "get_access_token_for_service_account",
]
