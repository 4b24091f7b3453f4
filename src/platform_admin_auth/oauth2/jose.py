"""Service-account JWT assertion signing with joserfc."""

from __future__ import annotations

import time
import uuid
from typing import Any
from urllib.parse import urlparse

from joserfc import jwt
from joserfc.jwk import import_key


def create_signed_jwt_token(payload: dict[str, Any], jwk: dict[str, Any]) -> str:
    """Sign a claims payload with a private JWK.

    Args:
        payload: JWT claims.
        jwk: Private key in JWK form. Its ``alg`` is honored, RS256 otherwise.

    Returns:
        Compact JWT serialization.
    """
    key = import_key(jwk)
    header: dict[str, Any] = {"alg": jwk.get("alg", "RS256")}
    if jwk.get("kid"):
        header["kid"] = jwk["kid"]
    return jwt.encode(header, payload, key)


def get_token_audience(host: str) -> str:
    """Token endpoint URL the assertion is addressed to.

    The port is always explicit, e.g.
    ``https://tenant.example.com:443/am/oauth2/access_token``.
    """
    parsed = urlparse(host)
    netloc = parsed.netloc.rpartition("@")[2]
    if parsed.port is None:
        default_port = 443 if parsed.scheme == "https" else 80
        netloc = f"{netloc}:{default_port}"
    path = parsed.path.rstrip("/")
    return f"{parsed.scheme}://{netloc}{path}/oauth2/access_token"


def create_service_account_payload(
    service_account_id: str, host: str, lifetime: int = 180
) -> dict[str, Any]:
    """Claims for a JWT-bearer grant assertion.

    Issuer and subject are the service account. ``exp`` is whole seconds
    since the epoch and ``jti`` is unique per call, so a fresh payload is
    needed for every token request.
    """
    return {
        "iss": service_account_id,
        "sub": service_account_id,
        "aud": get_token_audience(host),
        "exp": int(time.time()) + lifetime,
        "jti": str(uuid.uuid4()),
    }


__all__: list[str] = [
    "create_signed_jwt_token",
    "get_token_audience",
    "create_service_account_payload",
]
