"""OAuth2 PKCE (Proof Key for Code Exchange) utilities.

Every authorization request sent by this package, including the deployment
detection requests, carries an S256 code challenge.

RFC 7636: https://datatracker.ietf.org/doc/html/rfc7636
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class PKCEData:
    """PKCE verification data.

    Attributes:
        code_verifier: Random string (43-128 chars) sent with the token exchange.
        code_challenge: S256 hash of the verifier sent with the authorize request.
        code_challenge_method: Always "S256" for SHA256.
    """

    code_verifier: str
    code_challenge: str
    code_challenge_method: Literal["S256"] = "S256"


def generate_pkce_verifier(length: int = 43) -> str:
    """Generate a cryptographically random code_verifier.

    Args:
        length: Length of verifier (default 43, range 43-128).

    Returns:
        URL-safe random string.

    Raises:
        ValueError: If length is outside valid range.
    """
    if length < 43 or length > 128:
        raise ValueError("code_verifier length must be between 43 and 128 characters")

    random_bytes = secrets.token_bytes(length)
    verifier = base64.urlsafe_b64encode(random_bytes).decode().rstrip("=")
    return verifier[:length]


def generate_pkce_challenge(verifier: str) -> str:
    """Generate code_challenge from code_verifier using S256 method.

    code_challenge = BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))
    """
    digest = hashlib.sha256(verifier.encode()).digest()
    return base64.urlsafe_b64encode(digest).decode().rstrip("=")


def create_pkce_data(verifier_length: int = 43) -> PKCEData:
    """Create a fresh verifier/challenge pair."""
    verifier = generate_pkce_verifier(verifier_length)
    challenge = generate_pkce_challenge(verifier)
    return PKCEData(code_verifier=verifier, code_challenge=challenge)


__all__: list[str] = [
    "PKCEData",
    "generate_pkce_verifier",
    "generate_pkce_challenge",
    "create_pkce_data",
]
