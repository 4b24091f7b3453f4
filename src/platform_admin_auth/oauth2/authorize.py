"""Authorization request helpers shared by deployment probing and token exchange."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urljoin, urlparse

if TYPE_CHECKING:
    from ..config import PlatformAuthConfig
    from ..state import SessionState
    from .pkce import PKCEData


def get_redirect_url(host: str, config: PlatformAuthConfig) -> str:
    """Redirect URI registered for the admin clients, resolved against host.

    The redirect path is absolute, so any path on host is replaced.
    """
    return urljoin(host, config.redirect_path)


def build_authorization_form(
    state: SessionState,
    *,
    client_id: str,
    scope: str,
    pkce: PKCEData,
    redirect_url: str,
) -> dict[str, str]:
    """Form body for a consent-free authorization code request.

    The session token doubles as the CSRF value and ``decision=allow``
    skips the consent page, so a logged-in admin gets a code redirect.
    """
    return {
        "redirect_uri": redirect_url,
        "scope": scope,
        "response_type": "code",
        "client_id": client_id,
        "csrf": state.cookie_value or "",
        "decision": "allow",
        "code_challenge": pkce.code_challenge,
        "code_challenge_method": pkce.code_challenge_method,
    }


def session_headers(state: SessionState) -> dict[str, str]:
    """Session token header keyed by the server's cookie name."""
    if state.cookie_name and state.cookie_value:
        return {state.cookie_name: state.cookie_value}
    return {}


def location_has_code(location: str | None) -> bool:
    return location is not None and "code=" in location


def extract_code(location: str | None) -> str | None:
    """Authorization code from a redirect Location, or None."""
    if not location:
        return None
    codes = parse_qs(urlparse(location).query).get("code")
    return codes[0] if codes else None


__all__: list[str] = [
    "get_redirect_url",
    "build_authorization_form",
    "session_headers",
    "location_has_code",
    "extract_code",
]
