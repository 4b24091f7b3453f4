"""Platform authentication exceptions.

All errors raised by this package inherit from PlatformAuthError so that
callers can catch the whole family at a single boundary.
"""

from __future__ import annotations

from typing import Any

# ═══════════════════════════════════════════════════════════════
# BASE ERROR
# ═══════════════════════════════════════════════════════════════


class PlatformAuthError(Exception):
    """Base class for all platform authentication errors."""


class ConfigurationError(PlatformAuthError):
    """Raised when the session is not usable before any network call.

    Examples:
        - No host configured
        - Host is not a valid URL and no connection profile resolves it
        - Incomplete or no credentials
    """


# ═══════════════════════════════════════════════════════════════
# JOURNEY ERRORS
# ═══════════════════════════════════════════════════════════════


class JourneyError(PlatformAuthError):
    """Base class for authentication journey errors."""


class UnsupportedFactorError(JourneyError):
    """Raised when the journey asks for a factor that cannot be answered headlessly.

    Attributes:
        factor: Name of the unsupported factor (e.g. "WebAuthN").
    """

    def __init__(self, factor: str, message: str | None = None) -> None:
        super().__init__(message or f"Unsupported 2FA factor: {factor}")
        self.factor = factor


class UnrecognizedCallbackError(JourneyError):
    """Raised when a journey step carries a callback type outside the known set.

    Attributes:
        callback_type: The callback "type" string the server sent.
    """

    def __init__(self, callback_type: str) -> None:
        super().__init__(f"Unrecognized journey callback: {callback_type}")
        self.callback_type = callback_type


# ═══════════════════════════════════════════════════════════════
# TRANSPORT ERRORS
# ═══════════════════════════════════════════════════════════════


class PlatformApiError(PlatformAuthError):
    """HTTP error returned by a platform REST endpoint.

    Attributes:
        status_code: HTTP status code.
        endpoint: URL that failed.
        data: Parsed response body (dict when JSON, raw text otherwise).
    """

    def __init__(self, status_code: int, endpoint: str, data: Any = None) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        self.data = data
        super().__init__(f"[{status_code}] {endpoint}: {self.detail}")

    @property
    def error_description(self) -> str | None:
        """OAuth2 ``error_description`` from the response body, if any."""
        if isinstance(self.data, dict):
            return self.data.get("error_description")
        return None

    @property
    def message(self) -> str | None:
        """Platform API ``message`` from the response body, if any."""
        if isinstance(self.data, dict):
            return self.data.get("message")
        return None

    @property
    def detail(self) -> str:
        """Most descriptive message available from the response."""
        if self.error_description:
            return self.error_description
        if self.message:
            return self.message
        return str(self.data) if self.data else "no response body"


class PlatformConnectionError(PlatformAuthError):
    """Raised when a request never produced an HTTP response (DNS, TLS, timeout)."""


class VersionParseError(PlatformAuthError):
    """Raised when no semantic version can be extracted from server version info."""


# ═══════════════════════════════════════════════════════════════
# TOKEN ERRORS
# ═══════════════════════════════════════════════════════════════


class ServiceAccountAuthError(PlatformAuthError):
    """Raised when the service-account JWT-bearer exchange fails.

    Service-account failures are always fatal; there is no fallback
    to user login.
    """


# ═══════════════════════════════════════════════════════════════
# CONNECTION PROFILE ERRORS
# ═══════════════════════════════════════════════════════════════


class ConnectionProfileError(PlatformAuthError):
    """Raised when the connection profile file cannot be read or written."""


__all__: list[str] = [
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
]
