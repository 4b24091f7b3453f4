"""Collaborator ports (protocols) consumed by the authentication state machine.

The state machine never talks HTTP or touches the filesystem itself. It is
handed a transport, a connection profile source and a challenge answerer
that satisfy these protocols. All ports use @runtime_checkable for
isinstance checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .profiles.models import ConnectionProfile
    from .state import SessionState


# ═══════════════════════════════════════════════════════════════
# DATA TRANSFER OBJECTS
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class HttpResponse:
    """Status, headers and decoded body of one HTTP exchange.

    Redirect responses are returned as-is so callers can read the
    ``location`` header without treating a 302 as an error.

    Attributes:
        status: HTTP status code.
        headers: Response headers with lower-cased names.
        data: Decoded JSON body, raw text, or None when empty.
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None

    @property
    def location(self) -> str | None:
        return self.headers.get("location")

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400


@dataclass(frozen=True)
class ServerInfo:
    """Subset of the server info document needed to authenticate."""

    cookie_name: str


@dataclass(frozen=True)
class VersionInfo:
    """Server version document.

    Attributes:
        version: Human-readable version, e.g. "7.3.0 Build abc".
        full_version: Full build string.
    """

    version: str | None = None
    full_version: str | None = None


@dataclass(frozen=True)
class TokenResponse:
    """OAuth2 token endpoint response.

    Attributes:
        access_token: The access token for API calls.
        expires_in: Access token lifetime in seconds.
        token_type: Token type (usually "Bearer").
        scope: Granted scopes.
    """

    access_token: str
    expires_in: int | None = None
    token_type: str = "Bearer"  # noqa: S105
    scope: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TokenResponse:
        return cls(
            access_token=data["access_token"],
            expires_in=data.get("expires_in"),
            token_type=data.get("token_type", "Bearer"),
            scope=data.get("scope"),
        )


# ═══════════════════════════════════════════════════════════════
# TRANSPORT PORT
# ═══════════════════════════════════════════════════════════════


@runtime_checkable
class IPlatformTransport(Protocol):
    """Protocol for the platform REST calls the state machine needs.

    Implementations attach the session's cookie or bearer identity to
    each request. Timeouts and cancellation are the transport's concern.

    Implementations:
        - HttpxPlatformTransport
    """

    async def step(
        self,
        state: SessionState,
        body: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        realm: str = "/",
        service: str | None = None,
    ) -> dict[str, Any]:
        """POST one authentication journey step.

        Args:
            state: Session state (host, header overrides).
            body: Step payload; empty for the first step.
            headers: Extra headers, e.g. credential bootstrap headers.
            realm: Realm hosting the journey.
            service: Journey name; server default when None.

        Returns:
            The decoded step response.

        Raises:
            PlatformApiError: On an HTTP error status.
        """
        ...

    async def authorize(
        self,
        state: SessionState,
        form: dict[str, str],
        *,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """POST to the OAuth2 authorize endpoint without following redirects.

        Never raises for a non-2xx status; the caller inspects
        ``status`` and ``location``.
        """
        ...

    async def access_token(
        self,
        state: SessionState,
        form: dict[str, str],
        *,
        auth: tuple[str, str] | None = None,
    ) -> HttpResponse:
        """POST to the OAuth2 token endpoint.

        Args:
            state: Session state.
            form: Grant parameters.
            auth: Optional client basic credentials.

        Raises:
            PlatformApiError: On an HTTP error status.
        """
        ...

    async def get_server_info(self, state: SessionState) -> ServerInfo:
        """Fetch the server info document (cookie name)."""
        ...

    async def get_server_version_info(self, state: SessionState) -> VersionInfo:
        """Fetch the server version document."""
        ...

    async def get_service_account(
        self, state: SessionState, service_account_id: str
    ) -> dict[str, Any]:
        """Fetch a service account object (used for its display name)."""
        ...


# ═══════════════════════════════════════════════════════════════
# CREDENTIAL SOURCE PORT
# ═══════════════════════════════════════════════════════════════


@runtime_checkable
class IConnectionProfileSource(Protocol):
    """Protocol for resolving saved credentials for a tenant.

    Implementations:
        - JsonConnectionProfileStore
        - InMemoryConnectionProfileStore
    """

    async def get_connection_profile(
        self, state: SessionState
    ) -> ConnectionProfile | None:
        """Resolve the profile whose tenant URL contains ``state.host``.

        Returns:
            The unique matching profile with plaintext secrets, or None
            when no profile or more than one profile matches.
        """
        ...


# ═══════════════════════════════════════════════════════════════
# CHALLENGE ANSWERER PORT
# ═══════════════════════════════════════════════════════════════


@runtime_checkable
class IChallengeAnswerer(Protocol):
    """Protocol for answering one-time-code prompts during a journey.

    Interactive callers prompt the operator; automated callers return
    codes programmatically.

    Implementations:
        - ConsoleChallengeAnswerer
        - StaticChallengeAnswerer
    """

    async def answer(self, prompt: str) -> str:
        """Return the answer for a prompt such as "One Time Password code"."""
        ...


@runtime_checkable
class IJwtSigner(Protocol):
    """Callable that signs a claims payload with a private JWK.

    Returns the compact JWT serialization.
    """

    def __call__(self, payload: dict[str, Any], jwk: dict[str, Any]) -> str: ...


__all__: list[str] = [
    "HttpResponse",
    "ServerInfo",
    "VersionInfo",
    "TokenResponse",
    "IPlatformTransport",
    "IConnectionProfileSource",
    "IChallengeAnswerer",
    "IJwtSigner",
]
